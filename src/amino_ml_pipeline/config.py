"""Top-level run configuration tying input, output and stage settings together."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from amino_ml_pipeline.data.dataset import SchemaConfig
from amino_ml_pipeline.data.split import SplitConfig
from amino_ml_pipeline.modeling.modeling import BoosterConfig


@dataclass(frozen=True)
class PipelineConfig:
    input_csv: Path
    output_dir: Path | None = None
    schema: SchemaConfig = field(default_factory=SchemaConfig)
    split: SplitConfig = field(default_factory=SplitConfig)
    booster: BoosterConfig = field(default_factory=BoosterConfig)
    separator: str = ","

    @classmethod
    def from_csv(
        cls,
        input_csv: str | Path,
        output_dir: str | Path | None = None,
        **kwargs,
    ) -> "PipelineConfig":
        input_path = Path(input_csv)
        if output_dir is None:
            output_dir = input_path.parent / f"{input_path.stem}_ml_pipeline"
        return cls(input_csv=input_path, output_dir=Path(output_dir), **kwargs)
