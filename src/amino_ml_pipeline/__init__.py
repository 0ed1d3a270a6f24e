"""Amino-acid screening classifier: load, encode, split, boost, evaluate."""

from amino_ml_pipeline.config import PipelineConfig

# Data
from amino_ml_pipeline.data.dataset import (
    DatasetConfig,
    DatasetError,
    SchemaConfig,
    load_dataset,
    load_records,
)
from amino_ml_pipeline.data.encoding import (
    CATEGORY_MAPPINGS,
    FLAG_CODES,
    LABEL_CODES,
    SEX_CODES,
    UnmappedCategoryError,
    encode_categoricals,
    encode_label,
    encode_table,
    feature_view,
    label_view,
    to_matrix,
)
from amino_ml_pipeline.data.split import PartitionTriple, SplitConfig, partition, split_dataset

# Modeling
from amino_ml_pipeline.modeling.evaluate import EvalResult, evaluate_classification
from amino_ml_pipeline.modeling.modeling import (
    BoosterConfig,
    ExperimentResult,
    TrainResult,
    run_experiment,
    train_booster,
)

__all__ = [
    # Config
    "PipelineConfig",
    # Data
    "DatasetConfig",
    "DatasetError",
    "SchemaConfig",
    "load_dataset",
    "load_records",
    "CATEGORY_MAPPINGS",
    "FLAG_CODES",
    "LABEL_CODES",
    "SEX_CODES",
    "UnmappedCategoryError",
    "encode_categoricals",
    "encode_label",
    "encode_table",
    "feature_view",
    "label_view",
    "to_matrix",
    "PartitionTriple",
    "SplitConfig",
    "partition",
    "split_dataset",
    # Modeling
    "EvalResult",
    "evaluate_classification",
    "BoosterConfig",
    "ExperimentResult",
    "TrainResult",
    "run_experiment",
    "train_booster",
]
