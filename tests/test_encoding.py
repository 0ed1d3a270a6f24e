"""Tests for categorical and label encoding."""

import numpy as np
import polars as pl
import pytest

from amino_ml_pipeline.data.dataset import DatasetError, SchemaConfig
from amino_ml_pipeline.data.encoding import (
    FLAG_CODES,
    LABEL_CODES,
    SEX_CODES,
    UnmappedCategoryError,
    build_category_mappings,
    encode_categoricals,
    encode_label,
    encode_table,
    feature_view,
    label_view,
    to_matrix,
)

from conftest import ABNORMAL, NORMAL


class TestCategoryCodes:
    """Tests for the static code tables."""

    def test_sex_codes(self):
        df = pl.DataFrame({"SEX": ["F", "M", "U"]})
        out = encode_categoricals(df, {"SEX": SEX_CODES})
        assert out.get_column("SEX").to_list() == [0, 1, 2]

    def test_flag_codes(self):
        df = pl.DataFrame({"ASA": ["N", "Y", "N"]})
        out = encode_categoricals(df, {"ASA": FLAG_CODES})
        assert out.get_column("ASA").to_list() == [0, 1, 0]

    def test_label_codes(self):
        df = pl.DataFrame({"CLASS": [NORMAL, ABNORMAL]})
        out = encode_label(df, "CLASS")
        assert out.get_column("CLASS").to_list() == [0, 1]
        assert LABEL_CODES == {NORMAL: 0, ABNORMAL: 1}

    def test_mappings_for_schema(self):
        schema = SchemaConfig(flag_columns=("ASA", "HIST"))
        mappings = build_category_mappings(schema)
        assert mappings == {"SEX": SEX_CODES, "ASA": FLAG_CODES, "HIST": FLAG_CODES}


class TestEncodeCategoricals:
    """Tests for encode_categoricals()."""

    def test_non_categorical_fields_untouched(self, small_table):
        out = encode_table(small_table)
        assert out.height == small_table.height
        assert out.columns == small_table.columns
        for col in ("ID", "Ala", "Phe", "Tyr"):
            assert out.get_column(col).to_list() == small_table.get_column(col).to_list()

    def test_input_not_mutated(self, small_table):
        before = small_table.clone()
        encode_table(small_table)
        assert small_table.equals(before)

    def test_unmapped_value_raises(self):
        df = pl.DataFrame({"SEX": ["F", "X", "M", "X"]})
        with pytest.raises(UnmappedCategoryError) as excinfo:
            encode_categoricals(df, {"SEX": SEX_CODES})
        assert excinfo.value.column == "SEX"
        assert excinfo.value.values == ["X"]

    def test_null_value_raises(self):
        df = pl.DataFrame({"ASA": ["N", None]})
        with pytest.raises(UnmappedCategoryError, match="<null>"):
            encode_categoricals(df, {"ASA": FLAG_CODES})

    def test_non_text_column_reports_unmapped(self):
        df = pl.DataFrame({"SEX": [0, 1, 5]})
        with pytest.raises(UnmappedCategoryError) as excinfo:
            encode_categoricals(df, {"SEX": SEX_CODES})
        assert excinfo.value.values == [0, 1, 5]

    def test_codes_are_case_sensitive(self):
        df = pl.DataFrame({"ASA": ["y"]})
        with pytest.raises(UnmappedCategoryError):
            encode_categoricals(df, {"ASA": FLAG_CODES})

    def test_missing_column_raises(self):
        df = pl.DataFrame({"SEX": ["F"]})
        with pytest.raises(DatasetError, match="ASA"):
            encode_categoricals(df, {"ASA": FLAG_CODES})

    def test_unknown_label_raises(self):
        df = pl.DataFrame({"CLASS": [NORMAL, "Abnormal"]})
        with pytest.raises(UnmappedCategoryError, match="Abnormal"):
            encode_label(df, "CLASS")

    def test_unmapped_error_is_value_error(self):
        assert issubclass(UnmappedCategoryError, ValueError)


class TestViews:
    """Tests for the feature/label views."""

    def test_feature_view_excludes_id_and_outcome(self, small_table):
        encoded = encode_table(small_table)
        features = feature_view(encoded)
        assert features.columns == ["SEX", "Ala", "Phe", "Tyr", "ASA"]
        assert "CLASS" not in features.columns

    def test_feature_view_honours_drop_columns(self, small_table):
        schema = SchemaConfig(drop_columns=("Tyr",))
        features = feature_view(encode_table(small_table, schema), schema)
        assert "Tyr" not in features.columns

    def test_label_view(self, small_table):
        encoded = encode_table(small_table)
        labels = label_view(encoded)
        expected = [1 if v == ABNORMAL else 0 for v in small_table.get_column("CLASS").to_list()]
        assert labels.to_list() == expected

    def test_to_matrix(self, small_table):
        X, y, names = to_matrix(encode_table(small_table))
        assert X.shape == (10, 5)
        assert X.dtype == np.float64
        assert y.dtype == np.int64
        assert names == ["SEX", "Ala", "Phe", "Tyr", "ASA"]

    def test_to_matrix_requires_encoding(self, small_table):
        with pytest.raises(DatasetError, match="not fully encoded"):
            to_matrix(small_table)
