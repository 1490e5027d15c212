"""Tests for loading, cleaning, feature selection and splitting."""

import numpy as np
import pandas as pd
import pytest

from src.config.constants import SELECTED_FEATURES, ZERO_FILTER_COLUMNS
from src.data.load import clean_records, load_records, zero_value_summary
from src.features.preprocess import (
    ModelSpec,
    correlated_pairs,
    generate_correlation_heatmap,
    select_features,
    split_records,
)
from src.models.evaluate import predict_proba


class TestLoadRecords:
    """Test CSV loading."""

    def test_missing_file_is_fatal(self, tmp_path):
        """Test that an absent dataset raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_records(tmp_path / "diabetes.csv")

    def test_reads_valid_csv(self, tmp_path, records):
        """Test that a valid CSV round-trips through the loader."""
        path = tmp_path / "diabetes.csv"
        records.to_csv(path, index=False)

        df = load_records(path)

        assert len(df) == len(records)
        assert list(df.columns) == list(records.columns)

    def test_invalid_csv_rejected(self, tmp_path, records):
        """Test that schema violations stop the load."""
        path = tmp_path / "diabetes.csv"
        records.drop(columns="Outcome").to_csv(path, index=False)

        with pytest.raises(ValueError, match="Missing required columns"):
            load_records(path)


class TestCleanRecords:
    """Test zero-sentinel row removal."""

    def test_no_zeros_remain(self, raw_records):
        """Test that cleaned records have no zero in any filtered column."""
        cleaned = clean_records(raw_records)

        assert not (cleaned[ZERO_FILTER_COLUMNS] == 0).any().any()
        assert len(cleaned) == len(raw_records) - 40

    def test_cleaning_is_idempotent(self, raw_records):
        """Test that re-cleaning a cleaned table changes nothing."""
        once = clean_records(raw_records)
        twice = clean_records(once)

        pd.testing.assert_frame_equal(once, twice)

    def test_preserves_index_labels(self, raw_records):
        """Test that surviving rows keep their source index."""
        cleaned = clean_records(raw_records)

        assert set(cleaned.index) <= set(raw_records.index)
        pd.testing.assert_frame_equal(cleaned, raw_records.loc[cleaned.index])

    def test_only_requested_columns_filtered(self):
        """Test that zeros outside the filter columns are kept."""
        df = pd.DataFrame({"Glucose": [0, 100, 110], "Pregnancies": [0, 0, 2]})

        cleaned = clean_records(df, ["Glucose"])

        assert cleaned.index.tolist() == [1, 2]

    def test_zero_value_summary(self):
        """Test zero counts and percentages."""
        df = pd.DataFrame({"Glucose": [0, 100, 110, 120], "BMI": [0, 0, 30.0, 31.0]})

        summary = zero_value_summary(df, ["Glucose", "BMI"])

        assert summary.loc["BMI", "zeros"] == 2
        assert summary.loc["Glucose", "zeros_pct"] == 25.0
        assert summary.index[0] == "BMI"

    def test_empty_column_list_filters_nothing(self, raw_records):
        """Test that an explicit empty column list keeps every row instead of the default set."""
        cleaned = clean_records(raw_records, [])

        pd.testing.assert_frame_equal(cleaned, raw_records)

    def test_empty_column_list_summary_is_empty(self, raw_records):
        """Test that summarising no columns yields an empty table."""
        summary = zero_value_summary(raw_records, [])

        assert summary.empty
        assert list(summary.columns) == ["zeros", "zeros_pct"]


class TestFeatureSelection:
    """Test correlation screening and column selection."""

    def test_correlated_pairs_finds_redundant_measurements(self, records):
        """Test that SkinThickness/BMI and Insulin/Glucose are flagged."""
        pairs = correlated_pairs(records, threshold=0.58)
        found = {frozenset((a, b)) for a, b in zip(pairs["feature_a"], pairs["feature_b"])}

        assert frozenset(("SkinThickness", "BMI")) in found
        assert frozenset(("Insulin", "Glucose")) in found
        assert (pairs["correlation"].abs() >= 0.58).all()

    def test_correlated_pairs_empty_above_one(self, records):
        """Test that an unreachable threshold yields no pairs."""
        pairs = correlated_pairs(records, threshold=1.01)

        assert pairs.empty
        assert list(pairs.columns) == ["feature_a", "feature_b", "correlation"]

    def test_select_features_keeps_predictors_and_outcome(self, records):
        """Test the selected column set and order."""
        selected = select_features(records)

        assert list(selected.columns) == SELECTED_FEATURES + ["Outcome"]

    def test_select_features_unknown_column_is_fatal(self, records):
        """Test that a malformed column reference raises KeyError."""
        spec = ModelSpec(predictors=["Glucose", "Glucoze"])

        with pytest.raises(KeyError, match="Glucoze"):
            select_features(records, spec)

    def test_model_spec_formula(self):
        """Test formula and coefficient naming."""
        spec = ModelSpec()

        assert spec.formula == "Outcome ~ Glucose + BMI + DiabetesPedigreeFunction + BloodPressure"
        assert spec.coefficient_names[0] == "Intercept"
        assert len(spec.coefficient_names) == 5

    def test_model_spec_is_hashable_and_immutable(self):
        """Test that the frozen spec stores predictors as a tuple and can be hashed."""
        predictors = ["Glucose", "BMI"]
        spec = ModelSpec(predictors=predictors)
        predictors.append("Age")

        assert spec.predictors == ("Glucose", "BMI")
        assert hash(spec) == hash(ModelSpec(predictors=("Glucose", "BMI")))
        assert {spec: "fit"}[ModelSpec(predictors=["Glucose", "BMI"])] == "fit"
        assert isinstance(ModelSpec().predictors, tuple)

    def test_tuple_spec_drives_selection_and_prediction(self, records):
        """Test that a tuple of predictors indexes dataframe columns."""
        spec = ModelSpec(predictors=("Glucose", "BMI"))

        selected = select_features(records, spec)
        proba = predict_proba([0.0, 0.0, 0.0], selected, spec)

        assert list(selected.columns) == ["Glucose", "BMI", "Outcome"]
        assert np.allclose(proba, 0.5)

    def test_correlation_heatmap_written(self, tmp_path, records):
        """Test that the heatmap is saved."""
        output_path = tmp_path / "heatmap.png"

        generate_correlation_heatmap(records, output_path)

        assert output_path.exists()


class TestSplitRecords:
    """Test stratified train/test partition."""

    def test_split_is_disjoint_and_covering(self, records):
        """Test that every row lands in exactly one subset."""
        train, test = split_records(records, 0.7, random_seed=1)

        assert set(train.index).isdisjoint(test.index)
        assert set(train.index) | set(test.index) == set(records.index)
        assert len(train) == 280

    def test_split_preserves_positive_rate(self, records):
        """Test stratification within three percentage points."""
        train, test = split_records(records, 0.7, random_seed=1)
        overall = records["Outcome"].mean()

        assert abs(train["Outcome"].mean() - overall) <= 0.03
        assert abs(test["Outcome"].mean() - overall) <= 0.03

    def test_split_is_reproducible(self, records):
        """Test that a fixed seed reproduces the membership."""
        train_a, test_a = split_records(records, 0.7, random_seed=7)
        train_b, test_b = split_records(records, 0.7, random_seed=7)

        assert train_a.index.tolist() == train_b.index.tolist()
        assert test_a.index.tolist() == test_b.index.tolist()

    def test_different_seeds_differ(self, records):
        """Test that the seed actually drives the partition."""
        train_a, _ = split_records(records, 0.7, random_seed=7)
        train_b, _ = split_records(records, 0.7, random_seed=8)

        assert set(train_a.index) != set(train_b.index)

    def test_invalid_fraction_rejected(self, records):
        """Test that fractions outside (0, 1) are rejected."""
        with pytest.raises(ValueError):
            split_records(records, 1.0, random_seed=1)
