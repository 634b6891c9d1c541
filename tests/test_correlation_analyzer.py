"""Tests for correlation and covariance."""

import math

import pandas as pd
import pytest

from recstats import ConfigurationError, RecordSet
from recstats.analysis.correlation_analyzer import CorrelationResult, correlate, covariance


@pytest.fixture
def paired() -> RecordSet:
    """Linearly related fields with one gap and one non-numeric value."""
    return RecordSet(
        [
            {"x": 1, "y": 2, "z": 8},
            {"x": 2, "y": 4, "z": 6},
            {"x": 3, "y": 6, "z": 4},
            {"x": 4, "y": 8, "z": 2},
            {"x": 5, "z": "?"},
        ],
    )


class TestCorrelate:
    """Pearson coefficient over pairwise-complete records."""

    def test_perfect_positive(self, paired) -> None:
        """Linearly increasing fields correlate at 1."""
        assert paired.correlate("x", "y") == pytest.approx(1.0)

    def test_perfect_negative(self, paired) -> None:
        """Opposite trends correlate at -1."""
        assert paired.correlate("x", "z") == pytest.approx(-1.0)

    def test_identical_field(self, paired) -> None:
        """A field correlates perfectly with itself."""
        assert correlate(paired, "x", "x") == pytest.approx(1.0)

    def test_fewer_than_two_pairs_is_nan(self) -> None:
        """One complete pair leaves Pearson undefined."""
        assert math.isnan(correlate([{"a": 1, "b": 2}], "a", "b"))

    def test_zero_variance_is_nan(self) -> None:
        """A constant field leaves Pearson undefined."""
        records = [{"a": 1, "b": 3}, {"a": 2, "b": 3}, {"a": 3, "b": 3}]
        assert math.isnan(correlate(records, "a", "b"))

    def test_non_numeric_field(self, sales) -> None:
        """String fields are rejected."""
        with pytest.raises(ConfigurationError):
            sales.correlate("amount", "region")


class TestCovariance:
    """Population covariance."""

    def test_population_covariance(self) -> None:
        """Covariance divides by n."""
        assert covariance([{"a": 1, "b": 2}, {"a": 2, "b": 4}, {"a": 3, "b": 6}], "a", "b") == pytest.approx(4 / 3)

    def test_no_pairs(self) -> None:
        """No complete pair gives NaN."""
        assert math.isnan(covariance([{"a": 1}, {"b": 2}], "a", "b"))


class TestCorrelationAnalyzer:
    """Matrix and top pairs."""

    def test_matrix_over_numeric_fields(self, paired) -> None:
        """Default fields are every numeric field."""
        result = paired.make_correlation_analyzer().fit().result()
        assert isinstance(result, CorrelationResult)
        assert isinstance(result.matrix, pd.DataFrame)
        assert list(result.matrix.columns) == ["x", "y", "z"]
        assert result.matrix.loc["x", "z"] == pytest.approx(-1.0)

    def test_feature_pairs_sorted_by_strength(self) -> None:
        """Top pairs are ordered by absolute correlation."""
        rs = RecordSet([{"a": 1, "b": 2, "c": 9}, {"a": 2, "b": 4, "c": 7}, {"a": 3, "b": 6, "c": 8}])
        pairs = rs.make_correlation_analyzer(["a", "b", "c"]).fit().result().feature_pairs
        assert pairs.loc[0, "pair"] == "a vs b"
        assert list(pairs.columns) == ["feature_a", "feature_b", "correlation", "abs_correlation", "pair"]
        assert pairs["abs_correlation"].is_monotonic_decreasing

    def test_pretty_labels(self) -> None:
        """Field names are prettified for plots."""
        rs = RecordSet([{"unit_price": 1, "qty": 2}, {"unit_price": 2, "qty": 1}])
        result = rs.make_correlation_analyzer().fit().result()
        assert result.pretty_by_col["unit_price"] == "Unit Price"

    def test_result_before_fit(self, paired) -> None:
        """result() requires fit()."""
        with pytest.raises(ValueError, match="Must call fit"):
            paired.make_correlation_analyzer().result()
