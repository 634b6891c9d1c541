"""Tests for z-score outlier removal."""

import numpy as np
import pytest

from recstats import AnalysisConfig, ConfigurationError, RecordSet
from recstats.analysis.outlier_detector import OutlierDetectionResult, ZScoreOutlierDetector, remove_outliers


@pytest.fixture
def noisy() -> RecordSet:
    """Normal sample with clear outliers appended."""
    rng = np.random.default_rng(42)
    values = [*rng.normal(loc=50, scale=5, size=60).tolist(), 150.0, -60.0]
    return RecordSet([{"v": v, "i": i} for i, v in enumerate(values)])


class TestRemoveOutliers:
    """Records beyond the threshold are dropped in source order."""

    def test_single_extreme_value(self) -> None:
        """A lone extreme value cannot mask itself."""
        assert remove_outliers([1, 2, 3, 100, 4]) == [1, 2, 3, 4]

    def test_evenly_spaced_series_keeps_endpoints(self) -> None:
        """Endpoints of [1..5] sit 2.5 from the others' mean, within 2 * sqrt(2)."""
        assert remove_outliers([1, 2, 3, 4, 5]) == [1, 2, 3, 4, 5]

    def test_evenly_spaced_even_length_keeps_endpoints(self) -> None:
        """Endpoints of [10..15] sit 3.0 from the others' mean, within 2 * 1.708."""
        values = [10, 11, 12, 13, 14, 15]
        assert remove_outliers(values) == values

    def test_constant_series_keeps_everything(self) -> None:
        """Zero deviation keeps every record."""
        assert remove_outliers([5, 5, 5, 5]) == [5, 5, 5, 5]

    def test_constant_float_series_keeps_everything(self) -> None:
        """Rounding in the mean does not remove equal values."""
        assert remove_outliers([0.1, 0.1, 0.1]) == [0.1, 0.1, 0.1]

    def test_two_values_are_kept(self) -> None:
        """Two values are always within one std of their mean."""
        assert remove_outliers([1, 100]) == [1, 100]

    def test_clear_outliers_removed(self, noisy) -> None:
        """Appended extremes are dropped and source order is kept."""
        kept = noisy.remove_outliers("v", threshold=3.0)
        assert 150.0 not in kept.pluck("v")
        assert -60.0 not in kept.pluck("v")
        assert kept.pluck("i") == sorted(kept.pluck("i"))

    def test_records_without_value_are_removed(self) -> None:
        """Records lacking the field cannot be placed."""
        records = [{"v": 1}, {"v": 2}, {"w": 3}, {"v": 3}]
        assert remove_outliers(records, "v") == [{"v": 1}, {"v": 2}, {"v": 3}]

    def test_huge_threshold_keeps_all_valid(self) -> None:
        """A very loose threshold removes nothing."""
        assert remove_outliers([10, 12, 11, 13, 30], threshold=1e6) == [10, 12, 11, 13, 30]

    def test_threshold_from_config(self) -> None:
        """RecordSet uses the configured threshold."""
        strict = RecordSet([1, 2, 3, 4, 5, 6, 7, 8, 9, 20], config=AnalysisConfig(outlier_threshold=0.5))
        assert len(strict.remove_outliers()) < len(RecordSet(strict.to_list()).remove_outliers())

    def test_empty_input(self) -> None:
        """Empty input gives an empty result."""
        assert remove_outliers([]) == []


class TestZScoreOutlierDetector:
    """Analyzer results and validation."""

    def test_result_fields(self, noisy) -> None:
        """Kept and removed records partition the input."""
        result = ZScoreOutlierDetector(noisy.view(fields=()), "v", threshold=3.0).fit().result()
        assert isinstance(result, OutlierDetectionResult)
        assert result.keep_mask.shape == (len(noisy),)
        assert result.n_removed == len(result.removed) >= 2
        assert len(result.kept) + result.n_removed == len(noisy)

    def test_default_threshold(self, noisy) -> None:
        """Default threshold is 2.0."""
        assert ZScoreOutlierDetector(noisy.view(fields=()), "v").threshold == 2.0

    def test_negative_threshold(self, noisy) -> None:
        """Negative thresholds are rejected."""
        with pytest.raises(ConfigurationError):
            ZScoreOutlierDetector(noisy.view(fields=()), "v", threshold=-1)

    def test_non_numeric_field(self, sales) -> None:
        """String fields are rejected."""
        with pytest.raises(ConfigurationError):
            sales.remove_outliers("region")

    def test_result_before_fit(self, noisy) -> None:
        """result() requires fit()."""
        with pytest.raises(ValueError, match="Must call fit"):
            ZScoreOutlierDetector(noisy.view(fields=()), "v").result()
