"""Z-score outlier removal following the analyzer pattern."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np

from recstats.data.accessor import FieldSelector
from recstats.data.views import RecordView
from recstats.errors import ConfigurationError

from .base_analyser import BaseAnalyser, require_fitted, require_numeric


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutlierDetectionResult:
    """Container for outlier detection results.

    Attributes:
        kept: Records within the threshold, in source order.
        removed: Records outside the threshold or without a valid value, in source order.
        keep_mask: One boolean per source record, True where the record is kept.
        mean: Mean of the valid values.
        std: Population standard deviation of the valid values.
        threshold: Number of standard deviations tolerated.
    """

    kept: tuple[Any, ...]
    removed: tuple[Any, ...]
    keep_mask: np.ndarray
    mean: float
    std: float
    threshold: float

    @property
    def n_removed(self) -> int:
        return len(self.removed)


class ZScoreOutlierDetector(BaseAnalyser):
    r"""Drop records whose value lies too many standard deviations from the mean.

    Each value :math:`x_i` is compared with the mean :math:`\mu_{-i}` of the *other* valid
    values and kept iff :math:`|x_i - \mu_{-i}| \le k\cdot\sigma`, where :math:`\sigma` is
    the population standard deviation of all valid values. Since
    :math:`x_i - \mu_{-i} = \tfrac{n}{n-1}(x_i - \mu)` this is the usual z-score rule with
    the limit scaled by :math:`\tfrac{n-1}{n}`. Fewer than three values use the plain
    :math:`|x_i - \mu| \le k\cdot\sigma`; a field whose values are all equal keeps every
    record. Records without a valid numeric value cannot be placed and are removed.

    Theory and Assumptions:
        - Assumes rough normality; extreme z-scores may reflect skewness or heavy tails
          rather than true anomalies.
        - With the full-sample :math:`\sigma` a single extreme value inflates the
          deviation enough to mask itself in small samples (e.g. ``[1, 2, 3, 100, 4]``
          gives :math:`|100-\mu| = 78 \le 2\sigma \approx 78.02`); measuring the
          candidate against the others removes that effect.
        See [Wikipedia :: Studentized residual](https://en.wikipedia.org/wiki/Studentized_residual) for details.

    Attributes:
        threshold: Absolute z-score limit (default: 2.0).
    """

    def __init__(self, view: RecordView, field: FieldSelector | None = None, threshold: float = 2.0) -> None:
        """Initialize Z-score outlier detector.

        Args:
            view: Immutable record view to analyze
            field: Numeric field (``None`` for a scalar record set)
            threshold: Number of standard deviations tolerated (default: 2.0)
        """
        if threshold < 0:
            raise ConfigurationError(f"Outlier threshold must be non-negative, got {threshold}.")
        require_numeric(view, field, "remove_outliers")
        self._view = view
        self._field = field
        self.threshold = threshold
        self._result: OutlierDetectionResult | None = None

    def _keep_mask(self, column: np.ndarray) -> tuple[np.ndarray, float, float]:
        valid = ~np.isnan(column)
        values = column[valid]
        n = values.size
        if n == 0:
            return valid, float("nan"), float("nan")

        mean = float(values.mean())
        std = float(values.std(ddof=0))
        distance = np.abs(values - mean)
        if n > 2:
            # distance to the mean of the other n-1 values
            distance = distance * n / (n - 1)
        if np.isclose(std, 0.0, atol=1e-12 * (1.0 + abs(mean))):
            keep = np.ones(n, dtype=bool)
        else:
            keep = distance <= self.threshold * std

        mask = np.zeros(column.shape, dtype=bool)
        mask[valid] = keep
        return mask, mean, std

    def fit(self) -> ZScoreOutlierDetector:
        """Compute the keep mask.

        Returns:
            Self for method chaining.
        """
        keep_mask, mean, std = self._keep_mask(self._view.numeric_or_nan(self._field))
        records = self._view.records
        self._result = OutlierDetectionResult(
            kept=tuple(r for r, keep in zip(records, keep_mask, strict=True) if keep),
            removed=tuple(r for r, keep in zip(records, keep_mask, strict=True) if not keep),
            keep_mask=keep_mask,
            mean=mean,
            std=std,
            threshold=self.threshold,
        )
        logger.debug("Removed %d of %d records beyond %.2f std devs", self._result.n_removed, len(records), self.threshold)
        return self

    def result(self) -> OutlierDetectionResult:
        """Return outlier detection results.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        return require_fitted(self._result)


def remove_outliers(records: Any, field: FieldSelector | None = None, threshold: float = 2.0) -> list[Any]:
    """Records of ``records`` kept by :class:`ZScoreOutlierDetector`, in source order."""
    from recstats.data.record_set import RecordSet  # noqa: PLC0415

    view = RecordSet.coerce(records).view(fields=())
    return list(ZScoreOutlierDetector(view, field, threshold).fit().result().kept)


__all__ = ["OutlierDetectionResult", "ZScoreOutlierDetector", "remove_outliers"]
