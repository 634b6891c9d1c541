"""Dispersion, shape and frequency statistics over numeric or categorical fields."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any, Self

import numpy as np
import pandas as pd
from scipy import stats
from sklearn.preprocessing import StandardScaler

from recstats.data.accessor import MISSING, FieldSelector, selector_name
from recstats.data.views import RecordView

from .base_analyser import BaseAnalyser, require_fitted, require_numeric


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispersionSummary:
    r"""Population and sample standard deviation.

    - population: :math:`\sqrt{\frac{1}{n}\sum (x_i - \bar{x})^2}`
    - sample: :math:`\sqrt{\frac{1}{n-1}\sum (x_i - \bar{x})^2}`

    With no values both are 0; with one value ``sample`` is NaN (undefined, not zero).
    """

    population: float
    sample: float


@dataclass(frozen=True)
class DescribeResult:
    """Summary statistics of the valid numeric values of one field.

    ``count`` is the number of valid values; every other statistic is NaN when it is 0
    (``sum`` is 0). Quartiles use the nearest-rank method.
    """

    field: str
    count: int
    mean: float
    min: float
    max: float
    sum: float
    std: float
    variance: float
    median: float
    q1: float
    q3: float
    iqr: float

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DescriptiveResult:
    """Descriptive statistics for several fields.

    Attributes:
        summaries: Field name -> :class:`DescribeResult`.
        dispersion: Field name -> :class:`DispersionSummary`.
        shape: DataFrame indexed by field with ``skewness`` and ``kurtosis`` columns.
    """

    summaries: dict[str, DescribeResult]
    dispersion: dict[str, DispersionSummary]
    shape: pd.DataFrame

    def to_frame(self) -> pd.DataFrame:
        """One row per field with every summary statistic plus ``sample_std`` and shape."""
        rows = {
            name: {**summary.as_dict(), "sample_std": self.dispersion[name].sample}
            for name, summary in self.summaries.items()
        }
        frame = pd.DataFrame.from_dict(rows, orient="index").drop(columns="field", errors="ignore")
        return frame.join(self.shape)


# ---------------------------------------------------------------------------- helpers
def _numeric(records: Any, field: FieldSelector | None, operation: str) -> np.ndarray:
    view = _view(records)
    require_numeric(view, field, operation)
    return view.numeric(field)


def _view(records: Any) -> RecordView:
    from recstats.data.record_set import RecordSet  # noqa: PLC0415

    return RecordSet.coerce(records).view(fields=())


def _dispersion(values: np.ndarray) -> DispersionSummary:
    n = values.size
    if n == 0:
        return DispersionSummary(population=0.0, sample=0.0)
    squared = np.square(values - values.mean()).sum()
    sample = math.sqrt(squared / (n - 1)) if n > 1 else float("nan")
    return DispersionSummary(population=math.sqrt(squared / n), sample=sample)


def _nearest_rank(sorted_values: np.ndarray, p: float) -> float:
    index = max(math.ceil(p / 100 * sorted_values.size) - 1, 0)
    return float(sorted_values[index])


def _describe(name: str, values: np.ndarray) -> DescribeResult:
    if values.size == 0:
        nan = float("nan")
        return DescribeResult(name, 0, nan, nan, nan, 0.0, nan, nan, nan, nan, nan, nan)
    ordered = np.sort(values)
    population = _dispersion(values).population
    q1 = _nearest_rank(ordered, 25)
    q3 = _nearest_rank(ordered, 75)
    return DescribeResult(
        field=name,
        count=int(values.size),
        mean=float(values.mean()),
        min=float(ordered[0]),
        max=float(ordered[-1]),
        sum=float(values.sum()),
        std=population,
        variance=population**2,
        median=float(np.median(values)),
        q1=q1,
        q3=q3,
        iqr=q3 - q1,
    )


def _moment_guard(values: np.ndarray) -> bool:
    return values.size >= 2 and bool(np.ptp(values) > 0)


# ---------------------------------------------------------------------------- analyzer
class DescriptiveAnalyzer(BaseAnalyser):
    """Summary, dispersion and shape statistics for several numeric fields.

    Example:
        >>> from recstats import RecordSet
        >>> rs = RecordSet([{"x": 1, "y": 2.5}, {"x": 3, "y": 4.0}, {"x": 8}])
        >>> res = rs.make_descriptive_analyzer(["x", "y"]).fit().result()
        >>> res.summaries["y"].count
        2
    """

    def __init__(self, view: RecordView, fields: Sequence[FieldSelector | None]) -> None:
        for field in fields:
            require_numeric(view, field, "describe")
        self._view = view
        self._fields = list(fields)
        self._result: DescriptiveResult | None = None

    def fit(self) -> Self:
        summaries: dict[str, DescribeResult] = {}
        dispersion: dict[str, DispersionSummary] = {}
        shape: dict[str, dict[str, float]] = {}
        for field in self._fields:
            name = selector_name(field)
            values = self._view.numeric(field)
            summaries[name] = _describe(name, values)
            dispersion[name] = _dispersion(values)
            shape[name] = {"skewness": _skewness(values), "kurtosis": _kurtosis(values)}
            logger.debug("Described %s: %d valid of %d records", name, values.size, len(self._view))

        self._result = DescriptiveResult(
            summaries=summaries,
            dispersion=dispersion,
            shape=pd.DataFrame.from_dict(shape, orient="index", columns=["skewness", "kurtosis"]),
        )
        return self

    def result(self) -> DescriptiveResult:
        return require_fitted(self._result)


# ---------------------------------------------------------------------------- functional API
def standard_deviation(records: Any, field: FieldSelector | None = None) -> DispersionSummary:
    """Population and sample standard deviation of the valid numeric values of ``field``.

    Raises:
        ConfigurationError: If ``field`` holds no numeric values (non-empty input).
    """
    return _dispersion(_numeric(records, field, "standard_deviation"))


def variance(records: Any, field: FieldSelector | None = None) -> float:
    """Population variance."""
    return standard_deviation(records, field).population ** 2


def describe(records: Any, field: FieldSelector | None = None) -> DescribeResult:
    return _describe(selector_name(field), _numeric(records, field, "describe"))


def median(records: Any, field: FieldSelector | None = None) -> float | None:
    values = _numeric(records, field, "median")
    return float(np.median(values)) if values.size else None


def percentile(records: Any, p: float, field: FieldSelector | None = None) -> float | None:
    """Nearest-rank percentile; ``None`` for ``p`` outside 0..100 or no data."""
    values = _numeric(records, field, "percentile")
    if not 0 <= p <= 100 or values.size == 0:
        return None
    return _nearest_rank(np.sort(values), p)


def frequency(records: Any, field: FieldSelector | None = None) -> dict[Any, int]:
    """Ordered value -> count mapping; absent values are counted under ``None``."""
    counts: dict[Any, int] = {}
    for value in _view(records).values(field):
        key = None if value is MISSING else value
        counts[key] = counts.get(key, 0) + 1
    return counts


def mode(records: Any, field: FieldSelector | None = None) -> Any:
    """Most frequent value; the first value to reach the top count wins ties."""
    counts: dict[Any, int] = {}
    best, best_count = None, 0
    for value in _view(records).values(field):
        key = None if value is MISSING else value
        counts[key] = counts.get(key, 0) + 1
        if counts[key] > best_count:
            best, best_count = key, counts[key]
    return best


def entropy(records: Any, field: FieldSelector | None = None) -> float:
    r"""Shannon entropy in bits: :math:`-\sum p_i \log_2 p_i` over value frequencies.

    Returns 0 for an empty input or a single category.
    """
    counts = np.fromiter(frequency(records, field).values(), dtype=float)
    if counts.size == 0:
        return 0.0
    return float(stats.entropy(counts, base=2))


def zscore(records: Any, field: FieldSelector | None = None) -> list[float]:
    """Population z-score per record; NaN for invalid values, 0 for zero-variance input."""
    view = _view(records)
    require_numeric(view, field, "zscore")
    column = view.numeric_or_nan(field)
    if column.size == 0 or np.isnan(column).all():
        return column.tolist()
    return StandardScaler().fit_transform(column.reshape(-1, 1)).ravel().tolist()


def _skewness(values: np.ndarray) -> float:
    return float(stats.skew(values, bias=True)) if _moment_guard(values) else float("nan")


def _kurtosis(values: np.ndarray) -> float:
    return float(stats.kurtosis(values, fisher=True, bias=True)) if _moment_guard(values) else float("nan")


def skewness(records: Any, field: FieldSelector | None = None) -> float:
    """Population skewness; NaN with fewer than two values or zero variance."""
    return _skewness(_numeric(records, field, "skewness"))


def kurtosis(records: Any, field: FieldSelector | None = None) -> float:
    """Population excess kurtosis; NaN with fewer than two values or zero variance."""
    return _kurtosis(_numeric(records, field, "kurtosis"))


__all__ = [
    "DescribeResult",
    "DescriptiveAnalyzer",
    "DescriptiveResult",
    "DispersionSummary",
    "describe",
    "entropy",
    "frequency",
    "kurtosis",
    "median",
    "mode",
    "percentile",
    "skewness",
    "standard_deviation",
    "variance",
    "zscore",
]
