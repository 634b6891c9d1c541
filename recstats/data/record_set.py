"""Ordered, immutable record container and entry point to the analysis core."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Literal

import pandas as pd

from recstats.utils.analysis_config import DEFAULT_ANALYSIS_CFG, AnalysisConfig

from .accessor import MISSING, FieldSelector, resolve_field
from .field_kinds import FieldProfile
from .views import RecordView, build_view


if TYPE_CHECKING:
    from recstats.analysis.aggregation import AggregationAnalyzer, AggregationResult
    from recstats.analysis.correlation_analyzer import CorrelationAnalyzer
    from recstats.analysis.descriptive_statistics import DescribeResult, DescriptiveAnalyzer, DispersionSummary
    from recstats.analysis.grouping import GroupedRecords
    from recstats.analysis.naive_bayes import NaiveBayesAnalyzer, NaiveBayesClassifier
    from recstats.analysis.outlier_detector import ZScoreOutlierDetector
    from recstats.analysis.pivot_table import PivotTableAnalyzer, PivotTableResult
    from recstats.analysis.time_series import (
        ForecastAnalyzer,
        ForecastResult,
        SeasonalityAnalyzer,
        SeasonalityResult,
        TimeSeriesAnalyzer,
    )


def _freeze(item: Any) -> Any:
    if isinstance(item, MappingProxyType):
        return item
    if isinstance(item, Mapping):
        return MappingProxyType(dict(item))
    return item


def _thaw(item: Any) -> Any:
    return dict(item) if isinstance(item, Mapping) else item


class RecordSet:
    """Ordered, finite, immutable sequence of records.

    Records are mappings from field name to number, string, boolean or date; they
    are stored as read-only mappings. A record set may also hold scalars directly, in
    which case field-less operations (``standard_deviation()``, ``convolve()``, ...)
    work on the elements themselves.

    Every operation returns a new object and preserves order unless a sort is asked
    for.

    Example:
        >>> sales = RecordSet([
        ...     {"region": "north", "month": "Jan", "amount": 120.0},
        ...     {"region": "south", "month": "Jan", "amount": 80.0},
        ...     {"region": "north", "month": "Feb", "amount": 150.0},
        ... ])
        >>> sales.aggregate("region", ["amount"], ["sum", "avg"]).groups["north"]["amount"]["sum"]
        270.0
        >>> sales.pivot_table("region", "month", "amount", "sum").cells["south"]["Feb"]
        0.0
    """

    def __init__(self, items: Iterable[Any] = (), *, config: AnalysisConfig | None = None) -> None:
        """Initialize the record set.

        Args:
            items: Records (mappings) or scalars, in order.
            config: Analysis defaults forwarded to analyzers built from this set.
        """
        self._items: tuple[Any, ...] = tuple(_freeze(item) for item in items)
        self._config = config or DEFAULT_ANALYSIS_CFG
        self._df: pd.DataFrame | None = None

    # ------------------------------------------------------------------ construction
    @classmethod
    def coerce(cls, obj: Iterable[Any]) -> RecordSet:
        """Return ``obj`` if it already is a record set, otherwise wrap it."""
        if isinstance(obj, RecordSet):
            return obj
        return cls(obj)

    @classmethod
    def from_frame(cls, df: pd.DataFrame, *, config: AnalysisConfig | None = None) -> RecordSet:
        """Build a record set from a DataFrame; NaN cells become absent fields."""
        records = [
            {key: value for key, value in row.items() if not (isinstance(value, float) and pd.isna(value))}
            for row in df.to_dict(orient="records")
        ]
        return cls(records, config=config)

    def _derive(self, items: Iterable[Any]) -> RecordSet:
        return type(self)(items, config=self._config)

    # ------------------------------------------------------------------ container protocol
    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __getitem__(self, index: int | slice) -> Any:
        if isinstance(index, slice):
            return self._derive(self._items[index])
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecordSet):
            return NotImplemented
        return self.to_list() == other.to_list()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        preview = ", ".join(repr(_thaw(item)) for item in self._items[:3])
        suffix = ", ..." if len(self._items) > 3 else ""
        return f"{type(self).__name__}([{preview}{suffix}])"

    @property
    def items(self) -> tuple[Any, ...]:
        """The stored records as a tuple."""
        return self._items

    @property
    def config(self) -> AnalysisConfig:
        """Analysis defaults used by analyzers built from this set."""
        return self._config

    @property
    def is_scalar(self) -> bool:
        """Whether the set holds plain values rather than mapping records."""
        return bool(self._items) and not any(isinstance(item, Mapping) for item in self._items)

    def to_list(self) -> list[Any]:
        """Plain list of records (as dicts) or scalars."""
        return [_thaw(item) for item in self._items]

    def to_records(self) -> list[dict[str, Any]]:
        """Plain list of dict records; scalars are wrapped under ``config.scalar_field``."""
        return [
            dict(item) if isinstance(item, Mapping) else {self._config.scalar_field: item} for item in self._items
        ]

    @property
    def df(self) -> pd.DataFrame:
        """DataFrame rendering of the records (absent fields become NaN)."""
        if self._df is None:
            self._df = pd.DataFrame.from_records(self.to_records())
        return self._df

    # ------------------------------------------------------------------ primitives
    def pluck(self, selector: FieldSelector) -> list[Any]:
        """Resolve ``selector`` against every record (``MISSING`` where absent)."""
        return [resolve_field(item, selector) for item in self._items]

    def filter(self, predicate: Callable[[Any], bool]) -> RecordSet:
        return self._derive(item for item in self._items if predicate(item))

    def map(self, fn: Callable[[Any], Any]) -> RecordSet:
        return self._derive(fn(item) for item in self._items)

    def sort_by(self, selector: FieldSelector | None = None, *, reverse: bool = False) -> RecordSet:
        """Stable sort by ``selector``; records lacking the field go last."""
        present = [item for item in self._items if resolve_field(item, selector) not in (MISSING, None)]
        absent = [item for item in self._items if resolve_field(item, selector) in (MISSING, None)]
        present.sort(key=lambda item: resolve_field(item, selector), reverse=reverse)
        return self._derive([*present, *absent])

    def concat(self, other: Iterable[Any]) -> RecordSet:
        return self._derive([*self._items, *other])

    def fields(self) -> list[str]:
        """Field names in order of first appearance."""
        seen: dict[str, None] = {}
        for item in self._items:
            if isinstance(item, Mapping):
                seen.update(dict.fromkeys(item))
        return list(seen)

    def profile(self, field: str) -> FieldProfile:
        """Profile a single field (kind, presence and numeric counts)."""
        return self.view(fields=[field]).profiles[field]

    def view(self, fields: Sequence[str] | None = None) -> RecordView:
        """Build an immutable view for analyzers.

        Args:
            fields: Fields to profile eagerly (defaults to every field seen). Passing an
                empty sequence defers profiling to the analyzers that need it.
        """
        return build_view(self._items, fields=fields)

    # ------------------------------------------------------------------ grouping & aggregation
    def group_by(self, selector: FieldSelector) -> GroupedRecords:
        """Group records by ``selector`` (first-seen key order)."""
        from recstats.analysis.grouping import group_by

        return group_by(self, selector)

    def group_by_multiple(self, *fields: FieldSelector) -> GroupedRecords:
        """Group records by several fields joined into one ``"a::b"`` key."""
        from recstats.analysis.grouping import group_by_multiple

        return group_by_multiple(self, *fields)

    def having(self, by: FieldSelector, field: FieldSelector, op: str, value: float) -> GroupedRecords:
        """Group by ``by`` and keep groups whose sum of ``field`` satisfies ``<op> value``."""
        from recstats.analysis.grouping import having

        return having(self, field, op, value, by=by)

    def make_aggregation_analyzer(
        self,
        by: FieldSelector,
        value_fields: Sequence[FieldSelector],
        operations: Sequence[str],
    ) -> AggregationAnalyzer:
        """Instantiate an aggregation analyzer configured for this record set."""
        from recstats.analysis.aggregation import AggregationAnalyzer

        return AggregationAnalyzer(self.view(fields=()), by=by, value_fields=value_fields, operations=operations)

    def aggregate(
        self,
        by: FieldSelector,
        value_fields: Sequence[FieldSelector],
        operations: Sequence[str],
    ) -> AggregationResult:
        """Compute ``operations`` over each of ``value_fields`` per group of ``by``."""
        return self.make_aggregation_analyzer(by, value_fields, operations).fit().result()

    def make_pivot_table_analyzer(
        self,
        rows: FieldSelector,
        cols: FieldSelector,
        value_field: FieldSelector | None = None,
        aggregation: Literal["sum", "avg", "count"] = "sum",
    ) -> PivotTableAnalyzer:
        """Instantiate a pivot table analyzer configured for this record set."""
        from recstats.analysis.pivot_table import PivotTableAnalyzer

        return PivotTableAnalyzer(
            self.view(fields=()),
            rows=rows,
            cols=cols,
            value_field=value_field,
            aggregation=aggregation,
        )

    def pivot_table(
        self,
        rows: FieldSelector,
        cols: FieldSelector,
        value_field: FieldSelector | None = None,
        aggregation: Literal["sum", "avg", "count"] = "sum",
    ) -> PivotTableResult:
        """Cross-tabulate ``value_field`` by ``rows`` x ``cols``."""
        return self.make_pivot_table_analyzer(rows, cols, value_field, aggregation).fit().result()

    # ------------------------------------------------------------------ descriptive statistics
    def make_descriptive_analyzer(self, fields: Sequence[FieldSelector | None] | None = None) -> DescriptiveAnalyzer:
        """Instantiate a descriptive statistics analyzer.

        Args:
            fields: Numeric fields to summarize (defaults to every numeric field, or the
                elements themselves for a scalar set).
        """
        from recstats.analysis.descriptive_statistics import DescriptiveAnalyzer

        view = self.view()
        if fields is None:
            fields = [None] if self.is_scalar else [p.name for p in view.profiles.values() if p.kind.supports_numeric]
        return DescriptiveAnalyzer(view, fields=fields)

    def describe(self, field: FieldSelector | None = None) -> DescribeResult:
        """Summary statistics (count, mean, min, max, sum, std, variance, quartiles)."""
        from recstats.analysis.descriptive_statistics import describe

        return describe(self, field)

    def standard_deviation(self, field: FieldSelector | None = None) -> DispersionSummary:
        """Population and sample standard deviation of ``field``."""
        from recstats.analysis.descriptive_statistics import standard_deviation

        return standard_deviation(self, field)

    def variance(self, field: FieldSelector | None = None) -> float:
        """Population variance of ``field``."""
        from recstats.analysis.descriptive_statistics import variance

        return variance(self, field)

    def median(self, field: FieldSelector | None = None) -> float | None:
        from recstats.analysis.descriptive_statistics import median

        return median(self, field)

    def percentile(self, p: float, field: FieldSelector | None = None) -> float | None:
        """Nearest-rank percentile ``p`` (0-100) of ``field``."""
        from recstats.analysis.descriptive_statistics import percentile

        return percentile(self, p, field)

    def mode(self, field: FieldSelector | None = None) -> Any:
        from recstats.analysis.descriptive_statistics import mode

        return mode(self, field)

    def frequency(self, field: FieldSelector | None = None) -> dict[Any, int]:
        from recstats.analysis.descriptive_statistics import frequency

        return frequency(self, field)

    def entropy(self, field: FieldSelector | None = None) -> float:
        """Shannon entropy (bits) of the value distribution of ``field``."""
        from recstats.analysis.descriptive_statistics import entropy

        return entropy(self, field)

    def zscore(self, field: FieldSelector | None = None) -> RecordSet:
        from recstats.analysis.descriptive_statistics import zscore

        return self._derive(zscore(self, field))

    def skewness(self, field: FieldSelector | None = None) -> float:
        from recstats.analysis.descriptive_statistics import skewness

        return skewness(self, field)

    def kurtosis(self, field: FieldSelector | None = None) -> float:
        from recstats.analysis.descriptive_statistics import kurtosis

        return kurtosis(self, field)

    def make_correlation_analyzer(self, fields: Sequence[str] | None = None) -> CorrelationAnalyzer:
        """Instantiate a correlation analyzer over ``fields`` (defaults to all numeric fields)."""
        from recstats.analysis.correlation_analyzer import CorrelationAnalyzer

        view = self.view()
        if fields is None:
            fields = [p.name for p in view.profiles.values() if p.kind.supports_numeric]
        return CorrelationAnalyzer(view, fields=fields, top_n_pairs=self._config.top_n_pairs)

    def correlate(self, field_a: FieldSelector, field_b: FieldSelector) -> float:
        """Pearson correlation between two numeric fields (NaN when undefined)."""
        from recstats.analysis.correlation_analyzer import correlate

        return correlate(self, field_a, field_b)

    def covariance(self, field_a: FieldSelector, field_b: FieldSelector) -> float:
        """Population covariance between two numeric fields (NaN without pairs)."""
        from recstats.analysis.correlation_analyzer import covariance

        return covariance(self, field_a, field_b)

    def make_zscore_outlier_detector(
        self,
        field: FieldSelector | None = None,
        threshold: float | None = None,
    ) -> ZScoreOutlierDetector:
        """Instantiate the z-score outlier detector behind :meth:`remove_outliers`."""
        from recstats.analysis.outlier_detector import ZScoreOutlierDetector

        return ZScoreOutlierDetector(
            self.view(fields=()),
            field=field,
            threshold=self._config.outlier_threshold if threshold is None else threshold,
        )

    def remove_outliers(self, field: FieldSelector | None = None, threshold: float | None = None) -> RecordSet:
        """Drop records further than ``threshold`` population std devs from the mean of ``field``."""
        return self._derive(self.make_zscore_outlier_detector(field, threshold).fit().result().kept)

    # ------------------------------------------------------------------ signal processing
    def convolve(self, kernel: Sequence[float], field: FieldSelector | None = None) -> RecordSet:
        """Full discrete convolution of the numeric series with ``kernel``."""
        from recstats.analysis.signal_processing import convolve

        return self._derive(convolve(self, kernel, field=field))

    def moving_average(self, window: int, *, centered: bool = False, field: FieldSelector | None = None) -> RecordSet:
        from recstats.analysis.signal_processing import moving_average

        return self._derive(moving_average(self, window, centered=centered, field=field))

    def differentiate(self, field: FieldSelector | None = None) -> RecordSet:
        from recstats.analysis.signal_processing import differentiate

        return self._derive(differentiate(self, field=field))

    def integrate(self, field: FieldSelector | None = None) -> RecordSet:
        from recstats.analysis.signal_processing import integrate

        return self._derive(integrate(self, field=field))

    def interpolate(self, points: int, field: FieldSelector | None = None) -> RecordSet:
        from recstats.analysis.signal_processing import interpolate

        return self._derive(interpolate(self, points, field=field))

    # ------------------------------------------------------------------ time series
    def make_seasonality_analyzer(
        self,
        date_field: FieldSelector,
        value_field: FieldSelector,
        interval: Literal["day", "week", "month", "year"] = "month",
    ) -> SeasonalityAnalyzer:
        from recstats.analysis.time_series import SeasonalityAnalyzer

        return SeasonalityAnalyzer(
            self.view(fields=()),
            date_field=date_field,
            value_field=value_field,
            interval=interval,
            config=self._config,
        )

    def seasonality(
        self,
        date_field: FieldSelector,
        value_field: FieldSelector,
        interval: Literal["day", "week", "month", "year"] = "month",
    ) -> SeasonalityResult:
        """Mean of ``value_field`` per calendar period of ``date_field``."""
        return self.make_seasonality_analyzer(date_field, value_field, interval).fit().result()

    def make_forecast_analyzer(self, periods: int, value_field: str | None = None) -> ForecastAnalyzer:
        from recstats.analysis.time_series import ForecastAnalyzer

        return ForecastAnalyzer(self.view(), periods=periods, value_field=value_field)

    def forecast(self, periods: int, value_field: str | None = None) -> RecordSet:
        """Extend the series by ``periods`` points along its least-squares trend line."""
        return self._derive(self.make_forecast_analyzer(periods, value_field).fit().result().forecast)

    def forecast_result(self, periods: int, value_field: str | None = None) -> ForecastResult:
        """Like :meth:`forecast` but returning the fitted trend alongside the points."""
        return self.make_forecast_analyzer(periods, value_field).fit().result()

    def make_time_series_analyzer(
        self,
        date_field: FieldSelector,
        value_field: FieldSelector,
        interval: Literal["day", "week", "month", "year"] = "day",
        *,
        fill_gaps: bool = True,
    ) -> TimeSeriesAnalyzer:
        from recstats.analysis.time_series import TimeSeriesAnalyzer

        return TimeSeriesAnalyzer(
            self.view(fields=()),
            date_field,
            value_field,
            interval,
            fill_gaps=fill_gaps,
            fill_value=self._config.gap_fill_value,
        )

    def time_series(
        self,
        date_field: FieldSelector,
        value_field: FieldSelector,
        interval: Literal["day", "week", "month", "year"] = "day",
        *,
        fill_gaps: bool = True,
    ) -> RecordSet:
        """Bucket values by calendar interval, optionally emitting empty buckets."""
        analyzer = self.make_time_series_analyzer(date_field, value_field, interval, fill_gaps=fill_gaps)
        return self._derive(analyzer.fit().result().to_records())

    # ------------------------------------------------------------------ classification
    def make_naive_bayes_analyzer(self, feature_fields: Sequence[str], label_field: str) -> NaiveBayesAnalyzer:
        from recstats.analysis.naive_bayes import NaiveBayesAnalyzer

        return NaiveBayesAnalyzer(
            self.view(fields=()),
            feature_fields,
            label_field,
            alpha=self._config.laplace_alpha,
        )

    def train_naive_bayes(self, feature_fields: Sequence[str], label_field: str) -> NaiveBayesClassifier:
        """Train a categorical Naive Bayes classifier on this record set."""
        return self.make_naive_bayes_analyzer(feature_fields, label_field).fit().result()

    def naive_bayes(self, feature_fields: Sequence[str], label_field: str) -> Callable[[Mapping[str, Any]], Any]:
        """Train a classifier and return its prediction function."""
        return self.train_naive_bayes(feature_fields, label_field).predict


__all__ = ["RecordSet"]
