"""Calendar seasonality, linear-trend forecasting and interval bucketing of series."""

from __future__ import annotations

import calendar
import datetime as dt
import logging
import re
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal, Self

import numpy as np
import pandas as pd
import statsmodels.api as sm

from recstats.data.accessor import MISSING, FieldSelector, is_numeric, resolve_field, selector_name
from recstats.data.views import RecordView
from recstats.errors import ConfigurationError
from recstats.utils.analysis_config import DEFAULT_ANALYSIS_CFG, AnalysisConfig

from .base_analyser import BaseAnalyser, require_fitted, require_numeric


logger = logging.getLogger(__name__)

Interval = Literal["day", "week", "month", "year"]
INTERVALS: tuple[Interval, ...] = ("day", "week", "month", "year")

_BUCKET_FREQ: Mapping[Interval, str] = {"day": "D", "week": "W-MON", "month": "MS", "year": "YS"}


def _check_interval(interval: str) -> None:
    if interval not in INTERVALS:
        raise ConfigurationError(f"Unsupported interval '{interval}'. Use one of: {', '.join(INTERVALS)}.")


def to_timestamp(value: Any) -> pd.Timestamp | None:
    """Parse dates, datetimes, numpy datetimes and ISO strings; anything else is ``None``."""
    if value is MISSING or value is None or isinstance(value, (bool, int, float)):
        return None
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    return None if pd.isna(ts) else ts


# ---------------------------------------------------------------------------- seasonality
def _period_index(ts: pd.Timestamp, interval: Interval, week_start: str) -> int:
    if interval == "day":
        return ts.weekday() if week_start == "monday" else (ts.weekday() + 1) % 7
    if interval == "week":
        return int(ts.isocalendar()[1])
    if interval == "month":
        return ts.month - 1
    return ts.year


@dataclass(frozen=True)
class SeasonalityResult:
    """Mean value per calendar period.

    Attributes:
        means: Period index -> mean value, ascending by period; periods without any
            observation are absent (not zero).
        counts: Period index -> number of observations.
        interval: ``day`` (weekday 0-6), ``week`` (ISO week 1-53), ``month`` (0-11)
            or ``year`` (calendar year).
    """

    means: Mapping[int, float]
    counts: Mapping[int, int]
    interval: Interval

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {"period": list(self.means), "mean": list(self.means.values()), "count": list(self.counts.values())},
        )

    def to_records(self) -> list[dict[str, Any]]:
        return self.to_frame().to_dict(orient="records")

    # ------------------------------------------------------------------ plotting shortcuts
    def plot_bars(self, **kwargs: object):
        """Bar chart of the mean per period."""
        from recstats.plotting.time_series_plots import plot_seasonality  # noqa: PLC0415

        return plot_seasonality(self, **kwargs)


class SeasonalityAnalyzer(BaseAnalyser):
    """Group values by calendar period to expose periodic patterns.

    Records with an unparseable date or a non-numeric value are skipped.

    Example:
        >>> from recstats import RecordSet
        >>> rs = RecordSet([
        ...     {"d": "2024-01-15", "v": 10}, {"d": "2024-01-20", "v": 20}, {"d": "2024-03-01", "v": 5},
        ... ])
        >>> dict(rs.seasonality("d", "v", "month").means)
        {0: 15.0, 2: 5.0}
    """

    def __init__(
        self,
        view: RecordView,
        date_field: FieldSelector,
        value_field: FieldSelector,
        interval: Interval = "month",
        config: AnalysisConfig | None = None,
    ) -> None:
        _check_interval(interval)
        require_numeric(view, value_field, "seasonality")
        self._view = view
        self._date_field = date_field
        self._value_field = value_field
        self._interval = interval
        self._config = config or DEFAULT_ANALYSIS_CFG
        self._result: SeasonalityResult | None = None

    def fit(self) -> Self:
        periods: list[int] = []
        values: list[float] = []
        for record in self._view.records:
            ts = to_timestamp(resolve_field(record, self._date_field))
            value = resolve_field(record, self._value_field)
            if ts is None or not is_numeric(value):
                continue
            periods.append(_period_index(ts, self._interval, self._config.week_start))
            values.append(float(value))

        stats = pd.DataFrame({"period": periods, "value": values}, dtype=float).groupby("period")["value"].agg(
            ["mean", "count"],
        )
        logger.debug("Seasonality by %s: %d periods from %d points", self._interval, len(stats), len(values))
        self._result = SeasonalityResult(
            means={int(p): float(m) for p, m in stats["mean"].items()},
            counts={int(p): int(c) for p, c in stats["count"].items()},
            interval=self._interval,
        )
        return self

    def result(self) -> SeasonalityResult:
        return require_fitted(self._result)


def seasonality(
    records: Any,
    date_field: FieldSelector,
    value_field: FieldSelector,
    interval: Interval = "month",
    config: AnalysisConfig | None = None,
) -> SeasonalityResult:
    """Mean of ``value_field`` per calendar period of ``date_field``."""
    from recstats.data.record_set import RecordSet  # noqa: PLC0415

    view = RecordSet.coerce(records).view(fields=())
    return SeasonalityAnalyzer(view, date_field, value_field, interval, config).fit().result()


# ---------------------------------------------------------------------------- label continuation
_CYCLES: tuple[tuple[str, ...], ...] = (
    tuple(calendar.month_name)[1:],
    tuple(calendar.month_abbr)[1:],
    tuple(calendar.day_name),
    tuple(calendar.day_abbr),
)
_TRAILING_INT = re.compile(r"^(.*?)(\d+)$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")


def _match_case(template: str, label: str) -> str:
    if template.isupper():
        return label.upper()
    if template.islower():
        return label.lower()
    return label


def _cycle_labels(prev: Any, last: str) -> Callable[[int], str] | None:
    candidates = []
    for names in _CYCLES:
        lowered = [name.lower() for name in names]
        if last.lower() in lowered:
            candidates.append((names, lowered))
    if not candidates:
        return None
    # "May" is both a full name and an abbreviation; the previous label decides
    prev_key = prev.lower() if isinstance(prev, str) else None
    cycle, lowered = next(((c, low) for c, low in candidates if prev_key in low), candidates[0])
    i_last = lowered.index(last.lower())
    step = 1
    if prev_key in lowered:
        step = (i_last - lowered.index(prev_key)) % len(cycle) or 1
    return lambda k: _match_case(last, cycle[(i_last + k * step) % len(cycle)])


def _numbered_labels(prev: Any, last: str) -> Callable[[int], str] | None:
    match = _TRAILING_INT.match(last)
    if match is None:
        return None
    prefix, digits = match.groups()
    step = 1
    prev_match = _TRAILING_INT.match(prev) if isinstance(prev, str) else None
    if prev_match is not None and prev_match.group(1) == prefix:
        step = int(digits) - int(prev_match.group(2)) or 1
    return lambda k: f"{prefix}{int(digits) + k * step:0{len(digits)}d}"


def _date_labels(prev: Any, last: Any) -> Callable[[int], Any] | None:
    last_ts, prev_ts = to_timestamp(last), to_timestamp(prev)
    if last_ts is None or prev_ts is None:
        return None
    months = (last_ts.year - prev_ts.year) * 12 + (last_ts.month - prev_ts.month)
    month_aligned = months != 0 and last_ts.day == prev_ts.day and last_ts.time() == prev_ts.time()
    delta = last_ts - prev_ts

    def step_at(k: int) -> pd.Timestamp:
        if month_aligned:
            return last_ts + pd.DateOffset(months=k * months)
        return last_ts + k * delta

    def label(k: int) -> Any:
        ts = step_at(k)
        if isinstance(last, pd.Timestamp):
            return ts
        if isinstance(last, dt.datetime):
            return ts.to_pydatetime()
        if isinstance(last, dt.date):
            return ts.date()
        if isinstance(last, str):
            return ts.isoformat() if "T" in last else ts.date().isoformat()
        return ts

    return label


def _label_sequence(history: Sequence[Any]) -> Callable[[int], Any] | None:
    """Continuation function ``k -> label`` for the k-th future record, or ``None``."""
    present = [v for v in history if v is not MISSING and v is not None]
    if not present:
        return None
    last = present[-1]
    prev = present[-2] if len(present) > 1 else None

    if is_numeric(last):
        step = last - prev if is_numeric(prev) else 1
        return lambda k: last + k * step
    if isinstance(last, (dt.date, pd.Timestamp, np.datetime64)):
        return _date_labels(prev, last)
    if isinstance(last, str):
        if _ISO_DATE.match(last):
            return _date_labels(prev, last)
        return _cycle_labels(prev, last) or _numbered_labels(prev, last)
    return None


# ---------------------------------------------------------------------------- forecast
@dataclass(frozen=True)
class ForecastResult:
    """Linear-trend forecast.

    Attributes:
        history: The observed records or values.
        forecast: ``periods`` extrapolated records or values.
        slope: Fitted slope per index step (NaN in the degenerate case).
        intercept: Fitted value at index 0 (NaN in the degenerate case).
        n_observed: Number of valid numeric points the trend was fitted on.
        value_field: Field holding the series value (``None`` for scalar series).
    """

    history: tuple[Any, ...]
    forecast: tuple[Any, ...]
    slope: float
    intercept: float
    n_observed: int
    value_field: str | None = None

    @property
    def is_degenerate(self) -> bool:
        """True when fewer than two points were available and the last value was repeated."""
        return self.n_observed < 2

    def extended(self) -> tuple[Any, ...]:
        """History followed by the forecast."""
        return (*self.history, *self.forecast)

    def to_frame(self, value_name: str = "value") -> pd.DataFrame:
        """Observed and forecast points with an ``is_forecast`` flag."""
        rows = [
            {**(dict(item) if isinstance(item, Mapping) else {value_name: item}), "is_forecast": flag}
            for items, flag in ((self.history, False), (self.forecast, True))
            for item in items
        ]
        return pd.DataFrame(rows)

    # ------------------------------------------------------------------ plotting shortcuts
    def plot(self, **kwargs: object):
        """Line plot of the history and the extrapolated trend."""
        from recstats.plotting.time_series_plots import plot_forecast  # noqa: PLC0415

        return plot_forecast(self, **kwargs)


class ForecastAnalyzer(BaseAnalyser):
    r"""Extend a series by ``periods`` points along its least-squares trend line.

    The trend :math:`\hat y = a + b\,i` is fitted with statsmodels OLS over the record
    positions :math:`i` holding a valid numeric value and evaluated at the positions
    :math:`n, \dots, n + periods - 1` following the series. With fewer than two valid
    points no slope exists and the last known value is repeated; without any valid
    point the forecast is empty.

    Other fields of forecast records continue their sequence (numbers and dates by
    their last step, month/weekday names along the calendar, labels ending in a number
    by incrementing it); fields with no recognizable sequence are left out.

    Example:
        >>> ForecastAnalyzer.from_values([1.0, 2.0, 3.0], periods=2).fit().result().forecast
        (4.0, 5.0)
    """

    def __init__(self, view: RecordView, periods: int, value_field: str | None = None) -> None:
        if periods < 0:
            raise ConfigurationError(f"periods must be non-negative, got {periods}.")
        is_records = any(isinstance(r, Mapping) for r in view.records)
        if is_records and value_field is None:
            raise ConfigurationError("forecast over records requires an explicit value_field.")
        require_numeric(view, value_field, "forecast")
        self._view = view
        self._periods = periods
        self._value_field = value_field
        self._is_records = is_records
        self._result: ForecastResult | None = None

    @classmethod
    def from_values(cls, values: Sequence[float], periods: int) -> ForecastAnalyzer:
        return cls(RecordView(records=tuple(values)), periods=periods)

    def _fit_trend(self, positions: np.ndarray, values: np.ndarray) -> tuple[float, float]:
        design = sm.add_constant(positions, has_constant="add")
        intercept, slope = sm.OLS(values, design).fit().params
        return float(slope), float(intercept)

    def _future_values(self) -> tuple[list[float], float, float, int]:
        column = self._view.numeric_or_nan(self._value_field)
        valid = ~np.isnan(column)
        positions = np.flatnonzero(valid).astype(float)
        values = column[valid]

        if values.size == 0:
            return [], float("nan"), float("nan"), 0
        if values.size < 2:
            return [float(values[-1])] * self._periods, float("nan"), float("nan"), int(values.size)

        slope, intercept = self._fit_trend(positions, values)
        future = intercept + slope * np.arange(column.size, column.size + self._periods, dtype=float)
        logger.debug("Trend fit on %d points: intercept=%.6g slope=%.6g", values.size, intercept, slope)
        return future.tolist(), slope, intercept, int(values.size)

    def _future_records(self, future: list[float]) -> Iterator[dict[str, Any]]:
        fields: dict[str, None] = {}
        for record in self._view.records:
            if isinstance(record, Mapping):
                fields.update(dict.fromkeys(record))
        fields.pop(self._value_field, None)  # type: ignore[arg-type]

        sequences = {name: _label_sequence(self._view.values(name)) for name in fields}
        for k, value in enumerate(future, start=1):
            record = {name: seq(k) for name, seq in sequences.items() if seq is not None}
            record[self._value_field] = value  # type: ignore[index]
            yield record

    def fit(self) -> Self:
        future, slope, intercept, n_observed = self._future_values()
        forecast = tuple(self._future_records(future)) if self._is_records else tuple(future)
        self._result = ForecastResult(
            history=self._view.records,
            forecast=forecast,
            slope=slope,
            intercept=intercept,
            n_observed=n_observed,
            value_field=self._value_field,
        )
        return self

    def result(self) -> ForecastResult:
        return require_fitted(self._result)


def forecast(records: Any, periods: int, value_field: str | None = None) -> list[Any]:
    """The ``periods`` extrapolated records or values (see :class:`ForecastAnalyzer`)."""
    from recstats.data.record_set import RecordSet  # noqa: PLC0415

    view = RecordSet.coerce(records).view(fields=())
    return list(ForecastAnalyzer(view, periods, value_field).fit().result().forecast)


# ---------------------------------------------------------------------------- bucketing
def _bucket_start(ts: pd.Timestamp, interval: Interval) -> pd.Timestamp:
    day = ts.normalize()
    if interval == "day":
        return day
    if interval == "week":
        return day - pd.Timedelta(days=day.weekday())
    if interval == "month":
        return day.replace(day=1)
    return day.replace(month=1, day=1)


@dataclass(frozen=True)
class TimeSeriesResult:
    """Summed values per calendar bucket, sorted by bucket start.

    Attributes:
        series: Bucket start -> summed value; with gap filling every bucket between
            the first and last one is present.
        interval: Bucket width.
    """

    series: pd.Series
    interval: Interval

    def to_records(self) -> list[dict[str, Any]]:
        return [{"date": date, "value": float(value)} for date, value in self.series.items()]

    def to_frame(self) -> pd.DataFrame:
        return self.series.rename_axis("date").reset_index(name="value")


class TimeSeriesAnalyzer(BaseAnalyser):
    """Sum values per calendar bucket.

    Buckets start at midnight (day), Monday (week), the 1st (month) or January 1st
    (year). With ``fill_gaps`` every bucket between the first and last one is emitted,
    empty ones carrying ``fill_value``. Records with an unparseable date or a
    non-numeric value are skipped.
    """

    def __init__(
        self,
        view: RecordView,
        date_field: FieldSelector,
        value_field: FieldSelector,
        interval: Interval = "day",
        *,
        fill_gaps: bool = True,
        fill_value: float = 0.0,
    ) -> None:
        _check_interval(interval)
        require_numeric(view, value_field, "time_series")
        self._view = view
        self._date_field = date_field
        self._value_field = value_field
        self._interval = interval
        self._fill_gaps = fill_gaps
        self._fill_value = fill_value
        self._result: TimeSeriesResult | None = None

    def fit(self) -> Self:
        sums: dict[pd.Timestamp, float] = {}
        for record in self._view.records:
            ts = to_timestamp(resolve_field(record, self._date_field))
            value = resolve_field(record, self._value_field)
            if ts is None or not is_numeric(value):
                continue
            bucket = _bucket_start(ts, self._interval)
            sums[bucket] = sums.get(bucket, 0.0) + float(value)

        series = pd.Series(sums, dtype=float).sort_index()
        if self._fill_gaps and not series.empty:
            full_range = pd.date_range(series.index[0], series.index[-1], freq=_BUCKET_FREQ[self._interval])
            series = series.reindex(full_range, fill_value=self._fill_value)
        logger.debug(
            "Bucketed %s by %s into %d points",
            selector_name(self._value_field),
            self._interval,
            len(series),
        )
        self._result = TimeSeriesResult(series=series, interval=self._interval)
        return self

    def result(self) -> TimeSeriesResult:
        return require_fitted(self._result)


def time_series(
    records: Any,
    date_field: FieldSelector,
    value_field: FieldSelector,
    interval: Interval = "day",
    *,
    fill_gaps: bool = True,
    fill_value: float = 0.0,
) -> list[dict[str, Any]]:
    """Sum values per calendar bucket and return ``{"date", "value"}`` points sorted by date.

    See :class:`TimeSeriesAnalyzer`.
    """
    from recstats.data.record_set import RecordSet  # noqa: PLC0415

    view = RecordSet.coerce(records).view(fields=())
    analyzer = TimeSeriesAnalyzer(
        view,
        date_field,
        value_field,
        interval,
        fill_gaps=fill_gaps,
        fill_value=fill_value,
    )
    return analyzer.fit().result().to_records()


__all__ = [
    "INTERVALS",
    "ForecastAnalyzer",
    "ForecastResult",
    "SeasonalityAnalyzer",
    "SeasonalityResult",
    "TimeSeriesAnalyzer",
    "TimeSeriesResult",
    "forecast",
    "seasonality",
    "time_series",
    "to_timestamp",
]
