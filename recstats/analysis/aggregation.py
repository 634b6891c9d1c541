"""Named aggregate statistics per group over explicit value fields."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Self

import numpy as np
import pandas as pd

from recstats.data.accessor import FieldSelector, selector_name
from recstats.data.views import RecordView
from recstats.errors import ConfigurationError

from .base_analyser import BaseAnalyser, require_fitted, require_numeric
from .grouping import GroupingAnalyzer


logger = logging.getLogger(__name__)


def _sum(values: np.ndarray, n_records: int) -> float:
    return float(values.sum())


def _avg(values: np.ndarray, n_records: int) -> float:
    return float(values.sum() / values.size) if values.size else float("nan")


def _min(values: np.ndarray, n_records: int) -> float:
    return float(values.min()) if values.size else float("nan")


def _max(values: np.ndarray, n_records: int) -> float:
    return float(values.max()) if values.size else float("nan")


def _count(values: np.ndarray, n_records: int) -> int:
    return n_records


def _count_valid(values: np.ndarray, n_records: int) -> int:
    return int(values.size)


AGGREGATIONS: Mapping[str, Callable[[np.ndarray, int], float | int]] = {
    "sum": _sum,
    "avg": _avg,
    "min": _min,
    "max": _max,
    "count": _count,
    "count_valid": _count_valid,
}
"""Supported operations: valid numeric values of the group and its record count -> number."""

NUMERIC_AGGREGATIONS = frozenset({"sum", "avg", "min", "max"})


@dataclass(frozen=True)
class AggregationResult:
    """Aggregation outputs keyed by group.

    Attributes:
        groups: Ordered mapping group key -> field name -> operation -> number.
        key_name: Name of the grouping selector.
        value_fields: Field names in request order.
        operations: Operation names in request order.
    """

    groups: Mapping[Any, Mapping[str, Mapping[str, float | int]]]
    key_name: str
    value_fields: tuple[str, ...]
    operations: tuple[str, ...]

    def __getitem__(self, key: Any) -> Mapping[str, Mapping[str, float | int]]:
        return self.groups[key]

    def __len__(self) -> int:
        return len(self.groups)

    def keys(self) -> list[Any]:
        return list(self.groups)

    def to_records(self) -> list[dict[str, Any]]:
        """One flat record per (group, field) with one column per operation."""
        return [
            {self.key_name: key, "field": field, **stats}
            for key, by_field in self.groups.items()
            for field, stats in by_field.items()
        ]

    def to_frame(self) -> pd.DataFrame:
        """Long frame with columns ``<key_name>``, ``field`` and one per operation."""
        return pd.DataFrame(self.to_records(), columns=[self.key_name, "field", *self.operations])

    # ------------------------------------------------------------------ plotting shortcuts
    def plot_bars(self, **kwargs: object):
        """Bar chart of one operation per group and field."""
        from recstats.plotting.aggregation_plots import plot_aggregation_bars  # noqa: PLC0415

        return plot_aggregation_bars(self, **kwargs)


class AggregationAnalyzer(BaseAnalyser):
    """Group records and compute named operations over explicit value fields.

    ``sum``/``min``/``max``/``avg`` only look at valid numeric values of the field;
    ``avg``, ``min`` and ``max`` are NaN when a group has none (``sum`` is 0).
    ``count`` is the number of records in the group regardless of field validity,
    while ``count_valid`` counts the valid numeric values.

    Example:
        >>> from recstats import RecordSet
        >>> rs = RecordSet([{"team": "a", "pts": 3}, {"team": "a", "pts": "n/a"}, {"team": "b", "pts": 5}])
        >>> res = rs.make_aggregation_analyzer("team", ["pts"], ["avg", "count"]).fit().result()
        >>> res["a"]["pts"]
        {'avg': 3.0, 'count': 2.0}
    """

    def __init__(
        self,
        view: RecordView,
        by: FieldSelector,
        value_fields: Sequence[FieldSelector],
        operations: Sequence[str],
    ) -> None:
        """Validate the request before any grouping.

        Raises:
            ConfigurationError: Unknown operation, no value fields, or a non-numeric
                field requested under ``sum``/``avg``/``min``/``max``.
        """
        unknown = [op for op in operations if op not in AGGREGATIONS]
        if unknown:
            raise ConfigurationError(f"Unsupported aggregation(s) {unknown}. Use any of: {', '.join(AGGREGATIONS)}.")
        if not operations:
            raise ConfigurationError("aggregate requires at least one operation.")
        if not value_fields:
            raise ConfigurationError("aggregate requires explicit value_fields.")

        for op in NUMERIC_AGGREGATIONS.intersection(operations):
            for field in value_fields:
                require_numeric(view, field, op)

        self._view = view
        self._by = by
        self._value_fields = list(value_fields)
        self._operations = list(operations)
        self._result: AggregationResult | None = None

    def fit(self) -> Self:
        grouped = GroupingAnalyzer(self._view, self._by).fit().result()
        names = [selector_name(field) for field in self._value_fields]

        groups: dict[Any, dict[str, dict[str, float | int]]] = {}
        for key, members in grouped.items():
            member_view = members.view(fields=())
            by_field: dict[str, dict[str, float | int]] = {}
            for name, field in zip(names, self._value_fields, strict=True):
                values = member_view.numeric(field)
                by_field[name] = {op: AGGREGATIONS[op](values, len(members)) for op in self._operations}
            groups[key] = by_field

        logger.debug("Aggregated %d groups over fields %s with %s", len(groups), names, self._operations)
        self._result = AggregationResult(
            groups=groups,
            key_name=grouped.key_name,
            value_fields=tuple(names),
            operations=tuple(self._operations),
        )
        return self

    def result(self) -> AggregationResult:
        return require_fitted(self._result)


def aggregate(
    records: Any,
    by: FieldSelector,
    value_fields: Sequence[FieldSelector],
    operations: Sequence[str],
) -> AggregationResult:
    """Compute ``operations`` over every field of ``value_fields`` per group of ``by``."""
    from recstats.data.record_set import RecordSet  # noqa: PLC0415

    view = RecordSet.coerce(records).view(fields=())
    return AggregationAnalyzer(view, by, value_fields, operations).fit().result()


__all__ = ["AGGREGATIONS", "AggregationAnalyzer", "AggregationResult", "aggregate"]
