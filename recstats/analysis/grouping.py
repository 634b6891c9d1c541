"""Order-preserving grouping of records and group-level filtering (``having``)."""

from __future__ import annotations

import logging
import operator
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

from recstats.data.accessor import MISSING, FieldSelector, is_numeric, resolve_field, selector_name
from recstats.data.views import RecordView
from recstats.errors import ConfigurationError

from .base_analyser import BaseAnalyser, require_fitted, require_numeric


if TYPE_CHECKING:
    from recstats.data.record_set import RecordSet


logger = logging.getLogger(__name__)

COMPARISON_OPERATORS: Mapping[str, Callable[[Any, Any], bool]] = {
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
    "=": operator.eq,
    "!=": operator.ne,
}
"""Operators accepted by :func:`having`."""

MULTI_KEY_SEPARATOR = "::"


@dataclass(frozen=True)
class GroupedRecords:
    """Ordered mapping group key -> :class:`RecordSet`.

    Keys appear in order of first appearance in the source scan and every group keeps
    the relative order of its members.

    Attributes:
        groups: Group key to member records.
        key_name: Printable name of the selector that produced the keys.
    """

    groups: Mapping[Any, RecordSet]
    key_name: str = "key"

    def __len__(self) -> int:
        return len(self.groups)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.groups)

    def __getitem__(self, key: Any) -> RecordSet:
        return self.groups[key]

    def __contains__(self, key: object) -> bool:
        return key in self.groups

    def keys(self) -> list[Any]:
        return list(self.groups)

    def items(self) -> list[tuple[Any, RecordSet]]:
        return list(self.groups.items())

    def sizes(self) -> dict[Any, int]:
        """Number of member records per group."""
        return {key: len(members) for key, members in self.groups.items()}

    def flatten(self) -> RecordSet:
        """Concatenate all groups in key order into one record set."""
        from recstats.data.record_set import RecordSet  # noqa: PLC0415

        return RecordSet(record for members in self.groups.values() for record in members)

    def having(self, field: FieldSelector, op: str, value: float) -> GroupedRecords:
        """Keep groups whose sum of ``field`` satisfies ``<op> value`` (see :func:`having`)."""
        return HavingFilter(self, field, op, value).fit().result()

    def to_frame(self) -> pd.DataFrame:
        """Summary frame with one row per group (``key``, ``size``)."""
        return pd.DataFrame(
            {self.key_name: list(self.groups), "size": [len(m) for m in self.groups.values()]},
        )


class GroupingAnalyzer(BaseAnalyser):
    """Partition records into a :class:`GroupedRecords` with a single scan.

    Each record's key is computed by the selector; the record is appended to the
    bucket for that key, which is created on first encounter. Absent fields yield the
    key ``None``. Keys must be hashable.
    """

    def __init__(self, view: RecordView, selector: FieldSelector) -> None:
        self._view = view
        self._selector = selector
        self._result: GroupedRecords | None = None

    def fit(self) -> GroupingAnalyzer:
        from recstats.data.record_set import RecordSet  # noqa: PLC0415

        buckets: dict[Any, list[Any]] = {}
        for record in self._view.records:
            key = resolve_field(record, self._selector)
            if key is MISSING:
                key = None
            buckets.setdefault(key, []).append(record)

        logger.debug("Grouped %d records into %d groups by %s", len(self._view), len(buckets), self._selector)
        self._result = GroupedRecords(
            groups={key: RecordSet(members) for key, members in buckets.items()},
            key_name=selector_name(self._selector, default="key"),
        )
        return self

    def result(self) -> GroupedRecords:
        return require_fitted(self._result)


class HavingFilter(BaseAnalyser):
    """Filter groups by comparing the **sum** of a field per group against a value.

    The sum is taken over valid numeric values only. Operators: ``>``, ``<``, ``>=``,
    ``<=``, ``=``, ``!=``.

    Raises:
        ConfigurationError: For an unknown operator or a non-numeric field, before any scan.
    """

    def __init__(self, grouped: GroupedRecords, field: FieldSelector, op: str, value: float) -> None:
        if op not in COMPARISON_OPERATORS:
            raise ConfigurationError(
                f"Unsupported operator '{op}'. Use one of: {', '.join(COMPARISON_OPERATORS)}.",
            )
        self._grouped = grouped
        self._field = field
        self._compare = COMPARISON_OPERATORS[op]
        self._value = value
        require_numeric(grouped.flatten().view(fields=()), field, "having")
        self._result: GroupedRecords | None = None

    def group_sums(self) -> dict[Any, float]:
        """Representative aggregate (sum of valid values) per group."""
        return {
            key: float(np.sum([float(v) for v in members.pluck(self._field) if is_numeric(v)]))
            for key, members in self._grouped.items()
        }

    def fit(self) -> HavingFilter:
        sums = self.group_sums()
        kept = {key: self._grouped[key] for key, total in sums.items() if self._compare(total, self._value)}
        logger.debug("having kept %d of %d groups", len(kept), len(sums))
        self._result = GroupedRecords(groups=kept, key_name=self._grouped.key_name)
        return self

    def result(self) -> GroupedRecords:
        return require_fitted(self._result)


def _as_view(records: Iterable[Any]) -> RecordView:
    from recstats.data.record_set import RecordSet  # noqa: PLC0415

    return RecordSet.coerce(records).view(fields=())


def group_by(records: Iterable[Any], selector: FieldSelector) -> GroupedRecords:
    """Group ``records`` by ``selector`` keeping first-seen key order.

    Example:
        >>> grouped = group_by([{"k": "a", "v": 1}, {"k": "b", "v": 2}, {"k": "a", "v": 3}], "k")
        >>> grouped.keys()
        ['a', 'b']
    """
    return GroupingAnalyzer(_as_view(records), selector).fit().result()


def group_by_multiple(records: Iterable[Any], *fields: FieldSelector) -> GroupedRecords:
    """Group by a composite key: the ``str`` of every field joined with ``"::"``."""
    if not fields:
        raise ConfigurationError("group_by_multiple requires at least one field.")

    def composite(record: Any) -> str:
        parts = []
        for field in fields:
            value = resolve_field(record, field)
            parts.append(str(None if value is MISSING else value))
        return MULTI_KEY_SEPARATOR.join(parts)

    grouped = GroupingAnalyzer(_as_view(records), composite).fit().result()
    return GroupedRecords(
        groups=grouped.groups,
        key_name=MULTI_KEY_SEPARATOR.join(selector_name(f) for f in fields),
    )


def having(
    records: Iterable[Any] | GroupedRecords,
    field: FieldSelector,
    op: str,
    value: float,
    *,
    by: FieldSelector | None = None,
) -> GroupedRecords:
    """Keep groups whose sum of ``field`` satisfies ``sum <op> value``.

    Args:
        records: Already grouped records, or plain records grouped implicitly by ``by``.
        field: Numeric field summed per group.
        op: One of ``>``, ``<``, ``>=``, ``<=``, ``=``, ``!=``.
        value: Right-hand side of the comparison.
        by: Grouping selector, required when ``records`` is not grouped yet.
    """
    if not isinstance(records, GroupedRecords):
        if by is None:
            raise ConfigurationError("having on ungrouped records requires a 'by' selector.")
        if op not in COMPARISON_OPERATORS:
            raise ConfigurationError(
                f"Unsupported operator '{op}'. Use one of: {', '.join(COMPARISON_OPERATORS)}.",
            )
        view = _as_view(records)
        require_numeric(view, field, "having")
        records = GroupingAnalyzer(view, by).fit().result()
    return HavingFilter(records, field, op, value).fit().result()


__all__ = [
    "COMPARISON_OPERATORS",
    "GroupedRecords",
    "GroupingAnalyzer",
    "HavingFilter",
    "group_by",
    "group_by_multiple",
    "having",
]
