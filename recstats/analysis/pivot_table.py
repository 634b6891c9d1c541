"""Two-dimensional pivot tables with sum/avg/count cells."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal, Self

import numpy as np
import pandas as pd

from recstats.data.accessor import MISSING, FieldSelector, resolve_field, selector_name
from recstats.data.views import RecordView
from recstats.errors import ConfigurationError

from .base_analyser import BaseAnalyser, require_fitted, require_numeric
from .grouping import GroupingAnalyzer


logger = logging.getLogger(__name__)

PivotAggregation = Literal["sum", "avg", "count"]

EMPTY_CELL: Mapping[str, float | int | None] = {"sum": 0.0, "count": 0, "avg": None}
"""Fill value of a (row, col) combination that no record contributes to."""


@dataclass(frozen=True)
class PivotTableResult:
    """Complete pivot grid.

    Every observed row key maps to every observed column key. Cells without any
    contributing record hold ``0.0`` (sum), ``0`` (count) or ``None`` (avg, meaning
    "no data" rather than zero). An avg cell whose records carry no valid numeric
    value is NaN.

    Attributes:
        cells: Ordered mapping row key -> column key -> value.
        row_keys: Row axis in first-seen order.
        col_keys: Column axis in first-seen order.
        aggregation: ``sum``, ``avg`` or ``count``.
        row_name: Name of the row selector.
        col_name: Name of the column selector.
        value_name: Name of the aggregated field.
    """

    cells: Mapping[Any, Mapping[Any, float | int | None]]
    row_keys: tuple[Any, ...]
    col_keys: tuple[Any, ...]
    aggregation: PivotAggregation
    row_name: str = "row"
    col_name: str = "col"
    value_name: str = "value"

    def __getitem__(self, row: Any) -> Mapping[Any, float | int | None]:
        return self.cells[row]

    def to_frame(self) -> pd.DataFrame:
        """Grid as a DataFrame (rows x cols); "no data" cells become NaN."""
        frame = pd.DataFrame(
            [[np.nan if v is None else v for v in self.cells[row].values()] for row in self.row_keys],
            index=pd.Index(list(self.row_keys), name=self.row_name),
            columns=pd.Index(list(self.col_keys), name=self.col_name),
        )
        return frame

    def to_records(self) -> list[dict[Any, Any]]:
        """One flat record per row key: ``{row_name: key, <col>: value, ...}``."""
        return [{self.row_name: row, **self.cells[row]} for row in self.row_keys]

    # ------------------------------------------------------------------ plotting shortcuts
    def plot_heatmap(self, **kwargs: object):
        """Plot the pivot grid as an annotated heatmap."""
        from recstats.plotting.pivot_plots import plot_pivot_heatmap  # noqa: PLC0415

        return plot_pivot_heatmap(self, **kwargs)


class PivotTableAnalyzer(BaseAnalyser):
    """Cross-tabulate a value field by a row and a column selector.

    Rows are grouped first, then columns within each row. Row and column axes each
    follow first-seen order in the source scan, independently of each other.

    Example:
        >>> from recstats import RecordSet
        >>> rs = RecordSet([
        ...     {"shop": "A", "day": "mon", "sales": 2},
        ...     {"shop": "B", "day": "tue", "sales": 4},
        ... ])
        >>> res = rs.make_pivot_table_analyzer("shop", "day", "sales", "avg").fit().result()
        >>> res.cells["A"]
        {'mon': 2.0, 'tue': None}
    """

    def __init__(
        self,
        view: RecordView,
        rows: FieldSelector,
        cols: FieldSelector,
        value_field: FieldSelector | None = None,
        aggregation: PivotAggregation = "sum",
    ) -> None:
        """Validate the request before any grouping.

        Raises:
            ConfigurationError: Unknown aggregation, or a missing / non-numeric value
                field under ``sum`` or ``avg``.
        """
        if aggregation not in EMPTY_CELL:
            raise ConfigurationError(f"Unsupported pivot aggregation '{aggregation}'. Use 'sum', 'avg' or 'count'.")
        if aggregation != "count":
            if value_field is None:
                raise ConfigurationError(f"Pivot aggregation '{aggregation}' requires a value_field.")
            require_numeric(view, value_field, f"pivot_table({aggregation})")

        self._view = view
        self._rows = rows
        self._cols = cols
        self._value_field = value_field
        self._aggregation = aggregation
        self._result: PivotTableResult | None = None

    def _column_axis(self) -> list[Any]:
        seen: dict[Any, None] = {}
        for record in self._view.records:
            key = resolve_field(record, self._cols)
            seen.setdefault(None if key is MISSING else key, None)
        return list(seen)

    def _cell(self, members: RecordView | None) -> float | int | None:
        if members is None:
            return EMPTY_CELL[self._aggregation]
        if self._aggregation == "count":
            return len(members)
        values = members.numeric(self._value_field)
        if self._aggregation == "sum":
            return float(values.sum())
        return float(values.mean()) if values.size else float("nan")

    def fit(self) -> Self:
        col_keys = self._column_axis()
        by_row = GroupingAnalyzer(self._view, self._rows).fit().result()

        cells: dict[Any, dict[Any, float | int | None]] = {}
        for row, row_members in by_row.items():
            by_col = GroupingAnalyzer(row_members.view(fields=()), self._cols).fit().result()
            cells[row] = {
                col: self._cell(by_col[col].view(fields=()) if col in by_col else None) for col in col_keys
            }

        logger.debug("Pivot %s: %d rows x %d cols", self._aggregation, len(cells), len(col_keys))
        self._result = PivotTableResult(
            cells=cells,
            row_keys=tuple(cells),
            col_keys=tuple(col_keys),
            aggregation=self._aggregation,
            row_name=selector_name(self._rows, default="row"),
            col_name=selector_name(self._cols, default="col"),
            value_name=selector_name(self._value_field, default="count"),
        )
        return self

    def result(self) -> PivotTableResult:
        return require_fitted(self._result)


def pivot_table(
    records: Any,
    rows: FieldSelector,
    cols: FieldSelector,
    value_field: FieldSelector | None = None,
    aggregation: PivotAggregation = "sum",
) -> PivotTableResult:
    """Cross-tabulate ``value_field`` by ``rows`` x ``cols`` (see :class:`PivotTableAnalyzer`)."""
    from recstats.data.record_set import RecordSet  # noqa: PLC0415

    view = RecordSet.coerce(records).view(fields=())
    return PivotTableAnalyzer(view, rows, cols, value_field, aggregation).fit().result()


__all__ = ["EMPTY_CELL", "PivotTableAnalyzer", "PivotTableResult", "pivot_table"]
