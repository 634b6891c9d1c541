"""Pearson correlation and covariance between numeric fields."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Self

import numpy as np
import pandas as pd

from recstats.data.accessor import FieldSelector
from recstats.data.views import RecordView

from .base_analyser import BaseAnalyser, require_fitted, require_numeric


logger = logging.getLogger(__name__)


def _paired(view: RecordView, field_a: FieldSelector, field_b: FieldSelector) -> tuple[np.ndarray, np.ndarray]:
    """Values of both fields restricted to records where both are valid numbers."""
    a = view.numeric_or_nan(field_a)
    b = view.numeric_or_nan(field_b)
    mask = ~(np.isnan(a) | np.isnan(b))
    return a[mask], b[mask]


def pearson(a: np.ndarray, b: np.ndarray) -> float:
    r"""Pearson coefficient :math:`\frac{\sum (a-\bar a)(b-\bar b)}{\sqrt{\sum (a-\bar a)^2 \sum (b-\bar b)^2}}`.

    NaN with fewer than two pairs or when either side has zero variance.
    """
    if a.size < 2:
        return float("nan")
    da = a - a.mean()
    db = b - b.mean()
    denominator = math.sqrt(float(np.dot(da, da)) * float(np.dot(db, db)))
    if denominator == 0:
        return float("nan")
    return float(np.dot(da, db)) / denominator


@dataclass(frozen=True)
class CorrelationResult:
    """Correlation analysis outputs grouped for plotting and reporting.

    Attributes:
        matrix: Pairwise-complete Pearson correlation matrix (rows/cols = fields);
            NaN where fewer than two pairs exist or a field has zero variance.
        pretty_by_col: Mapping from field names to presentation labels.
        feature_pairs: DataFrame with columns `feature_a`, `feature_b`, `correlation`,
            `abs_correlation`, `pair`; sorted by strongest absolute correlations.
    """

    matrix: pd.DataFrame
    pretty_by_col: dict[str, str]
    feature_pairs: pd.DataFrame

    # ------------------------------------------------------------------ plotting shortcuts
    def plot_heatmap(self, **kwargs: object):
        """Plot correlation heatmap using the plotting helper."""
        from recstats.plotting.correlation_plots import plot_correlation_heatmap  # noqa: PLC0415

        return plot_correlation_heatmap(self, **kwargs)


class CorrelationAnalyzer(BaseAnalyser):
    """Analyzer for computing correlations between several numeric fields.

    Each pair only uses records where both values are valid numbers
    (pairwise-complete), mirroring :func:`correlate`.

    Example:
        >>> from recstats import RecordSet
        >>> rs = RecordSet([{"a": 1, "b": 2, "c": 9}, {"a": 2, "b": 4, "c": 7}, {"a": 3, "b": 6, "c": 8}])
        >>> res = rs.make_correlation_analyzer(["a", "b", "c"]).fit().result()
        >>> res.feature_pairs.loc[0, "pair"]
        'a vs b'
    """

    def __init__(self, view: RecordView, fields: Sequence[str], top_n_pairs: int = 20) -> None:
        """Initialize the correlation analyzer with a record view."""
        for field in fields:
            require_numeric(view, field, "correlate")
        self._view = view
        self._fields = list(fields)
        self._top_n_pairs = top_n_pairs
        self._corr_mat: pd.DataFrame | None = None

    def get_correlation_matrix(self) -> pd.DataFrame:
        """Compute the Pearson correlation matrix via :meth:`pandas.DataFrame.corr`."""
        if self._corr_mat is None:
            frame = pd.DataFrame({field: self._view.numeric_or_nan(field) for field in self._fields})
            self._corr_mat = frame.corr(method="pearson", min_periods=2)
        return self._corr_mat

    def get_top_correlated_pairs(self, n: int = 20) -> pd.DataFrame:
        """Return the strongest absolute Pearson correlations between field pairs.

        The symmetric matrix is vectorized by masking the upper triangle (excluding
        the diagonal) with :func:`np.triu`; undefined (NaN) pairs are dropped.
        """
        corr_matrix = self.get_correlation_matrix()
        mask = np.triu(np.ones(corr_matrix.shape, dtype=bool), k=1)

        return (
            corr_matrix.where(mask)
            .melt(ignore_index=False, var_name="feature_b", value_name="correlation")
            .dropna()
            .reset_index()
            .rename(columns={"index": "feature_a"})
            .assign(
                abs_correlation=lambda d: d.correlation.abs(),
                pair=lambda d: d.feature_a + " vs " + d.feature_b,
            )
            .sort_values("abs_correlation", ascending=False, kind="stable")
            .head(n)
            .reset_index(drop=True)
        )

    def fit(self) -> Self:
        """Compute correlation matrix."""
        matrix = self.get_correlation_matrix()
        logger.debug("Correlation matrix over %d fields", matrix.shape[0])
        return self

    def result(self) -> CorrelationResult:
        return CorrelationResult(
            matrix=require_fitted(self._corr_mat),
            pretty_by_col={field: field.replace("_", " ").title() for field in self._fields},
            feature_pairs=self.get_top_correlated_pairs(n=self._top_n_pairs),
        )


def _view(records: Any) -> RecordView:
    from recstats.data.record_set import RecordSet  # noqa: PLC0415

    return RecordSet.coerce(records).view(fields=())


def correlate(records: Any, field_a: FieldSelector, field_b: FieldSelector) -> float:
    """Pearson correlation of two numeric fields over records where both are valid.

    Returns NaN (never 0) with fewer than two valid pairs or zero variance on either
    side; callers must check with :func:`math.isnan`.

    Raises:
        ConfigurationError: If either field holds no numeric values (non-empty input).
    """
    view = _view(records)
    require_numeric(view, field_a, "correlate")
    require_numeric(view, field_b, "correlate")
    return pearson(*_paired(view, field_a, field_b))


def covariance(records: Any, field_a: FieldSelector, field_b: FieldSelector) -> float:
    """Population covariance over records where both values are valid; NaN without pairs."""
    view = _view(records)
    require_numeric(view, field_a, "covariance")
    require_numeric(view, field_b, "covariance")
    a, b = _paired(view, field_a, field_b)
    if a.size == 0:
        return float("nan")
    return float(np.dot(a - a.mean(), b - b.mean()) / a.size)


__all__ = ["CorrelationAnalyzer", "CorrelationResult", "correlate", "covariance", "pearson"]
