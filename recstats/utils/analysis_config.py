"""Shared analysis defaults (thresholds, smoothing, calendar conventions)."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal


@dataclass(frozen=True)
class AnalysisConfig:
    """Defaults consulted by analyzers when a call does not override them.

    Attributes:
        outlier_threshold: Number of population standard deviations a value may lie
            from the mean before :func:`remove_outliers` drops its record.
        laplace_alpha: Additive smoothing constant for the Naive Bayes conditionals
            (1.0 is classic add-one smoothing).
        week_start: First day of the week for ``day`` seasonality; the first day maps to 0.
        gap_fill_value: Value emitted for empty buckets by :func:`time_series`.
        scalar_field: Column name used when a scalar record set is rendered as a frame.
        top_n_pairs: Number of strongest pairs reported by the correlation analyzer.
    """

    outlier_threshold: float = 2.0
    laplace_alpha: float = 1.0
    week_start: Literal["monday", "sunday"] = "monday"
    gap_fill_value: float = 0.0
    scalar_field: str = "value"
    top_n_pairs: int = 20

    def __post_init__(self) -> None:
        if self.outlier_threshold < 0:
            raise ValueError(f"outlier_threshold must be non-negative, got {self.outlier_threshold}")
        if self.laplace_alpha <= 0:
            raise ValueError(f"laplace_alpha must be positive, got {self.laplace_alpha}")
        if self.week_start not in ("monday", "sunday"):
            raise ValueError(f"Invalid week_start='{self.week_start}'. Use 'monday' or 'sunday'.")

    def with_overrides(self, **changes: object) -> AnalysisConfig:
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)  # type: ignore[arg-type]


# Default configuration used across analyzers
DEFAULT_ANALYSIS_CFG = AnalysisConfig()


__all__ = ["DEFAULT_ANALYSIS_CFG", "AnalysisConfig"]
