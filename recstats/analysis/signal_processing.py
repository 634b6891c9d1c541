"""Discrete signal operations over dense numeric series."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Self

import numpy as np

from recstats.data.accessor import FieldSelector, is_numeric, selector_name
from recstats.data.views import RecordView
from recstats.errors import ConfigurationError

from .base_analyser import BaseAnalyser, require_fitted


logger = logging.getLogger(__name__)


def _series(records: Any, field: FieldSelector | None, operation: str) -> np.ndarray:
    """Dense float series of ``field``; every element must be numeric."""
    from recstats.data.record_set import RecordSet  # noqa: PLC0415

    values = RecordSet.coerce(records).pluck(field) if field is not None else list(records)
    bad = [v for v in values if not is_numeric(v)]
    if bad:
        raise ConfigurationError(
            f"'{operation}' requires a numeric series; '{selector_name(field)}' holds {bad[0]!r}.",
        )
    return np.asarray(values, dtype=float)


def _kernel(kernel: Sequence[float]) -> np.ndarray:
    if not all(is_numeric(w) for w in kernel):
        raise ConfigurationError("Convolution kernel weights must be numeric.")
    return np.asarray(list(kernel), dtype=float)


@dataclass(frozen=True)
class ConvolutionResult:
    """Input signal, kernel and their full convolution.

    Attributes:
        signal: Input series.
        kernel: Kernel weights.
        output: ``len(signal) + len(kernel) - 1`` samples (empty if either input is empty).
    """

    signal: np.ndarray
    kernel: np.ndarray
    output: np.ndarray

    def same(self) -> np.ndarray:
        """Trim ``(len(kernel) - 1) // 2`` samples from the start to match the input length."""
        if self.output.size == 0:
            return self.output
        start = (self.kernel.size - 1) // 2
        return self.output[start : start + self.signal.size]

    # ------------------------------------------------------------------ plotting shortcuts
    def plot(self, **kwargs: object):
        """Overlay input signal and convolution output."""
        from recstats.plotting.signal_plots import plot_convolution  # noqa: PLC0415

        return plot_convolution(self, **kwargs)


class ConvolutionAnalyzer(BaseAnalyser):
    r"""Full discrete convolution :math:`y_i = \sum_j x_j\, k_{i-j}` with implicit zero padding.

    Full mode needs no boundary policy and keeps all edge information; callers wanting
    a same-length result use :meth:`ConvolutionResult.same`.

    Example:
        >>> ConvolutionAnalyzer([1, 2, 3], kernel=[0.5, 0.5]).fit().result().output.tolist()
        [0.5, 1.5, 2.5, 1.5]
    """

    def __init__(
        self,
        records: RecordView | Sequence[Any],
        kernel: Sequence[float],
        field: FieldSelector | None = None,
    ) -> None:
        items = records.records if isinstance(records, RecordView) else records
        self._signal = _series(items, field, "convolve")
        self._kernel = _kernel(kernel)
        self._result: ConvolutionResult | None = None

    def fit(self) -> Self:
        if self._signal.size == 0 or self._kernel.size == 0:
            output = np.empty(0, dtype=float)
        else:
            output = np.convolve(self._signal, self._kernel, mode="full")
        logger.debug("Convolved %d samples with %d-tap kernel", self._signal.size, self._kernel.size)
        self._result = ConvolutionResult(signal=self._signal, kernel=self._kernel, output=output)
        return self

    def result(self) -> ConvolutionResult:
        return require_fitted(self._result)


def convolve(records: Any, kernel: Sequence[float], field: FieldSelector | None = None) -> list[float]:
    """Full convolution of the numeric series with ``kernel`` (see :class:`ConvolutionAnalyzer`)."""
    return ConvolutionAnalyzer(list(records), kernel, field=field).fit().result().output.tolist()


def moving_average(
    records: Any,
    window: int,
    *,
    centered: bool = False,
    field: FieldSelector | None = None,
) -> list[float]:
    """Simple moving average.

    Without ``centered`` the output has ``n - window + 1`` samples, the i-th averaging
    ``values[i:i + window]``. With ``centered`` the output has ``n`` samples, each
    average placed ``window // 2`` positions later and undefined ends set to NaN.
    """
    values = _series(list(records), field, "moving_average")
    if not 1 <= window <= values.size:
        raise ConfigurationError(f"Invalid window size {window} for a series of {values.size} values.")
    averages = np.convolve(values, np.full(window, 1.0 / window), mode="valid")
    if not centered:
        return averages.tolist()
    padded = np.full(values.size, np.nan)
    offset = window // 2
    padded[offset : offset + averages.size] = averages
    return padded.tolist()


def differentiate(records: Any, field: FieldSelector | None = None) -> list[float]:
    """First differences ``values[i + 1] - values[i]``."""
    return np.diff(_series(list(records), field, "differentiate")).tolist()


def integrate(records: Any, field: FieldSelector | None = None) -> list[float]:
    """Running sum starting at 0 (``n + 1`` samples)."""
    values = _series(list(records), field, "integrate")
    return np.concatenate(([0.0], np.cumsum(values))).tolist()


def interpolate(records: Any, points: int, field: FieldSelector | None = None) -> list[float]:
    """Linearly resample the series to ``points`` evenly spaced samples."""
    if points < 2:
        raise ConfigurationError(f"interpolate needs at least 2 points, got {points}.")
    values = _series(list(records), field, "interpolate")
    if values.size == 0:
        return []
    positions = np.linspace(0, values.size - 1, points)
    return np.interp(positions, np.arange(values.size), values).tolist()


__all__ = [
    "ConvolutionAnalyzer",
    "ConvolutionResult",
    "convolve",
    "differentiate",
    "integrate",
    "interpolate",
    "moving_average",
]
