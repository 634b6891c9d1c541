"""Grouped aggregation bar charts."""

import matplotlib.pyplot as plt
import seaborn as sns
from matplotlib.figure import Figure

from recstats.analysis.aggregation import AggregationResult
from recstats.utils.plotting_config import DEFAULT_PLOT_CFG, PlottingConfig


def plot_aggregation_bars(
    result: AggregationResult,
    operation: str | None = None,
    figsize: tuple[int, int] = (10, 6),
    config: PlottingConfig = DEFAULT_PLOT_CFG,
) -> Figure:
    """Bar chart of one aggregation per group, one hue per value field.

    Args:
        result: Fitted :class:`AggregationResult`
        operation: Operation to show (default: the first requested one)
        figsize: Figure size (width, height)
        config: Plotting style

    Returns:
        matplotlib Figure object
    """
    operation = operation or result.operations[0]
    if operation not in result.operations:
        raise ValueError(f"Operation '{operation}' was not computed; available: {list(result.operations)}")

    frame = result.to_frame()
    frame[result.key_name] = frame[result.key_name].astype(str)

    with config.apply():
        fig, ax = plt.subplots(figsize=figsize)
        sns.barplot(data=frame, x=result.key_name, y=operation, hue="field", ax=ax)
        ax.set_title(f"{operation} by {result.key_name}")
        ax.set_xlabel(result.key_name)
        ax.set_ylabel(operation)
        fig.tight_layout()

    return fig
