"""Pivot grid heatmaps."""

import matplotlib.pyplot as plt
import seaborn as sns
from matplotlib.figure import Figure

from recstats.analysis.pivot_table import PivotTableResult
from recstats.utils.plotting_config import DEFAULT_PLOT_CFG, PlottingConfig


def plot_pivot_heatmap(
    result: PivotTableResult,
    figsize: tuple[int, int] = (10, 8),
    config: PlottingConfig = DEFAULT_PLOT_CFG,
    **kwargs: object,
) -> Figure:
    """Annotated heatmap of a pivot grid; "no data" cells are left blank."""
    grid = result.to_frame().astype(float)
    grid.index = grid.index.map(str)
    grid.columns = grid.columns.map(str)

    with config.apply():
        fig, ax = plt.subplots(figsize=figsize)
        sns.heatmap(grid, annot=True, fmt=".2f", cmap=config.heatmap_cmap, ax=ax, **kwargs)  # type: ignore[arg-type]
        ax.set_title(f"{result.aggregation}({result.value_name}) by {result.row_name} x {result.col_name}")
        ax.set_xlabel(result.col_name)
        ax.set_ylabel(result.row_name)
        fig.tight_layout()

    return fig
