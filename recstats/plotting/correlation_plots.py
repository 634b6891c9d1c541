"""Correlation analysis visualization functions."""

import matplotlib.pyplot as plt
import seaborn as sns
from matplotlib.figure import Figure

from recstats.analysis.correlation_analyzer import CorrelationResult
from recstats.utils.plotting_config import DEFAULT_PLOT_CFG, PlottingConfig


def plot_correlation_heatmap(
    result: CorrelationResult,
    figsize: tuple[int, int] = (8, 8),
    config: PlottingConfig = DEFAULT_PLOT_CFG,
    **kwargs: object,
) -> Figure:
    """Plot correlation heatmap of all fields.

    Args:
        result: Fitted :class:`CorrelationResult`
        figsize: Figure size (width, height)
        config: Plotting style
        **kwargs: Additional arguments passed to seaborn.heatmap

    Returns:
        matplotlib Figure object
    """
    corr_renamed = result.matrix.rename(index=result.pretty_by_col, columns=result.pretty_by_col)

    with config.apply():
        fig, ax = plt.subplots(figsize=figsize)
        sns.heatmap(
            corr_renamed,
            annot=True,
            fmt=".2f",
            cmap=config.heatmap_cmap,
            vmin=-1,
            vmax=1,
            ax=ax,
            **kwargs,  # type: ignore[arg-type]
        )
        ax.tick_params(axis="both", rotation=45)
        ax.set_title("Field Correlations")
        fig.tight_layout()

    return fig


def plot_top_correlated_pairs(
    result: CorrelationResult,
    figsize: tuple[int, int] = (10, 6),
    config: PlottingConfig = DEFAULT_PLOT_CFG,
) -> Figure:
    """Plot the strongest correlated field pairs as horizontal bars."""
    pairs = result.feature_pairs

    with config.apply():
        fig, ax = plt.subplots(figsize=figsize)
        sns.barplot(
            data=pairs,
            x="correlation",
            y="pair",
            hue="correlation",
            palette=config.heatmap_cmap,
            legend=False,
            ax=ax,
        )
        ax.set_title(f"Top {len(pairs)} Correlated Field Pairs")
        ax.set_xlabel("Pearson Correlation")
        ax.axvline(0, color="black", linewidth=1, linestyle="--")
        fig.tight_layout()

    return fig
