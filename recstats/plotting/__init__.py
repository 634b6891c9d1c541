"""Plotting utilities for analysis results."""

from .aggregation_plots import plot_aggregation_bars
from .correlation_plots import plot_correlation_heatmap, plot_top_correlated_pairs
from .pivot_plots import plot_pivot_heatmap
from .signal_plots import plot_convolution
from .time_series_plots import plot_forecast, plot_seasonality


__all__ = [
    # Grouped results
    "plot_aggregation_bars",
    "plot_pivot_heatmap",
    # Correlation plots
    "plot_correlation_heatmap",
    "plot_top_correlated_pairs",
    # Series plots
    "plot_convolution",
    "plot_forecast",
    "plot_seasonality",
]
