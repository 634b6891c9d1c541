"""Seasonality and forecast visualization."""

import calendar

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib.figure import Figure

from recstats.analysis.time_series import ForecastResult, SeasonalityResult
from recstats.utils.plotting_config import DEFAULT_PLOT_CFG, PlottingConfig


def _period_labels(result: SeasonalityResult) -> list[str]:
    if result.interval == "month":
        return [calendar.month_abbr[p + 1] for p in result.means]
    return [str(p) for p in result.means]


def plot_seasonality(
    result: SeasonalityResult,
    figsize: tuple[int, int] = (10, 5),
    config: PlottingConfig = DEFAULT_PLOT_CFG,
) -> Figure:
    """Bar chart of the mean value per calendar period."""
    with config.apply():
        fig, ax = plt.subplots(figsize=figsize)
        sns.barplot(x=_period_labels(result), y=list(result.means.values()), color=config.history_color, ax=ax)
        ax.set_title(f"Mean by {result.interval}")
        ax.set_xlabel(result.interval.capitalize())
        ax.set_ylabel("Mean")
        fig.tight_layout()

    return fig


def plot_forecast(
    result: ForecastResult,
    figsize: tuple[int, int] = (10, 5),
    config: PlottingConfig = DEFAULT_PLOT_CFG,
) -> Figure:
    """Observed series followed by its extrapolated trend."""
    value_name = result.value_field or "value"
    frame = result.to_frame(value_name=value_name)
    if frame.empty:
        frame = pd.DataFrame({value_name: [], "is_forecast": []})
    values = pd.to_numeric(frame[value_name], errors="coerce").to_numpy(dtype=float)
    is_forecast = frame["is_forecast"].to_numpy(dtype=bool)
    index = np.arange(values.size)

    with config.apply():
        fig, ax = plt.subplots(figsize=figsize)
        ax.plot(index[~is_forecast], values[~is_forecast], marker="o", color=config.history_color, label="observed")
        if is_forecast.any():
            # bridge from the last observed point into the forecast
            start = max(int(np.argmax(is_forecast)) - 1, 0)
            ax.plot(
                index[start:],
                values[start:],
                linestyle="--",
                marker="x",
                color=config.forecast_color,
                label="forecast",
            )
        ax.set_title("Linear Trend Forecast")
        ax.set_xlabel("Index")
        ax.legend()
        ax.grid(True, alpha=0.3)
        fig.tight_layout()

    return fig
