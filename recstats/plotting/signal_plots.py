"""Signal processing visualization."""

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from recstats.analysis.signal_processing import ConvolutionResult
from recstats.utils.plotting_config import DEFAULT_PLOT_CFG, PlottingConfig


def plot_convolution(
    result: ConvolutionResult,
    same_length: bool = True,
    figsize: tuple[int, int] = (10, 5),
    config: PlottingConfig = DEFAULT_PLOT_CFG,
) -> Figure:
    """Overlay the input signal with its convolution output."""
    output = result.same() if same_length else result.output

    with config.apply():
        fig, ax = plt.subplots(figsize=figsize)
        ax.plot(np.arange(result.signal.size), result.signal, marker="o", color=config.history_color, label="signal")
        ax.plot(np.arange(output.size), output, marker=".", color=config.forecast_color, label="convolved")
        ax.set_title(f"Convolution with {result.kernel.size}-tap kernel")
        ax.set_xlabel("Index")
        ax.legend()
        ax.grid(True, alpha=0.3)
        fig.tight_layout()

    return fig
