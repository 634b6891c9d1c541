from .analysis_config import DEFAULT_ANALYSIS_CFG, AnalysisConfig
from .logging_config import configure_logging
from .plotting_config import DEFAULT_PLOT_CFG, PlottingConfig


__all__ = [
    "DEFAULT_ANALYSIS_CFG",
    "DEFAULT_PLOT_CFG",
    "AnalysisConfig",
    "PlottingConfig",
    "configure_logging",
]
