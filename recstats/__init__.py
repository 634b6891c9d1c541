from .data import MISSING, FieldKind, RecordSet, RecordView
from .errors import ConfigurationError
from .utils import DEFAULT_ANALYSIS_CFG, AnalysisConfig, configure_logging


__all__ = [
    "DEFAULT_ANALYSIS_CFG",
    "MISSING",
    "AnalysisConfig",
    "ConfigurationError",
    "FieldKind",
    "RecordSet",
    "RecordView",
    "configure_logging",
]
