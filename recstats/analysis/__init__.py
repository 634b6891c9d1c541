"""Analysis modules: grouping, aggregation, statistics, signals, time series and classification."""

from .aggregation import AggregationAnalyzer, AggregationResult, aggregate
from .correlation_analyzer import CorrelationAnalyzer, CorrelationResult, correlate, covariance
from .descriptive_statistics import (
    DescribeResult,
    DescriptiveAnalyzer,
    DescriptiveResult,
    describe,
    entropy,
    frequency,
    kurtosis,
    median,
    mode,
    percentile,
    skewness,
    standard_deviation,
    variance,
    zscore,
)
from .grouping import GroupedRecords, GroupingAnalyzer, HavingFilter, group_by, group_by_multiple, having
from .naive_bayes import NaiveBayesAnalyzer, NaiveBayesClassifier, naive_bayes, train_naive_bayes
from .outlier_detector import OutlierDetectionResult, ZScoreOutlierDetector, remove_outliers
from .pivot_table import PivotTableAnalyzer, PivotTableResult, pivot_table
from .signal_processing import (
    ConvolutionAnalyzer,
    ConvolutionResult,
    convolve,
    differentiate,
    integrate,
    interpolate,
    moving_average,
)
from .time_series import (
    ForecastAnalyzer,
    ForecastResult,
    SeasonalityAnalyzer,
    SeasonalityResult,
    TimeSeriesAnalyzer,
    TimeSeriesResult,
    forecast,
    seasonality,
    time_series,
)


__all__ = [
    "AggregationAnalyzer",
    "AggregationResult",
    "ConvolutionAnalyzer",
    "ConvolutionResult",
    "CorrelationAnalyzer",
    "CorrelationResult",
    "DescribeResult",
    "DescriptiveAnalyzer",
    "DescriptiveResult",
    "ForecastAnalyzer",
    "ForecastResult",
    "GroupedRecords",
    "GroupingAnalyzer",
    "HavingFilter",
    "NaiveBayesAnalyzer",
    "NaiveBayesClassifier",
    "OutlierDetectionResult",
    "PivotTableAnalyzer",
    "PivotTableResult",
    "SeasonalityAnalyzer",
    "SeasonalityResult",
    "TimeSeriesAnalyzer",
    "TimeSeriesResult",
    "ZScoreOutlierDetector",
    "aggregate",
    "convolve",
    "correlate",
    "covariance",
    "describe",
    "differentiate",
    "entropy",
    "forecast",
    "frequency",
    "group_by",
    "group_by_multiple",
    "having",
    "integrate",
    "interpolate",
    "kurtosis",
    "median",
    "mode",
    "moving_average",
    "naive_bayes",
    "percentile",
    "pivot_table",
    "remove_outliers",
    "seasonality",
    "skewness",
    "standard_deviation",
    "time_series",
    "train_naive_bayes",
    "variance",
    "zscore",
]
