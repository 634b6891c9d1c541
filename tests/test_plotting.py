"""Smoke tests for the plotting helpers."""

import pytest
from matplotlib.figure import Figure

from recstats import RecordSet


@pytest.fixture
def monthly() -> RecordSet:
    """A year of monthly observations."""
    return RecordSet([{"d": f"2024-{m:02d}-01", "month": f"M{m}", "v": float(m * 2)} for m in range(1, 13)])


class TestPlotShortcuts:
    """Result objects render through their plotting shortcuts."""

    def test_aggregation_bars(self, sales) -> None:
        """Grouped bars per field."""
        assert isinstance(sales.aggregate("region", ["amount", "units"], ["sum"]).plot_bars(), Figure)

    def test_aggregation_bars_unknown_operation(self, sales) -> None:
        """Plotting an operation that was not computed raises."""
        with pytest.raises(ValueError):
            sales.aggregate("region", ["units"], ["sum"]).plot_bars(operation="max")

    def test_pivot_heatmap(self, sales) -> None:
        """Pivot cells render as a heatmap."""
        assert isinstance(sales.pivot_table("region", "month", "amount", "avg").plot_heatmap(), Figure)

    def test_correlation_heatmap(self, sales) -> None:
        """The correlation matrix renders as a heatmap."""
        result = sales.make_correlation_analyzer(["amount", "units"]).fit().result()
        assert isinstance(result.plot_heatmap(), Figure)

    def test_top_correlated_pairs(self) -> None:
        """Strongest pairs render as horizontal bars."""
        from recstats.plotting import plot_top_correlated_pairs

        rs = RecordSet([{"a": i, "b": i * 2, "c": -i} for i in range(5)])
        assert isinstance(plot_top_correlated_pairs(rs.make_correlation_analyzer().fit().result()), Figure)

    def test_convolution(self) -> None:
        """Signal and output overlay."""
        from recstats.analysis.signal_processing import ConvolutionAnalyzer

        result = ConvolutionAnalyzer([1, 2, 3, 2, 1], kernel=[0.25, 0.5, 0.25]).fit().result()
        assert isinstance(result.plot(), Figure)

    def test_seasonality(self, monthly) -> None:
        """Monthly means render as bars."""
        assert isinstance(monthly.seasonality("d", "v").plot_bars(), Figure)

    def test_forecast(self, monthly) -> None:
        """History and forecast render as one line."""
        assert isinstance(monthly.forecast_result(3, "v").plot(), Figure)
