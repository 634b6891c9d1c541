"""Tests for grouped aggregation."""

import math

import pytest

from recstats import ConfigurationError, RecordSet
from recstats.analysis.aggregation import AGGREGATIONS, AggregationResult, aggregate


ALL_OPS = ["sum", "avg", "min", "max", "count", "count_valid"]


class TestAggregate:
    """Operations over valid numeric values per group."""

    def test_full_group(self, sales) -> None:
        """Every operation over a group whose values are all valid."""
        result = sales.aggregate("region", ["amount"], ALL_OPS)
        assert isinstance(result, AggregationResult)
        assert result["north"]["amount"] == {
            "sum": 300.0,
            "avg": 100.0,
            "min": 30.0,
            "max": 150.0,
            "count": 3,
            "count_valid": 3,
        }

    def test_count_ignores_validity(self, sales) -> None:
        """count includes records without a valid value, count_valid does not."""
        south = sales.aggregate("region", ["amount"], ALL_OPS)["south"]["amount"]
        assert south["count"] == 2
        assert south["count_valid"] == 1
        assert south["avg"] == 80.0

    def test_group_without_valid_values(self, sales) -> None:
        """No valid values gives sum 0 and NaN for avg, min and max."""
        east = sales.aggregate("region", ["amount"], ALL_OPS)["east"]["amount"]
        assert east["sum"] == 0.0
        assert math.isnan(east["avg"])
        assert math.isnan(east["min"])
        assert math.isnan(east["max"])

    def test_several_fields_in_request_order(self, sales) -> None:
        """Value fields are reported in the order requested."""
        result = sales.aggregate("region", ["units", "amount"], ["sum"])
        assert result.value_fields == ("units", "amount")
        assert result["north"]["units"]["sum"] == 8.0

    def test_keys_follow_first_seen_order(self, sales) -> None:
        """Group keys keep their first-seen order."""
        assert sales.aggregate("region", ["units"], ["count"]).keys() == ["north", "south", "east"]

    def test_empty_dataset(self) -> None:
        """An empty set aggregates to an empty result."""
        assert len(aggregate([], "region", ["amount"], ["sum"])) == 0

    def test_count_over_string_field(self, sales) -> None:
        """count works on fields that are not numeric."""
        result = sales.aggregate("region", ["month"], ["count"])
        assert result["north"]["month"]["count"] == 3

    def test_to_frame(self, sales) -> None:
        """One row per group and field, one column per operation."""
        frame = sales.aggregate("region", ["amount"], ["sum", "count"]).to_frame()
        assert list(frame.columns) == ["region", "field", "sum", "count"]
        assert frame.shape == (3, 4)

    def test_supported_operations(self) -> None:
        """The operation table lists every supported operation."""
        assert set(AGGREGATIONS) == set(ALL_OPS)

    def test_counts_are_integers(self, sales) -> None:
        """Both count operations return ints, like pivot count cells."""
        south = sales.aggregate("region", ["amount"], ["count", "count_valid"])["south"]["amount"]
        assert isinstance(south["count"], int)
        assert isinstance(south["count_valid"], int)
        pivot = sales.pivot_table("region", "month", aggregation="count")
        assert south["count"] == sum(pivot.cells["south"].values())
        assert isinstance(pivot.cells["south"]["Jan"], int)


class TestAggregateValidation:
    """Configuration errors are raised before any scan."""

    def test_non_numeric_field(self, sales) -> None:
        """Numeric operations reject a string field."""
        with pytest.raises(ConfigurationError, match="numeric"):
            sales.aggregate("region", ["month"], ["sum"])

    def test_unknown_operation(self, sales) -> None:
        """Unknown operation names are rejected."""
        with pytest.raises(ConfigurationError, match="Unsupported"):
            sales.aggregate("region", ["amount"], ["median"])

    def test_value_fields_required(self, sales) -> None:
        """At least one value field is needed."""
        with pytest.raises(ConfigurationError):
            sales.aggregate("region", [], ["sum"])

    def test_operations_required(self) -> None:
        """At least one operation is needed."""
        with pytest.raises(ConfigurationError):
            RecordSet([{"a": 1}]).aggregate("a", ["a"], [])
