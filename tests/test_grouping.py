"""Tests for grouping and group-level filtering."""

import pytest

from recstats import ConfigurationError, RecordSet
from recstats.analysis.grouping import GroupedRecords, GroupingAnalyzer, HavingFilter, group_by, group_by_multiple, having


class TestGroupBy:
    """Single-scan grouping keeps first-seen order."""

    def test_keys_in_first_seen_order(self, sales) -> None:
        """Group keys follow the first record of each group."""
        grouped = sales.group_by("region")
        assert grouped.keys() == ["north", "south", "east"]
        assert grouped.sizes() == {"north": 3, "south": 2, "east": 1}

    def test_members_keep_source_order(self, sales) -> None:
        """Members keep their source order."""
        grouped = sales.group_by("region")
        assert grouped["north"].pluck("month") == ["Jan", "Feb", "Mar"]

    def test_flatten_preserves_every_record(self, sales) -> None:
        """Flattening returns every record once."""
        flat = sales.group_by("region").flatten()
        assert len(flat) == len(sales)
        assert sorted(flat.pluck("units")) == sorted(sales.pluck("units"))

    def test_absent_key_groups_under_none(self) -> None:
        """Records without the key group under None."""
        grouped = group_by([{"k": "a"}, {"x": 1}, {"k": "a"}], "k")
        assert grouped.keys() == ["a", None]
        assert None in grouped

    def test_callable_selector(self) -> None:
        """Callable selectors group and name the result."""
        grouped = group_by([1, 2, 3, 4, 5], lambda v: "even" if v % 2 == 0 else "odd")
        assert grouped["odd"].to_list() == [1, 3, 5]
        assert grouped.key_name == "<lambda>"

    def test_empty_input(self) -> None:
        """Empty input has no groups."""
        assert len(group_by([], "k")) == 0

    def test_result_before_fit(self, sales) -> None:
        """result() requires fit()."""
        with pytest.raises(ValueError, match="Must call fit"):
            GroupingAnalyzer(sales.view(fields=()), "region").result()

    def test_to_frame(self, sales) -> None:
        """One row per group with its size."""
        frame = sales.group_by("region").to_frame()
        assert list(frame.columns) == ["region", "size"]
        assert frame["size"].tolist() == [3, 2, 1]


class TestGroupByMultiple:
    """Composite keys join field values with '::'."""

    def test_composite_keys(self, sales) -> None:
        """Keys join the field values with '::'."""
        grouped = sales.group_by_multiple("region", "month")
        assert grouped.keys()[:3] == ["north::Jan", "south::Jan", "north::Feb"]
        assert grouped.key_name == "region::month"

    def test_missing_part_renders_none(self) -> None:
        """Absent parts render as 'None'."""
        grouped = group_by_multiple([{"a": 1}], "a", "b")
        assert grouped.keys() == ["1::None"]

    def test_requires_fields(self) -> None:
        """At least one field is needed."""
        with pytest.raises(ConfigurationError):
            group_by_multiple([{"a": 1}])


class TestHaving:
    """Groups are kept by the sum of a numeric field."""

    @pytest.mark.parametrize(
        ("op", "value", "expected"),
        [
            (">", 100, ["north"]),
            (">=", 80, ["north", "south"]),
            ("<", 80, ["east"]),
            ("<=", 80, ["south", "east"]),
            ("=", 0, ["east"]),
            ("!=", 0, ["north", "south"]),
        ],
    )
    def test_operators(self, sales, op, value, expected) -> None:
        """Each comparison operator filters groups by their sum."""
        assert sales.having("region", "amount", op, value).keys() == expected

    def test_group_sums_skip_invalid_values(self, sales) -> None:
        """Group sums ignore missing and unparseable values."""
        sums = HavingFilter(sales.group_by("region"), "amount", ">", 0).group_sums()
        assert sums == {"north": 300.0, "south": 80.0, "east": 0.0}

    def test_chained_from_grouped(self, sales) -> None:
        """having() chains from a grouped result."""
        kept = sales.group_by("region").having("units", ">", 4)
        assert isinstance(kept, GroupedRecords)
        assert kept.keys() == ["north", "south"]

    def test_unknown_operator(self, sales) -> None:
        """Unknown operators are rejected."""
        with pytest.raises(ConfigurationError, match="Unsupported operator"):
            having(sales, "amount", "~", 1, by="region")

    def test_non_numeric_field(self, sales) -> None:
        """String fields are rejected."""
        with pytest.raises(ConfigurationError, match="numeric"):
            having(sales, "month", ">", 1, by="region")

    def test_ungrouped_requires_by(self, sales) -> None:
        """Filtering an ungrouped set needs a grouping field."""
        with pytest.raises(ConfigurationError):
            having(sales, "amount", ">", 1)

    def test_empty_input_keeps_nothing(self) -> None:
        """Empty input keeps no groups."""
        assert len(having(RecordSet(), "amount", ">", 0, by="region")) == 0
