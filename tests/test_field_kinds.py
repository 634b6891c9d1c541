"""Tests for field access, numeric validity and field kind profiling."""

import datetime as dt
import math

import numpy as np
import pytest

from recstats.data.accessor import MISSING, is_numeric, resolve_field, selector_name
from recstats.data.field_kinds import FieldKind, kind_of, profile_values
from recstats.data.views import build_view


class TestResolveField:
    """Field names, callables and scalars."""

    def test_mapping_lookup(self) -> None:
        """Field names look up mapping keys; absent keys give MISSING."""
        assert resolve_field({"a": 1}, "a") == 1
        assert resolve_field({"a": 1}, "b") is MISSING

    def test_callable_selector(self) -> None:
        """Callables are applied to the record."""
        assert resolve_field({"a": 2}, lambda r: r["a"] + 1) == 3

    def test_none_selector_returns_record(self) -> None:
        """A None selector yields the record itself."""
        assert resolve_field(7, None) == 7

    def test_missing_sentinel(self) -> None:
        """MISSING is falsy and has a readable repr."""
        assert not MISSING
        assert repr(MISSING) == "MISSING"

    def test_selector_name(self) -> None:
        """Selectors are named by field, function name or default."""
        def revenue(record):
            return record

        assert selector_name("amount") == "amount"
        assert selector_name(revenue) == "revenue"
        assert selector_name(None, default="key") == "key"


class TestIsNumeric:
    """Only real, non-boolean, non-NaN numbers are valid."""

    @pytest.mark.parametrize("value", [0, 1.5, -3, np.float64(2.0), np.int32(4), math.inf])
    def test_valid(self, value) -> None:
        """Real numbers, infinity included, are numeric."""
        assert is_numeric(value)

    @pytest.mark.parametrize("value", [True, False, float("nan"), "1", None, MISSING, 1 + 2j])
    def test_invalid(self, value) -> None:
        """Booleans, NaN, complex numbers and non-numbers are rejected."""
        assert not is_numeric(value)


class TestFieldKinds:
    """Per-value tags and aggregated field profiles."""

    def test_kind_of(self) -> None:
        """Each value maps to its field kind."""
        assert kind_of(3) is FieldKind.NUMERIC
        assert kind_of("x") is FieldKind.STRING
        assert kind_of(True) is FieldKind.BOOLEAN
        assert kind_of(dt.date(2024, 1, 1)) is FieldKind.DATE
        assert kind_of(None) is FieldKind.ABSENT
        assert kind_of(float("nan")) is FieldKind.ABSENT

    def test_profile_numeric_with_gaps(self) -> None:
        """Gaps do not change a numeric profile."""
        profile = profile_values("v", [1, None, 2.5, MISSING])
        assert profile.kind is FieldKind.NUMERIC
        assert (profile.n_present, profile.n_numeric) == (2, 2)

    def test_profile_mixed_and_string(self) -> None:
        """Mixed, string and absent profiles."""
        assert profile_values("v", [1, "a"]).kind is FieldKind.MIXED
        assert profile_values("v", ["a", True]).kind is FieldKind.STRING
        assert profile_values("v", [MISSING]).kind is FieldKind.ABSENT

    def test_supports_numeric(self) -> None:
        """Only numeric and mixed kinds feed numeric operations."""
        assert FieldKind.NUMERIC.supports_numeric
        assert FieldKind.MIXED.supports_numeric
        assert not FieldKind.STRING.supports_numeric

    def test_pretty_name(self) -> None:
        """Profiles carry a title-cased display name."""
        assert profile_values("unit_price", []).pretty_name == "Unit Price"


class TestRecordView:
    """Views profile fields once and expose numeric columns."""

    def test_build_view_profiles_every_field(self) -> None:
        """Views profile every field they are asked for."""
        view = build_view([{"a": 1, "b": "x"}, {"a": 2}])
        assert set(view.profiles) == {"a", "b"}
        assert view.profiles["a"].kind is FieldKind.NUMERIC

    def test_numeric_skips_invalid(self) -> None:
        """numeric() drops invalid values, numeric_or_nan() keeps their slots."""
        view = build_view([{"a": 1}, {"a": "x"}, {}, {"a": 3}], fields=())
        np.testing.assert_array_equal(view.numeric("a"), [1.0, 3.0])
        assert np.isnan(view.numeric_or_nan("a")[1])

    def test_profile_on_demand(self) -> None:
        """Unprofiled views profile fields lazily."""
        view = build_view([{"a": 1}], fields=())
        assert view.profiles == {}
        assert view.profile("a").kind is FieldKind.NUMERIC
        assert view.has_field("a")
        assert not view.has_field("b")
