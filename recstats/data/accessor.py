"""Field resolution against individual records."""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from numbers import Number
from typing import Any, Final, TypeAlias


class _Missing:
    """Singleton marking a field that a record does not carry."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Final = _Missing()
"""Returned by :func:`resolve_field` when a record has no value for the field."""

FieldSelector: TypeAlias = str | Callable[[Any], Any]
"""Either a field name or a pure function ``record -> value``."""


def resolve_field(record: Any, selector: FieldSelector | None) -> Any:
    """Resolve ``selector`` against ``record``.

    Args:
        record: A mapping record, or a scalar when the dataset holds values directly.
        selector: Field name, callable, or ``None`` to return the record itself.

    Returns:
        The resolved value or :data:`MISSING` if the record does not carry the field.
    """
    if selector is None:
        return record
    if callable(selector):
        return selector(record)
    if isinstance(record, Mapping):
        return record.get(selector, MISSING)
    return getattr(record, selector, MISSING)


def is_numeric(value: Any) -> bool:
    """Return True for real finite-or-infinite numbers that are not booleans or NaN."""
    if isinstance(value, bool) or not isinstance(value, Number):
        return False
    try:
        return not math.isnan(value)  # type: ignore[arg-type]
    except TypeError:
        # complex and friends
        return False


def selector_name(selector: FieldSelector | None, default: str = "value") -> str:
    """Return a printable name for a selector (used for result labels and messages)."""
    if selector is None:
        return default
    if isinstance(selector, str):
        return selector
    return getattr(selector, "__name__", repr(selector))


__all__ = ["MISSING", "FieldSelector", "is_numeric", "resolve_field", "selector_name"]
