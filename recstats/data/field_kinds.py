"""Field kind tagging and per-field metadata determined at read time."""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import numpy as np
import pandas as pd

from .accessor import MISSING, is_numeric


class FieldKind(StrEnum):
    """Tag describing what a field holds across a set of records.

    ``MIXED`` means at least one numeric value alongside non-numeric ones; numeric
    operations accept it and skip the non-numeric values. ``ABSENT`` means no record
    carries the field at all.
    """

    NUMERIC = "numeric"
    STRING = "string"
    BOOLEAN = "boolean"
    DATE = "date"
    MIXED = "mixed"
    ABSENT = "absent"

    @property
    def supports_numeric(self) -> bool:
        """Whether numeric-only operations may run over a field of this kind."""
        return self in (FieldKind.NUMERIC, FieldKind.MIXED)


def kind_of(value: Any) -> FieldKind:
    """Tag a single value."""
    if value is MISSING or value is None or value is pd.NA or value is pd.NaT:
        return FieldKind.ABSENT
    if isinstance(value, (bool, np.bool_)):
        return FieldKind.BOOLEAN
    if is_numeric(value):
        return FieldKind.NUMERIC
    if isinstance(value, (dt.date, pd.Timestamp, np.datetime64)):
        return FieldKind.DATE
    if isinstance(value, (float, np.floating)):
        # NaN counts as a missing observation
        return FieldKind.ABSENT
    return FieldKind.STRING


@dataclass(frozen=True)
class FieldProfile:
    """Metadata for one field of a record set.

    Attributes:
        name: Field name the profile describes.
        kind: Aggregate :class:`FieldKind` across all present values.
        n_present: Number of records carrying a non-missing value.
        n_numeric: Number of records carrying a valid numeric value.
    """

    name: str
    kind: FieldKind
    n_present: int
    n_numeric: int

    @property
    def pretty_name(self) -> str:
        """Human-readable label for plots and tables."""
        return self.name.replace("_", " ").title()


def profile_values(name: str, values: Iterable[Any]) -> FieldProfile:
    """Build a :class:`FieldProfile` from the resolved values of one field."""
    kinds: set[FieldKind] = set()
    n_present = 0
    n_numeric = 0
    for value in values:
        kind = kind_of(value)
        if kind is FieldKind.ABSENT:
            continue
        n_present += 1
        n_numeric += kind is FieldKind.NUMERIC
        kinds.add(kind)

    if not kinds:
        kind = FieldKind.ABSENT
    elif len(kinds) == 1:
        kind = kinds.pop()
    elif FieldKind.NUMERIC in kinds:
        kind = FieldKind.MIXED
    else:
        kind = FieldKind.STRING
    return FieldProfile(name=name, kind=kind, n_present=n_present, n_numeric=n_numeric)


__all__ = ["FieldKind", "FieldProfile", "kind_of", "profile_values"]
