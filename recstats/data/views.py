"""Task-specific views over record set content."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from .accessor import MISSING, FieldSelector, is_numeric, resolve_field, selector_name
from .field_kinds import FieldProfile, profile_values


@dataclass(frozen=True)
class RecordView:
    """Immutable snapshot of records and related metadata handed to analyzers.

    Attributes:
        records: Ordered records (read-only mappings) or scalars.
        profiles: Field profiles computed when the view was built, keyed by field name.
    """

    records: tuple[Any, ...]
    """Ordered records (read-only mappings) or scalars."""
    profiles: Mapping[str, FieldProfile] = field(default_factory=dict)
    """Field profiles keyed by field name, computed at read time."""

    def __len__(self) -> int:
        return len(self.records)

    def values(self, selector: FieldSelector | None = None) -> list[Any]:
        """Resolve ``selector`` against every record (``MISSING`` where absent)."""
        return [resolve_field(record, selector) for record in self.records]

    def numeric(self, selector: FieldSelector | None = None) -> np.ndarray:
        """Return the valid numeric values of ``selector`` as a float array, skipping the rest."""
        return np.asarray(
            [float(v) for v in self.values(selector) if is_numeric(v)],
            dtype=float,
        )

    def numeric_or_nan(self, selector: FieldSelector | None = None) -> np.ndarray:
        """Return one float per record, NaN where the value is absent or non-numeric."""
        return np.asarray(
            [float(v) if is_numeric(v) else np.nan for v in self.values(selector)],
            dtype=float,
        )

    def profile(self, selector: FieldSelector | None) -> FieldProfile:
        """Return the cached profile for a field name, or profile the selector on demand."""
        if isinstance(selector, str) and selector in self.profiles:
            return self.profiles[selector]
        return profile_values(selector_name(selector), self.values(selector))

    def has_field(self, name: str) -> bool:
        """Whether any record carries ``name``."""
        return any(v is not MISSING for v in self.values(name))


def build_view(records: Sequence[Any], fields: Sequence[str] | None = None) -> RecordView:
    """Build a :class:`RecordView`, profiling ``fields`` (or every mapping key seen)."""
    records = tuple(records)
    if fields is None:
        seen: dict[str, None] = {}
        for record in records:
            if isinstance(record, Mapping):
                seen.update(dict.fromkeys(record))
        fields = list(seen)
    profiles = {name: profile_values(name, (resolve_field(r, name) for r in records)) for name in fields}
    return RecordView(records=records, profiles=profiles)


__all__ = ["RecordView", "build_view"]
