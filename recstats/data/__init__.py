"""Data module: records, field access and views."""

from .accessor import MISSING, FieldSelector, is_numeric, resolve_field
from .field_kinds import FieldKind, FieldProfile
from .record_set import RecordSet
from .views import RecordView


__all__ = [
    "MISSING",
    "FieldKind",
    "FieldProfile",
    "FieldSelector",
    "RecordSet",
    "RecordView",
    "is_numeric",
    "resolve_field",
]
