"""
Modification Differ - which watched fields changed while editing

Values are compared through a canonical JSON form so that equal content
compares equal regardless of representation: keys are sorted, sets become
sorted lists, datetimes become UTC ISO-8601, and a missing value, None and
an empty collection are all the same "empty".
"""

import json
from collections.abc import Mapping, Sequence
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel

from sourcing_governance.kernel.policy import WATCHED_FIELDS
from sourcing_governance.modification.models import FieldChange

_MISSING = object()


def _jsonable(value: Any) -> Any:
    """Convert a value to plain JSON types with a stable representation"""
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    if value is None or isinstance(value, (bool, str, int)):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else value
    if isinstance(value, Decimal):
        if not value.is_finite():
            return str(value)
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return _jsonable(value.value)
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (set, frozenset)):
        items = [_jsonable(item) for item in value]
        return sorted(items, key=lambda item: json.dumps(item, sort_keys=True))
    if isinstance(value, Sequence):
        return [_jsonable(item) for item in value]
    return str(value)


def canonical(value: Any) -> str:
    """
    Canonical serialization used for comparison

    Missing, None and empty collections all serialize to "null".
    """
    if value is _MISSING or value is None:
        return "null"
    if isinstance(value, (list, tuple, set, frozenset, dict)) and not value:
        return "null"
    return json.dumps(_jsonable(value), sort_keys=True, separators=(",", ":"))


def _field_value(source: Any, field: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(field, _MISSING)
    return getattr(source, field, _MISSING)


def diff(
    original: Any,
    current: Any,
    fields: Sequence[str] = WATCHED_FIELDS,
) -> dict[str, FieldChange]:
    """
    Compute the changed watched fields between two versions of an event

    Args:
        original: Snapshot, event or mapping before editing
        current: Event or mapping after editing
        fields: Fields to compare (the watch list)

    Returns:
        field -> FieldChange(from_, to) for changed fields only, in `fields`
        order; absent values are reported as None

    Example:
        Moving close_at from 2025-01-01 to 2025-01-05 and touching nothing
        else yields exactly {"close_at": FieldChange(...)}.
    """
    changes: dict[str, FieldChange] = {}
    for field in fields:
        before = _field_value(original, field)
        after = _field_value(current, field)
        if canonical(before) == canonical(after):
            continue
        changes[field] = FieldChange(
            from_=None if before is _MISSING else before,
            to=None if after is _MISSING else after,
        )
    return changes
