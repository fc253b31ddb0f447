"""JSON-ready conversion of lending models and events.

Used by the sinks for event payloads and by the PostgreSQL store for the
JSONB repayment schedule.
"""

from collections.abc import Mapping
from dataclasses import fields, is_dataclass
from datetime import date
from enum import Enum
from typing import Any


def record_to_dict(record: Any) -> dict[str, Any]:
    """Convert a model dataclass field by field.

    Nested records such as a loan's repayment schedule are converted
    recursively without the deep copy ``dataclasses.asdict`` makes.
    """
    return {f.name: serialize_value(getattr(record, f.name)) for f in fields(record)}


def to_payload(obj: Any) -> dict[str, Any]:
    """Body published by a sink for ``obj``.

    Dataclasses (events, properties, loans) and mappings are converted;
    anything else is wrapped as ``{"value": str(obj)}``.
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        return record_to_dict(obj)
    if isinstance(obj, Mapping):
        return {str(k): serialize_value(v) for k, v in obj.items()}
    return {"value": str(obj)}


def serialize_value(value: Any) -> Any:
    """Serialize a single field value for JSON output."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):  # datetime included
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return record_to_dict(value)
    if isinstance(value, Mapping):
        return {str(k): serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value
