"""
Serialization helpers for argmap dataclasses.

Handles the patterns shared by argument trees and diagram documents:
- Enum → value
- Nested dataclasses with to_dict() → recursive serialization
- Tuples/lists → lists, mappings with non-string keys → string keys
- Optional fields → omitted when None
"""

from __future__ import annotations

import json
from dataclasses import is_dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable


def serialize_value(value: Any) -> Any:
    """Recursively serialize a value for JSON export.

    Handles:
    - None → None
    - datetime → ISO format string (UTC if naive)
    - Enum → value
    - Dataclass with to_dict() → recursive serialization
    - List/tuple → list
    - Dict → dict with string keys

    Args:
        value: Any value to serialize

    Returns:
        JSON-serializable value
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): serialize_value(v) for k, v in value.items()}
    return value


def compact_dict(pairs: Iterable[tuple[str, Any]], optional: Iterable[str] = ()) -> Dict[str, Any]:
    """Serialize ``pairs`` into a dict, omitting ``optional`` keys whose value is None."""
    skip_if_none = set(optional)
    result: Dict[str, Any] = {}
    for key, value in pairs:
        if value is None and key in skip_if_none:
            continue
        result[key] = serialize_value(value)
    return result


def to_json(obj: Any, indent: int | None = None) -> str:
    """Serialize a dataclass (or plain value) to a JSON string."""
    return json.dumps(serialize_value(obj), indent=indent, ensure_ascii=False)


__all__ = ["serialize_value", "compact_dict", "to_json"]
