"""
Rendering of dynamically-typed document values.

Document values are one of: string, number, boolean, null, timestamp,
array, or object. Each helper below handles that closed set explicitly.
"""

import json
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any


TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as yyyy-MM-ddTHH:mm:ssZ, converting aware values to UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(TIMESTAMP_FORMAT)


def json_default(value: Any) -> Any:
    """json.dumps fallback for values outside the JSON type set."""
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


def to_json(value: Any) -> str:
    """Compact JSON text of a value, keeping non-ASCII characters."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=json_default)


def render_cell(value: Any) -> str:
    """
    Render one document value as CSV cell text.

    Strings pass through, timestamps use TIMESTAMP_FORMAT, nested values
    keep their JSON text, and missing or null values become "".
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (dict, list, tuple)):
        return to_json(value)
    return str(value)
