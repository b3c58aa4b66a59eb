"""Conversion between Python values and Firestore typed values.

Firestore's REST API wraps every field in a single-key object naming
its type, e.g. ``{"stringValue": "Paris"}`` or
``{"doubleValue": 4.5}``. Timestamps travel as RFC 3339 strings in
UTC, integers as decimal strings.
"""

import base64
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any


def format_timestamp(value: datetime) -> str:
    """Render a datetime as a Firestore timestamp (naive means UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse a Firestore timestamp into an aware UTC datetime."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def encode_value(value: Any) -> dict[str, Any]:
    """Encode one Python value as a Firestore typed value."""
    if value is None:
        return {"nullValue": None}
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": format_timestamp(value)}
    if isinstance(value, (bytes, bytearray)):
        return {"bytesValue": base64.b64encode(bytes(value)).decode("ascii")}
    if isinstance(value, Mapping):
        return {"mapValue": {"fields": encode_fields(value)}}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    raise TypeError(f"Cannot store value of type {type(value).__name__} in Firestore")


def decode_value(value: Mapping[str, Any]) -> Any:
    """Decode one Firestore typed value."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "timestampValue" in value:
        return parse_timestamp(value["timestampValue"])
    if "bytesValue" in value:
        return base64.b64decode(value["bytesValue"])
    if "referenceValue" in value:
        return value["referenceValue"]
    if "geoPointValue" in value:
        return dict(value["geoPointValue"])
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields"))
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    raise ValueError(f"Unknown Firestore value type: {sorted(value)}")


def encode_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Encode a document's fields."""
    return {key: encode_value(value) for key, value in fields.items()}


def decode_fields(fields: Mapping[str, Any] | None) -> dict[str, Any]:
    """Decode a document's fields. Missing fields decode to ``{}``."""
    if not fields:
        return {}
    return {key: decode_value(value) for key, value in fields.items()}


def document_id(name: str) -> str:
    """Last path segment of a full document resource name."""
    return name.rsplit("/", 1)[-1]
