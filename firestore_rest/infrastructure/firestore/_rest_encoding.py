"""Encode/decode Python values to/from Firestore REST API 'fields' format.

Wire values are single-key dicts tagged with the value type, e.g.
{"integerValue": "42"} or {"mapValue": {"fields": {...}}}. Integers travel
as decimal strings so they survive JSON without precision loss.
"""

from __future__ import annotations

import base64
import dataclasses
import io
import json
import math
import socket
from collections.abc import Mapping
from datetime import date
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel

from firestore_rest.domain.exceptions import EncodingError
from firestore_rest.domain.value_objects import Reference
from firestore_rest.shared.utils.datetime import format_rfc3339, parse_rfc3339

WireValue = dict[str, Any]

_NON_FINITE = {"NaN": math.nan, "Infinity": math.inf, "-Infinity": -math.inf}


@runtime_checkable
class FirestoreSerializable(Protocol):
    """Caller-defined types that convert themselves into encodable values."""

    def to_firestore(self) -> Any: ...


def _is_unserializable(v: Any) -> bool:
    """Functions, lambdas, bound methods and open resources have no wire form."""
    if isinstance(v, (io.IOBase, socket.socket)):
        return True
    return callable(v) and not isinstance(v, (type, BaseModel))


def _is_geo_shape(v: Mapping) -> bool:
    return v.get("geometry") is not None and v.get("distance") is not None


def _is_dense_index(keys: list[Any]) -> bool:
    """True when keys are exactly the ints 0..n-1 (in any order)."""
    if not keys:
        return False
    if not all(type(k) is int for k in keys):
        return False
    return sorted(keys) == list(range(len(keys)))


def _child_path(path: str | None, key: Any) -> str:
    return f"{path}.{key}" if path else str(key)


def _encode_double(v: float) -> WireValue:
    if math.isnan(v):
        return {"doubleValue": "NaN"}
    if math.isinf(v):
        return {"doubleValue": "Infinity" if v > 0 else "-Infinity"}
    return {"doubleValue": v}


def _encode_sequence(items: Any, path: str | None, geo_shapes: bool) -> WireValue:
    values = [
        _encode_value(x, _child_path(path, i), geo_shapes)
        for i, x in enumerate(x for x in items if not _is_unserializable(x))
    ]
    return {"arrayValue": {"values": values}}


def _encode_array_or_map(m: Mapping, path: str | None, geo_shapes: bool) -> WireValue:
    """Encode a mapping; dense 0..n-1 integer keys make it an array."""
    entries = {k: x for k, x in m.items() if not _is_unserializable(x)}
    if _is_dense_index(list(entries)):
        return _encode_sequence(
            (entries[k] for k in sorted(entries)), path, geo_shapes
        )
    return {
        "mapValue": {
            "fields": {
                str(k): _encode_value(x, _child_path(path, k), geo_shapes)
                for k, x in entries.items()
            }
        }
    }


def _encode_value(v: Any, path: str | None = None, geo_shapes: bool = True) -> WireValue:
    if v is None:
        return {"nullValue": None}
    if isinstance(v, Enum):
        return _encode_value(v.value, path, geo_shapes)
    if isinstance(v, bool):
        return {"booleanValue": v}
    if isinstance(v, int):
        return {"integerValue": str(v)}
    if isinstance(v, float):
        return _encode_double(v)
    if isinstance(v, str):
        return {"stringValue": v}
    if isinstance(v, (bytes, bytearray, memoryview)):
        return {"bytesValue": base64.standard_b64encode(bytes(v)).decode("ascii")}
    if isinstance(v, date):
        return {"timestampValue": format_rfc3339(v)}
    if isinstance(v, Reference):
        return {"referenceValue": v.path}
    if isinstance(v, Mapping):
        if geo_shapes and _is_geo_shape(v):
            return {"stringValue": json.dumps(dict(v), default=str)}
        return _encode_array_or_map(v, path, geo_shapes)
    if isinstance(v, (list, tuple)):
        return _encode_sequence(v, path, geo_shapes)
    if isinstance(v, (set, frozenset)):
        try:
            items = sorted(v)
        except TypeError:
            items = list(v)
        return _encode_sequence(items, path, geo_shapes)
    if isinstance(v, FirestoreSerializable):
        return _encode_value(v.to_firestore(), path, geo_shapes)
    if isinstance(v, BaseModel):
        return _encode_value(v.model_dump(), path, geo_shapes)
    if dataclasses.is_dataclass(v) and not isinstance(v, type):
        return _encode_value(dataclasses.asdict(v), path, geo_shapes)
    if _is_unserializable(v) or type(v).__str__ is object.__str__:
        raise EncodingError.invalid_value(v, path)
    try:
        return {"stringValue": str(v)}
    except Exception as e:
        raise EncodingError.invalid_value(v, path) from e


def encode_value(v: Any, *, geo_shapes: bool = True) -> WireValue:
    """Convert one Python value to a Firestore wire value.

    Args:
        v: None, bool, int, float, str, bytes, date/datetime, list/tuple/set,
            mapping, Enum, pydantic model, dataclass, Reference, or any object
            implementing FirestoreSerializable.
        geo_shapes: When True, mappings with both "geometry" and "distance"
            keys are stored as a JSON string instead of a map.

    Raises:
        EncodingError: if the value (or a nested one) has no wire form.
    """
    return _encode_value(v, None, geo_shapes)


def encode_fields(data: Mapping[str, Any], *, geo_shapes: bool = True) -> dict[str, WireValue]:
    """Convert a Python mapping to Firestore Document.fields (callables/resources dropped)."""
    if not isinstance(data, Mapping):
        raise EncodingError.invalid_value(data)
    return {
        str(k): _encode_value(v, str(k), geo_shapes)
        for k, v in data.items()
        if not _is_unserializable(v)
    }


def encode_document(data: Mapping[str, Any], *, geo_shapes: bool = True) -> dict:
    """Convert a Python dict to Firestore REST Document format ({"fields": ...})."""
    return {"fields": encode_fields(data, geo_shapes=geo_shapes)}


def _decode_number(tag: str, raw: Any, convert) -> Any:
    try:
        return convert(raw)
    except (TypeError, ValueError) as e:
        raise EncodingError.malformed_wire_value(tag, raw) from e


def _decode_double(raw: Any) -> float:
    return _NON_FINITE[raw] if raw in _NON_FINITE else float(raw)


def _decode_timestamp(raw: Any) -> Any:
    try:
        return parse_rfc3339(raw)
    except ValueError as e:
        raise EncodingError.malformed_timestamp(raw) from e


def decode_value(obj: Any) -> Any:
    """Convert a Firestore wire value back to a Python value.

    Unknown tags (e.g. geoPointValue) yield their raw payload unchanged.

    Raises:
        EncodingError: on an unparsable timestampValue, integerValue or
            doubleValue.
    """
    if not isinstance(obj, Mapping):
        return obj
    if not obj:
        return None
    if "nullValue" in obj:
        return None
    if "booleanValue" in obj:
        return bool(obj["booleanValue"])
    if "integerValue" in obj:
        return _decode_number("integerValue", obj["integerValue"], int)
    if "doubleValue" in obj:
        return _decode_number("doubleValue", obj["doubleValue"], _decode_double)
    if "stringValue" in obj:
        return str(obj["stringValue"])
    if "timestampValue" in obj:
        return _decode_timestamp(obj["timestampValue"])
    if "referenceValue" in obj:
        return str(obj["referenceValue"])
    if "bytesValue" in obj:
        return base64.standard_b64decode(obj["bytesValue"])
    if "arrayValue" in obj:
        vals = (obj["arrayValue"] or {}).get("values") or []
        return [decode_value(x) for x in vals]
    if "mapValue" in obj:
        return decode_fields((obj["mapValue"] or {}).get("fields"))
    return next(iter(obj.values()))


def decode_fields(fields: Mapping[str, Any] | None) -> dict:
    """Convert a Firestore fields mapping (name -> wire value) to a Python dict."""
    if not fields:
        return {}
    return {k: decode_value(v) for k, v in fields.items()}


def decode_document(document: Mapping[str, Any] | None) -> dict:
    """Convert a Firestore REST Document ({"name", "fields", ...}) to a Python dict."""
    if not document:
        return {}
    return decode_fields(document.get("fields"))
