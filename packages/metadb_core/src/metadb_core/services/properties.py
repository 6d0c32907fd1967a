"""Mapping between BlobRef records and datastore property lists.

A record is persisted as a native key (kind + the key's UUID string) plus
exactly five properties, in this order::

    Size, Status, StoreKey, RecordKey, Timestamps

``Timestamps`` is a composite value holding ``CreatedAt``, ``UpdatedAt`` and
``Signature``. The record key is never written as a property.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import ValidationError

from metadb_core.errors import DeserializationError, ParseError, SerializationError
from metadb_core.models import BlobRef, BlobStatus, Key, Property, PropertyList, Timestamps

BLOB_REF_KIND = "blob"

SIZE = "Size"
STATUS = "Status"
STORE_KEY = "StoreKey"
RECORD_KEY = "RecordKey"
TIMESTAMPS = "Timestamps"

CREATED_AT = "CreatedAt"
UPDATED_AT = "UpdatedAt"
SIGNATURE = "Signature"


def native_key(blob: BlobRef, kind: str = BLOB_REF_KIND) -> Key:
    if blob.key is None:
        raise ValueError("Blob ref has no key")
    return Key(kind=kind, name=str(blob.key))


def parse_key(native: Key) -> UUID:
    try:
        return UUID(native.name)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"Invalid blob ref key name: {native.name!r}") from exc


def to_properties(blob: BlobRef) -> PropertyList:
    return [
        Property(name=SIZE, value=blob.size),
        Property(name=STATUS, value=int(blob.status)),
        Property(name=STORE_KEY, value=blob.store_key),
        Property(name=RECORD_KEY, value=blob.record_key),
        Property(name=TIMESTAMPS, value=_encode_timestamps(blob.timestamps)),
    ]


def from_properties(properties: Iterable[Property], *, key: UUID | None = None) -> BlobRef:
    fields: dict[str, Any] = {}
    for prop in properties:
        if not isinstance(prop, Property):
            raise DeserializationError(f"Expected a Property, got {type(prop).__name__}")
        entry = _DECODERS.get(prop.name)
        if entry is None:
            continue
        field_name, decode = entry
        fields[field_name] = decode(prop.name, prop.value)

    try:
        return BlobRef(key=key, **fields)
    except ValidationError as exc:
        raise DeserializationError(str(exc)) from exc


def _encode_timestamps(timestamps: Timestamps) -> PropertyList:
    for name, value in ((CREATED_AT, timestamps.created_at), (UPDATED_AT, timestamps.updated_at)):
        if value is not None and value.utcoffset() is None:
            raise SerializationError(f"{name} must be timezone-aware, got {value.isoformat()}")
    signature = str(timestamps.signature) if timestamps.signature is not None else None
    return [
        Property(name=CREATED_AT, value=timestamps.created_at),
        Property(name=UPDATED_AT, value=timestamps.updated_at),
        Property(name=SIGNATURE, value=signature),
    ]


def _decode_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise DeserializationError(f"Property {name} must be an integer, got {type(value).__name__}")
    return value


def _decode_size(name: str, value: Any) -> int:
    size = _decode_int(name, value)
    if size < 0:
        raise DeserializationError(f"Property {name} must not be negative, got {size}")
    return size


def _decode_status(name: str, value: Any) -> BlobStatus:
    code = _decode_int(name, value)
    try:
        return BlobStatus(code)
    except ValueError as exc:
        raise DeserializationError(f"Property {name} has unknown status code {code}") from exc


def _decode_str(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise DeserializationError(f"Property {name} must be a string, got {type(value).__name__}")
    return value


def _decode_datetime(name: str, value: Any) -> datetime | None:
    if value is not None and not isinstance(value, datetime):
        raise DeserializationError(f"Property {name} must be a datetime, got {type(value).__name__}")
    if value is not None and value.utcoffset() is None:
        raise DeserializationError(f"Property {name} must be timezone-aware, got {value.isoformat()}")
    return value


def _decode_signature(name: str, value: Any) -> UUID | None:
    if value is None or isinstance(value, UUID):
        return value
    if not isinstance(value, str):
        raise DeserializationError(f"Property {name} must be a string, got {type(value).__name__}")
    try:
        return UUID(value)
    except ValueError as exc:
        raise DeserializationError(f"Property {name} is not a valid signature: {value!r}") from exc


def _decode_timestamps(name: str, value: Any) -> Timestamps:
    if not isinstance(value, (list, tuple)):
        raise DeserializationError(f"Property {name} must be a composite value, got {type(value).__name__}")

    timestamps = Timestamps()
    for prop in value:
        if not isinstance(prop, Property):
            raise DeserializationError(f"Property {name} holds {type(prop).__name__}, expected Property")
        if prop.name == CREATED_AT:
            timestamps.created_at = _decode_datetime(f"{name}.{prop.name}", prop.value)
        elif prop.name == UPDATED_AT:
            timestamps.updated_at = _decode_datetime(f"{name}.{prop.name}", prop.value)
        elif prop.name == SIGNATURE:
            timestamps.signature = _decode_signature(f"{name}.{prop.name}", prop.value)
    if timestamps.created_at is not None and timestamps.updated_at is not None:
        timestamps.touch(timestamps.updated_at)
    return timestamps


_DECODERS: dict[str, tuple[str, Callable[[str, Any], Any]]] = {
    SIZE: ("size", _decode_size),
    STATUS: ("status", _decode_status),
    STORE_KEY: ("store_key", _decode_str),
    RECORD_KEY: ("record_key", _decode_str),
    TIMESTAMPS: ("timestamps", _decode_timestamps),
}
