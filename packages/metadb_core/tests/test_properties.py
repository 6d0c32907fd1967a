from datetime import UTC, datetime
from uuid import UUID

import pytest

from metadb_core.errors import DeserializationError, ParseError, SerializationError
from metadb_core.models import BlobRef, BlobStatus, Key, Property, Timestamps
from metadb_core.services import BLOB_REF_KIND, from_properties, native_key, parse_key, to_properties

KEY = UUID("d13c289c-8845-485f-b582-c87342d5dade")
SIGNATURE = UUID("0b4f64c4-5c53-4b0b-9e39-8f8b1cd4a1b2")
T0 = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)


def test_parse_key() -> None:
    assert parse_key(Key(kind="blob", name=str(KEY))) == KEY


@pytest.mark.parametrize("name", ["", "not-a-uuid", "d13c289c-8845-485f-b582"])
def test_parse_key_rejects_invalid_names(name: str) -> None:
    with pytest.raises(ParseError):
        parse_key(Key(kind="blob", name=name))


def test_native_key() -> None:
    blob = BlobRef.create(1, "s", "r")
    key = native_key(blob)

    assert key.kind == BLOB_REF_KIND
    assert key.name == str(blob.key)
    assert parse_key(key) == blob.key
    assert str(key) == f"blob/{blob.key}"


def test_save() -> None:
    blob = BlobRef(size=123, status=BlobStatus.INITIALIZING, store_key="store", record_key="record")
    expected = [
        Property(name="Size", value=123),
        Property(name="Status", value=int(BlobStatus.INITIALIZING)),
        Property(name="StoreKey", value="store"),
        Property(name="RecordKey", value="record"),
    ]

    actual = to_properties(blob)

    assert actual[: len(expected)] == expected
    assert len(actual) == 5
    assert actual[4].name == "Timestamps"


def test_save_timestamps_composite() -> None:
    blob = BlobRef(
        key=KEY,
        size=1,
        timestamps=Timestamps(created_at=T0, updated_at=T0, signature=SIGNATURE),
    )

    timestamps = to_properties(blob)[4].value

    assert timestamps == [
        Property(name="CreatedAt", value=T0),
        Property(name="UpdatedAt", value=T0),
        Property(name="Signature", value=str(SIGNATURE)),
    ]


def test_save_excludes_key() -> None:
    blob = BlobRef.create(1, "s", "r")
    names = [prop.name for prop in to_properties(blob)]
    assert names == ["Size", "Status", "StoreKey", "RecordKey", "Timestamps"]


def test_save_rejects_naive_timestamps() -> None:
    blob = BlobRef(timestamps=Timestamps(created_at=datetime(2024, 1, 1)))

    with pytest.raises(SerializationError):
        to_properties(blob)


def test_load() -> None:
    properties = [
        Property(name="Size", value=123),
        Property(name="Status", value=int(BlobStatus.READY)),
        Property(name="StoreKey", value="store"),
        Property(name="RecordKey", value="record"),
    ]
    expected = BlobRef(size=123, status=BlobStatus.READY, store_key="store", record_key="record")

    assert from_properties(properties) == expected


def test_load_ignores_order_and_unknown_names() -> None:
    properties = [
        Property(name="RecordKey", value="record"),
        Property(name="Legacy", value=object()),
        Property(name="Status", value=2),
        Property(name="Size", value=7),
        Property(name="StoreKey", value="store"),
    ]

    blob = from_properties(properties)

    assert blob.size == 7
    assert blob.status == BlobStatus.READY
    assert blob.key is None


def test_save_then_load() -> None:
    blob = BlobRef.create(42, "store", "record")
    blob.ready()

    loaded = from_properties(to_properties(blob), key=blob.key)

    assert loaded == blob


def test_load_without_key_leaves_key_unset() -> None:
    blob = BlobRef.create(42, "store", "record")

    loaded = from_properties(to_properties(blob))

    assert loaded.key is None
    assert loaded.size == blob.size
    assert loaded.status == blob.status
    assert loaded.timestamps == blob.timestamps


@pytest.mark.parametrize(
    "prop",
    [
        Property(name="Size", value="123"),
        Property(name="Size", value=True),
        Property(name="Size", value=-1),
        Property(name="Status", value="READY"),
        Property(name="Status", value=99),
        Property(name="StoreKey", value=1),
        Property(name="RecordKey", value=None),
        Property(name="Timestamps", value="2024-01-01"),
        Property(name="Timestamps", value=[Property(name="CreatedAt", value="2024-01-01")]),
        Property(name="Timestamps", value=[Property(name="Signature", value="nope")]),
        Property(name="Timestamps", value=[{"name": "CreatedAt"}]),
    ],
)
def test_load_rejects_type_mismatch(prop: Property) -> None:
    with pytest.raises(DeserializationError):
        from_properties([prop])


def test_load_rejects_non_properties() -> None:
    with pytest.raises(DeserializationError):
        from_properties([("Size", 1)])


def test_load_clamps_updated_at_to_created_at() -> None:
    earlier = datetime(2023, 12, 31, tzinfo=UTC)
    properties = [
        Property(
            name="Timestamps",
            value=[
                Property(name="CreatedAt", value=T0),
                Property(name="UpdatedAt", value=earlier),
                Property(name="Signature", value=str(SIGNATURE)),
            ],
        ),
    ]

    timestamps = from_properties(properties).timestamps

    assert timestamps.created_at == T0
    assert timestamps.updated_at == T0


def test_load_rejects_naive_timestamps() -> None:
    properties = [
        Property(name="Timestamps", value=[Property(name="CreatedAt", value=datetime(2024, 1, 1))]),
    ]

    with pytest.raises(DeserializationError):
        from_properties(properties)
