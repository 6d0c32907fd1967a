from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from metadb_core.errors import BlobRefExistsError, BlobRefNotFoundError, ConcurrentModificationError
from metadb_core.models import BlobRef, BlobStatus, Key, Property, PropertyList
from metadb_core.ports import IdFactory
from metadb_core.services import BLOB_REF_KIND, from_properties, native_key, parse_key, to_properties
from metadb_core.services.properties import (
    CREATED_AT,
    RECORD_KEY,
    SIGNATURE,
    SIZE,
    STATUS,
    STORE_KEY,
    TIMESTAMPS,
    UPDATED_AT,
)

logger = logging.getLogger(__name__)


class SQLiteBlobRefStore:
    """Stores blob refs as one row per native key, written from and read back into property lists."""

    def __init__(
        self,
        db_path: str,
        *,
        kind: str = BLOB_REF_KIND,
        id_factory: IdFactory = uuid4,
    ) -> None:
        self._db_path = db_path
        self._kind = kind
        self._id_factory = id_factory
        self._lock = threading.Lock()
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS blob_refs (
                    kind TEXT NOT NULL,
                    name TEXT NOT NULL,
                    size INTEGER NOT NULL,
                    status INTEGER NOT NULL,
                    store_key TEXT NOT NULL,
                    record_key TEXT NOT NULL,
                    created_at TEXT,
                    updated_at TEXT,
                    signature TEXT,
                    PRIMARY KEY (kind, name)
                );
                """
            )
            conn.commit()

    @staticmethod
    def _dt(value: str | None) -> datetime | None:
        if value is None:
            return None
        return datetime.fromisoformat(value)

    @staticmethod
    def _iso(value: datetime | None) -> str | None:
        return value.isoformat() if value is not None else None

    @classmethod
    def _columns(cls, properties: PropertyList) -> dict[str, Any]:
        values = {prop.name: prop.value for prop in properties}
        timestamps = {prop.name: prop.value for prop in values[TIMESTAMPS]}
        return {
            "size": values[SIZE],
            "status": values[STATUS],
            "store_key": values[STORE_KEY],
            "record_key": values[RECORD_KEY],
            "created_at": cls._iso(timestamps[CREATED_AT]),
            "updated_at": cls._iso(timestamps[UPDATED_AT]),
            "signature": timestamps[SIGNATURE],
        }

    def _properties(self, row: sqlite3.Row) -> PropertyList:
        return [
            Property(name=SIZE, value=row["size"]),
            Property(name=STATUS, value=row["status"]),
            Property(name=STORE_KEY, value=row["store_key"]),
            Property(name=RECORD_KEY, value=row["record_key"]),
            Property(
                name=TIMESTAMPS,
                value=[
                    Property(name=CREATED_AT, value=self._dt(row["created_at"])),
                    Property(name=UPDATED_AT, value=self._dt(row["updated_at"])),
                    Property(name=SIGNATURE, value=row["signature"]),
                ],
            ),
        ]

    def _to_blob_ref(self, row: sqlite3.Row) -> BlobRef:
        key = parse_key(Key(kind=row["kind"], name=row["name"]))
        return from_properties(self._properties(row), key=key)

    def create_blob_ref(self, blob: BlobRef) -> BlobRef:
        key = native_key(blob, self._kind)
        columns = self._columns(to_properties(blob))
        try:
            with self._lock, self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO blob_refs(
                        kind, name, size, status, store_key, record_key, created_at, updated_at, signature
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        key.kind,
                        key.name,
                        columns["size"],
                        columns["status"],
                        columns["store_key"],
                        columns["record_key"],
                        columns["created_at"],
                        columns["updated_at"],
                        columns["signature"],
                    ),
                )
                conn.commit()
        except sqlite3.IntegrityError as exc:
            raise BlobRefExistsError(blob.key) from exc
        logger.debug("Created blob ref %s", key)
        return blob

    def get_blob_ref(self, key: UUID) -> BlobRef | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM blob_refs WHERE kind = ? AND name = ?",
                (self._kind, str(key)),
            ).fetchone()
            if row is None:
                return None
            return self._to_blob_ref(row)

    def update_blob_ref(self, blob: BlobRef) -> BlobRef:
        """Write the record's status and timestamps if nobody else has saved it since it was read.

        On success the record gets a fresh signature; on conflict it is left as it was.
        """
        key = native_key(blob, self._kind)
        columns = self._columns(to_properties(blob))
        signature = self._id_factory()

        with self._lock, self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE blob_refs
                SET status = ?, updated_at = ?, signature = ?
                WHERE kind = ? AND name = ? AND signature IS ?
                """,
                (
                    columns["status"],
                    columns["updated_at"],
                    str(signature),
                    key.kind,
                    key.name,
                    columns["signature"],
                ),
            )
            if cursor.rowcount == 0:
                exists = conn.execute(
                    "SELECT 1 FROM blob_refs WHERE kind = ? AND name = ?",
                    (key.kind, key.name),
                ).fetchone()
                if exists is None:
                    raise BlobRefNotFoundError(blob.key)
                logger.warning("Signature mismatch updating blob ref %s", key)
                raise ConcurrentModificationError(blob.key)
            conn.commit()

        blob.timestamps.signature = signature
        logger.debug("Updated blob ref %s to %s", key, BlobStatus(columns["status"]).name)
        return blob

    def delete_blob_ref(self, key: UUID) -> None:
        with self._lock, self._connect() as conn:
            conn.execute("DELETE FROM blob_refs WHERE kind = ? AND name = ?", (self._kind, str(key)))
            conn.commit()
        logger.debug("Deleted blob ref %s/%s", self._kind, key)
