from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from metadb_core.errors import InvalidTransitionError

if TYPE_CHECKING:
    from metadb_core.ports import Clock, IdFactory


def utcnow() -> datetime:
    return datetime.now(UTC)


class BlobStatus(int, Enum):
    UNKNOWN = 0
    INITIALIZING = 1
    READY = 2
    PENDING_DELETION = 3
    ERROR = 4


# Target status -> statuses it may be entered from.
_ALLOWED_FROM: dict[BlobStatus, frozenset[BlobStatus]] = {
    BlobStatus.READY: frozenset({BlobStatus.INITIALIZING}),
    BlobStatus.PENDING_DELETION: frozenset({BlobStatus.INITIALIZING, BlobStatus.READY}),
}


class Timestamps(BaseModel):
    created_at: datetime | None = None
    updated_at: datetime | None = None
    signature: UUID | None = None

    @classmethod
    def stamp(cls, *, now: datetime, signature: UUID) -> Timestamps:
        return cls(created_at=now, updated_at=now, signature=signature)

    def refreshed_at(self, now: datetime) -> datetime:
        """Return the value ``touch`` would store, without storing it."""
        if now.utcoffset() is None:
            raise ValueError(f"Timestamps must be timezone-aware, got {now.isoformat()}")
        created_at = self.created_at
        if created_at is not None and created_at.utcoffset() is not None and now < created_at:
            return created_at
        return now

    def touch(self, now: datetime) -> None:
        self.updated_at = self.refreshed_at(now)


class BlobRef(BaseModel):
    """Metadata about one stored object and where it is in its lifecycle.

    The bytes themselves live in an object store addressed by ``object_path()``.
    Identity, size and the owning store/record never change after creation;
    status moves only through ``ready``, ``mark_for_deletion`` and ``fail``.
    """

    key: UUID | None = Field(default=None, frozen=True)
    size: int = Field(default=0, ge=0, frozen=True)
    status: BlobStatus = BlobStatus.UNKNOWN
    store_key: str = Field(default="", frozen=True)
    record_key: str = Field(default="", frozen=True)
    timestamps: Timestamps = Field(default_factory=Timestamps)

    @classmethod
    def create(
        cls,
        size: int,
        store_key: str,
        record_key: str,
        *,
        id_factory: IdFactory = uuid4,
        clock: Clock = utcnow,
    ) -> BlobRef:
        return cls(
            key=id_factory(),
            size=size,
            status=BlobStatus.INITIALIZING,
            store_key=store_key,
            record_key=record_key,
            timestamps=Timestamps.stamp(now=clock(), signature=id_factory()),
        )

    def can_transition(self, target: BlobStatus) -> bool:
        # ERROR is reachable from anything, including codes outside BlobStatus.
        if target == BlobStatus.ERROR:
            return True
        return self.status in _ALLOWED_FROM.get(target, frozenset())

    def ready(self, now: datetime | None = None) -> None:
        self._transition(BlobStatus.READY, now)

    def mark_for_deletion(self, now: datetime | None = None) -> None:
        self._transition(BlobStatus.PENDING_DELETION, now)

    def fail(self, now: datetime | None = None) -> None:
        self._transition(BlobStatus.ERROR, now)

    def object_path(self) -> str:
        if self.key is None:
            raise ValueError("Blob ref has no key")
        return str(self.key)

    def _transition(self, target: BlobStatus, now: datetime | None) -> None:
        if not self.can_transition(target):
            raise InvalidTransitionError(self.status, target)
        updated_at = self.timestamps.refreshed_at(now or utcnow())
        self.status = target
        self.timestamps.updated_at = updated_at
