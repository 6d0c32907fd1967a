from __future__ import annotations

from typing import Any


class MetaDBError(Exception):
    """Base class for domain exceptions."""


class ParseError(MetaDBError):
    """Raised when a native key does not carry a valid identifier."""


class SerializationError(MetaDBError):
    pass


class DeserializationError(MetaDBError):
    pass


class InvalidTransitionError(MetaDBError):
    def __init__(self, current: Any, target: Any) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Invalid status transition: {_label(current)} -> {_label(target)}")


def _label(status: Any) -> str:
    return getattr(status, "name", str(status))


class BlobRefNotFoundError(MetaDBError):
    def __init__(self, key: Any) -> None:
        self.key = key
        super().__init__(f"Blob ref not found: {key}")


class BlobRefExistsError(MetaDBError):
    def __init__(self, key: Any) -> None:
        self.key = key
        super().__init__(f"Blob ref already exists: {key}")


class ConcurrentModificationError(MetaDBError):
    """Raised when a stored record changed since the caller loaded it."""

    def __init__(self, key: Any) -> None:
        self.key = key
        super().__init__(f"Blob ref was modified concurrently: {key}")
