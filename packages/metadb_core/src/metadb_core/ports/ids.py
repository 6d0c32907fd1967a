from datetime import datetime
from typing import Protocol
from uuid import UUID


class IdFactory(Protocol):
    def __call__(self) -> UUID: ...


class Clock(Protocol):
    def __call__(self) -> datetime: ...
