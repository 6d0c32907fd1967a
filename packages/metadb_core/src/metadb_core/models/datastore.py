from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class Key(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: str
    name: str

    def __str__(self) -> str:
        return f"{self.kind}/{self.name}"


class Property(BaseModel):
    """One named value of an entity; composite values are nested property lists."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: Any = None


PropertyList = list[Property]
