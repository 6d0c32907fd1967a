from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_data_dir: str = "./data"
    entity_kind: str = "blob"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @property
    def data_dir(self) -> Path:
        return Path(self.app_data_dir).resolve()

    @property
    def sqlite_path(self) -> Path:
        return self.data_dir / "metadb.sqlite3"

    @property
    def object_path(self) -> Path:
        return self.data_dir / "objects"

    def ensure_dirs(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.object_path.mkdir(parents=True, exist_ok=True)
