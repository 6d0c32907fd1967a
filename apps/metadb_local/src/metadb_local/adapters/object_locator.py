from __future__ import annotations

from pathlib import Path

from metadb_core.models import BlobRef


class LocalObjectLocator:
    """Resolves where a blob's bytes live under a local directory; never touches them."""

    def __init__(self, base_dir: str) -> None:
        self._base_dir = Path(base_dir)

    def locate(self, blob: BlobRef) -> str:
        return str(self._base_dir / blob.object_path())
