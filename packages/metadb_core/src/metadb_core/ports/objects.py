from typing import Protocol

from metadb_core.models import BlobRef


class ObjectLocator(Protocol):
    def locate(self, blob: BlobRef) -> str: ...
