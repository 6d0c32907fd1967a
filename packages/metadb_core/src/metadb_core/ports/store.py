from typing import Protocol
from uuid import UUID

from metadb_core.models import BlobRef


class BlobRefStore(Protocol):
    def create_blob_ref(self, blob: BlobRef) -> BlobRef: ...

    def get_blob_ref(self, key: UUID) -> BlobRef | None: ...

    def update_blob_ref(self, blob: BlobRef) -> BlobRef: ...

    def delete_blob_ref(self, key: UUID) -> None: ...
