from metadb_core.models import (
    BlobRef,
    BlobStatus,
    Key,
    Property,
    PropertyList,
    Timestamps,
)

__all__ = [
    "BlobRef",
    "BlobStatus",
    "Key",
    "Property",
    "PropertyList",
    "Timestamps",
]
