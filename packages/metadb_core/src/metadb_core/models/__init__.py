from metadb_core.models.blobref import BlobRef, BlobStatus, Timestamps, utcnow
from metadb_core.models.datastore import Key, Property, PropertyList

__all__ = [
    "BlobRef",
    "BlobStatus",
    "Key",
    "Property",
    "PropertyList",
    "Timestamps",
    "utcnow",
]
