from metadb_core.ports.ids import Clock, IdFactory
from metadb_core.ports.objects import ObjectLocator
from metadb_core.ports.store import BlobRefStore

__all__ = [
    "BlobRefStore",
    "Clock",
    "IdFactory",
    "ObjectLocator",
]
