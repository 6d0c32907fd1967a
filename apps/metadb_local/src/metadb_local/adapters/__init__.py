from metadb_local.adapters.object_locator import LocalObjectLocator
from metadb_local.adapters.sqlite_store import SQLiteBlobRefStore

__all__ = [
    "LocalObjectLocator",
    "SQLiteBlobRefStore",
]
