from metadb_local.config.settings import Settings

__all__ = ["Settings"]
