from metadb_core.services.properties import (
    BLOB_REF_KIND,
    from_properties,
    native_key,
    parse_key,
    to_properties,
)

__all__ = ["BLOB_REF_KIND", "from_properties", "native_key", "parse_key", "to_properties"]
