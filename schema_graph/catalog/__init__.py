"""Schema catalog package - scan, fetch and look up schema documents."""

from schema_graph.catalog.catalog import SchemaCatalog
from schema_graph.catalog.fetcher import fetch_catalog
from schema_graph.catalog.loader import (
    SchemaIndexEntry,
    extract_version,
    is_json_schema,
    load_catalog,
    scan_directory,
    write_index,
)

__all__ = [
    "SchemaCatalog",
    "SchemaIndexEntry",
    "fetch_catalog",
    "extract_version",
    "is_json_schema",
    "load_catalog",
    "scan_directory",
    "write_index",
]
