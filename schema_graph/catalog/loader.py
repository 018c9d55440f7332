"""Scan a directory tree of OSDU schema files into a catalog.

Every ``*.json`` file whose ``$schema`` points at json-schema.org is kept;
status/bookkeeping files and anything that does not parse are skipped.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

from schema_graph.catalog.catalog import SchemaCatalog
from schema_graph.graph.models import SchemaModel

logger = logging.getLogger(__name__)

SKIPPED_FILES = frozenset({"SchemaStatus.json", "SchemaToIndexSchema.json"})

_ID_VERSION = re.compile(r":(\d+\.\d+\.\d+)\.json$")
_SOURCE_VERSION = re.compile(r":(\d+\.\d+\.\d+)$")


@dataclass
class SchemaIndexEntry:
    """One row of ``schema-index.json``."""

    fileName: str
    relativePath: str
    publicPath: str
    title: str
    id: str
    version: Optional[str]
    directory: str


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def is_json_schema(doc: Any) -> bool:
    """``True`` for a mapping whose ``$schema`` mentions json-schema.org."""
    return (
        isinstance(doc, dict)
        and isinstance(doc.get("$schema"), str)
        and "json-schema.org" in doc["$schema"]
    )


def extract_version(schema: dict[str, Any]) -> Optional[str]:
    """Semantic version from ``$id`` or ``x-osdu-schema-source``, if present."""
    schema_id = schema.get("$id")
    if isinstance(schema_id, str):
        match = _ID_VERSION.search(schema_id)
        if match:
            return match.group(1)
    source = schema.get("x-osdu-schema-source")
    if isinstance(source, str):
        match = _SOURCE_VERSION.search(source)
        if match:
            return match.group(1)
    return None


def public_path(prefix: str, relative: str) -> str:
    return f"{prefix.rstrip('/')}/{relative.lstrip('/')}"


def _read_schemas(
    root: Path,
    prefix: str,
) -> list[tuple[SchemaIndexEntry, dict[str, Any]]]:
    if not root.is_dir():
        raise FileNotFoundError(f"Schema directory not found: {root}")

    found: list[tuple[SchemaIndexEntry, dict[str, Any]]] = []
    for path in sorted(root.rglob("*.json")):
        if not path.is_file() or path.name in SKIPPED_FILES:
            continue
        relative = path.relative_to(root).as_posix()
        try:
            schema = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Failed to parse %s: %s", relative, exc)
            continue
        if not is_json_schema(schema):
            continue
        parent = path.parent.relative_to(root).as_posix()
        entry = SchemaIndexEntry(
            fileName=path.name,
            relativePath=relative,
            publicPath=public_path(prefix, relative),
            title=schema.get("title") or "Untitled",
            id=schema.get("$id") or relative,
            version=extract_version(schema),
            directory=parent if parent != "." else "root",
        )
        found.append((entry, schema))
    return found


def scan_directory(root: Path, prefix: str = "/data/Generated") -> list[SchemaIndexEntry]:
    """Return index entries for every JSON Schema under *root*, sorted by path.

    Raises:
        FileNotFoundError: If *root* is not a directory.
    """
    return [entry for entry, _ in _read_schemas(root, prefix)]


def write_index(entries: list[SchemaIndexEntry], output: Path) -> Path:
    """Write *entries* as ``schema-index.json`` and return the path."""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps([asdict(e) for e in entries], indent=2), encoding="utf-8")
    return output


def load_catalog(root: Path, prefix: str = "/data/Generated") -> SchemaCatalog:
    """Load every schema under *root* into a :class:`SchemaCatalog`.

    Index keys are public paths (``<prefix>/<relative path>``).
    """
    catalog = SchemaCatalog()
    for entry, schema in _read_schemas(root, prefix):
        catalog.add(SchemaModel.from_schema(schema, path=entry.publicPath, version=entry.version))
    logger.info("Loaded %d schema(s) from %s", len(catalog), root)
    return catalog
