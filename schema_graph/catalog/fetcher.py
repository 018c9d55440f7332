"""Load a schema catalog published over HTTP.

The server exposes ``schema-index.json`` (as written by ``scan``) and every
schema at its ``publicPath``.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from schema_graph.catalog.catalog import SchemaCatalog
from schema_graph.catalog.loader import is_json_schema
from schema_graph.config import settings
from schema_graph.graph.models import SchemaModel

logger = logging.getLogger(__name__)

INDEX_FILE = "schema-index.json"

_DEFAULT_HEADERS = {"Accept": "application/json"}


def _url(base_url: str, path: str) -> str:
    if path.startswith(("http://", "https://")):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def fetch_catalog(base_url: str, client: Optional[httpx.Client] = None) -> SchemaCatalog:
    """Download the schema index at *base_url* and every schema it lists.

    A failing index request raises; a failing or non-schema document is
    logged and skipped.

    Raises:
        httpx.HTTPStatusError: If the index request returns a 4xx/5xx status.
    """
    own_client = client is None
    if client is None:
        client = httpx.Client(
            headers=_DEFAULT_HEADERS,
            timeout=settings.request_timeout,
            follow_redirects=True,
        )

    catalog = SchemaCatalog()
    try:
        response = client.get(_url(base_url, INDEX_FILE))
        response.raise_for_status()
        entries = response.json()
        if not isinstance(entries, list):
            logger.warning("%s is not a list; no schemas loaded", INDEX_FILE)
            return catalog

        for entry in entries:
            path = entry.get("publicPath") if isinstance(entry, dict) else None
            if not path:
                continue
            try:
                schema_response = client.get(_url(base_url, path))
                schema_response.raise_for_status()
                schema = schema_response.json()
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning("Failed to fetch %s: %s", path, exc)
                continue
            if not is_json_schema(schema):
                logger.debug("Skipping %s: not a JSON Schema document", path)
                continue
            catalog.add(SchemaModel.from_schema(schema, path=path, version=entry.get("version")))
    finally:
        if own_client:
            client.close()

    logger.info("Fetched %d schema(s) from %s", len(catalog), base_url)
    return catalog
