"""Persistent navigation state for the schema graph CLI.

Tracks the "active schema" and the history of schemas navigated away from,
so ``back`` can return to them.  Stored in `~/.osdu_graph/context.json`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from functools import wraps
from pathlib import Path
from typing import Callable, Optional

import httpx
import typer
from schema_graph.catalog import SchemaCatalog, fetch_catalog, load_catalog
from schema_graph.config import settings

logger = logging.getLogger(__name__)


@dataclass
class CliContext:
    active_schema: str | None = None
    history: list[str] = field(default_factory=list)

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2)

    @classmethod
    def from_json(cls, data: str) -> CliContext:
        try:
            raw = json.loads(data)
            return cls(**raw)
        except (json.JSONDecodeError, TypeError):
            return cls()

    def visit(self, key: str) -> bool:
        """Make *key* active, pushing the previous schema onto the history.

        Returns ``False`` (and changes nothing) when *key* is already active.
        """
        if key == self.active_schema:
            return False
        if self.active_schema:
            self.history.append(self.active_schema)
        self.active_schema = key
        return True

    def back(self) -> str | None:
        """Pop the history into the active slot and return it."""
        if not self.history:
            return None
        self.active_schema = self.history.pop()
        return self.active_schema


def _get_context_path() -> Path:
    """Return the path to the context JSON file."""
    return settings.cli_config_dir / "context.json"


def load_context() -> CliContext:
    """Load the CLI context from disk. Returns defaults if missing/corrupt."""
    path = _get_context_path()
    if not path.exists():
        return CliContext()

    try:
        return CliContext.from_json(path.read_text(encoding="utf-8"))
    except OSError as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return CliContext()


def save_context(ctx: CliContext) -> None:
    """Save the CLI context to disk."""
    settings.cli_config_dir.mkdir(parents=True, exist_ok=True)
    _get_context_path().write_text(ctx.to_json(), encoding="utf-8")


def open_catalog(schema_dir: Optional[Path] = None, base_url: Optional[str] = None) -> SchemaCatalog:
    """Load the catalog from *base_url*, *schema_dir* or the configured source.

    Exits with code 1 when the directory does not exist or the index
    cannot be fetched.
    """
    url = base_url or settings.schema_base_url
    if url and schema_dir is None:
        try:
            return fetch_catalog(url)
        except httpx.HTTPError as exc:
            typer.echo(f"❌ Could not load schema index from {url}: {exc}")
            raise typer.Exit(code=1) from exc
    root = schema_dir or settings.schema_dir
    try:
        return load_catalog(root, settings.schema_public_prefix)
    except FileNotFoundError as exc:
        typer.echo(f"❌ {exc}")
        raise typer.Exit(code=1) from exc


def require_active_schema(func: Callable) -> Callable:
    """Decorator for CLI commands that need an active schema.

    Aborts execution if no schema has been opened.  The command loads the
    context itself when it needs the data.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        ctx = load_context()
        if not ctx.active_schema:
            typer.echo("❌ No active schema selected.")
            typer.echo("Run 'open <schema>' first.")
            raise typer.Exit(code=1)
        return func(*args, **kwargs)

    return wrapper
