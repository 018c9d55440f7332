"""Schema catalog commands: scan, search and navigation context."""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Optional

import typer
from schema_graph.catalog import scan_directory, write_index
from schema_graph.config import settings

from cli.context import load_context, open_catalog, require_active_schema, save_context

schema_app = typer.Typer(help="Scan, search and open OSDU schemas.")


@schema_app.command("scan")
def schema_scan(
    directory: Optional[Path] = typer.Option(None, "--dir", help="Schema directory (default: SCHEMA_DIR)."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Index file to write."),
    prefix: Optional[str] = typer.Option(None, "--prefix", help="Public path prefix."),
) -> None:
    """Scan a schema directory and write schema-index.json."""
    root = directory or settings.schema_dir
    try:
        entries = scan_directory(root, prefix or settings.schema_public_prefix)
    except FileNotFoundError as exc:
        typer.echo(f"❌ {exc}")
        raise typer.Exit(code=1) from exc

    target = write_index(entries, output or root / "schema-index.json")

    per_directory = Counter(e.directory for e in entries)
    for name in sorted(per_directory):
        typer.echo(f"  {name:<40} {per_directory[name]:>5}")
    typer.echo(f"✅ Indexed {len(entries)} schema(s) in {len(per_directory)} director(ies) -> {target}")


@schema_app.command("search")
def schema_search(
    term: Optional[str] = typer.Argument(None, help="Substring of title, id or version."),
    limit: int = typer.Option(50, "--limit", help="Maximum rows to print."),
) -> None:
    """List schemas matching a search term."""
    catalog = open_catalog()
    results = catalog.search(term)
    if not results:
        typer.echo(f"No schemas match {term!r}.")
        return

    active = load_context().active_schema
    for model in results[:limit]:
        marker = "*" if active in (model.path, model.id) else " "
        version = f"  v{model.version}" if model.version else ""
        typer.echo(f"{marker} {model.title}{version} \t[{model.path or model.id}]")
    if len(results) > limit:
        typer.echo(f"  ... {len(results) - limit} more")


@schema_app.command("open")
def schema_open(
    key: str = typer.Argument(..., help="Schema id, partial id, title or file path."),
) -> None:
    """Select a schema as the active one."""
    catalog = open_catalog()
    model = catalog.select(key)
    if model is None:
        typer.echo(f"❌ Schema '{key}' not found.")
        raise typer.Exit(code=1)

    ctx = load_context()
    ctx.visit(model.path or model.id)
    save_context(ctx)
    typer.echo(f"📂 Opened schema: {model.title} [{model.path or model.id}]")


@schema_app.command("back")
@require_active_schema
def schema_back() -> None:
    """Return to the previously opened schema."""
    ctx = load_context()
    previous = ctx.back()
    if previous is None:
        typer.echo("Already at the first schema; nothing to go back to.")
        return
    save_context(ctx)
    typer.echo(f"📂 Back to: {previous}")


@schema_app.command("current")
def schema_current() -> None:
    """Show the active schema and the navigation trail."""
    ctx = load_context()
    if not ctx.active_schema:
        typer.echo("No active schema.")
        return
    trail = " > ".join(ctx.history + [ctx.active_schema])
    typer.echo(f"Active: {ctx.active_schema}")
    typer.echo(f"Trail : {trail}")
