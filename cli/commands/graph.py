"""Commands for extracting, printing and navigating schema graphs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from schema_graph.catalog import SchemaCatalog
from schema_graph.config import settings
from schema_graph.graph import GraphBuildOptions, SchemaModel
from schema_graph.pipeline import render_graph

from cli.context import load_context, open_catalog, require_active_schema, save_context
from cli.rendering import render_properties, render_tree

graph_app = typer.Typer(help="Extract, print and navigate schema graphs.")


def _pick(catalog: SchemaCatalog, schema: Optional[str]) -> SchemaModel:
    """The schema named by *schema*, or the active one."""
    key = schema or load_context().active_schema
    if not key:
        typer.echo("❌ No schema given and no active schema selected.")
        typer.echo("Pass a schema or run 'schema open <schema>' first.")
        raise typer.Exit(code=1)
    model = catalog.select(key)
    if model is None:
        typer.echo(f"❌ Schema '{key}' not found.")
        raise typer.Exit(code=1)
    return model


def _options(legacy: bool, filter: Optional[str]) -> GraphBuildOptions:
    erd_view = settings.erd_view and not legacy
    return GraphBuildOptions(erd_view=erd_view, filter=filter)


@graph_app.command("show")
def graph_show(
    schema: Optional[str] = typer.Argument(None, help="Schema key (default: active schema)."),
    legacy: bool = typer.Option(False, "--legacy", help="One node per relation kind instead of the ERD view."),
    filter: Optional[str] = typer.Option(None, "--filter", help="Narrow the main node's properties."),
    no_layout: bool = typer.Option(False, "--no-layout", help="Skip positioning."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON here instead of stdout."),
) -> None:
    """Print the laid-out graph of a schema as JSON."""
    catalog = open_catalog()
    model = _pick(catalog, schema)
    payload = render_graph(model, catalog.index, _options(legacy, filter), layout=not no_layout)
    data = json.dumps(payload.to_dict(), indent=2)

    if output:
        output.write_text(data, encoding="utf-8")
        typer.echo(f"✅ Graph written to {output} ({len(payload.nodes)} nodes, {len(payload.edges)} edges)")
    else:
        typer.echo(data)


@graph_app.command("tree")
def graph_tree(
    schema: Optional[str] = typer.Argument(None, help="Schema key (default: active schema)."),
    legacy: bool = typer.Option(False, "--legacy", help="One node per relation kind instead of the ERD view."),
    filter: Optional[str] = typer.Option(None, "--filter", help="Narrow the main node's properties."),
    highlight: Optional[str] = typer.Option(None, "--highlight", help="Mark edges matching this property."),
    properties: bool = typer.Option(False, "--properties", "-p", help="Also list the main entity's properties."),
) -> None:
    """Display a schema's relationships as an ASCII tree."""
    catalog = open_catalog()
    model = _pick(catalog, schema)
    payload = render_graph(model, catalog.index, _options(legacy, filter), layout=False)

    typer.echo(render_tree(payload, highlight=highlight))
    if properties and payload.main is not None:
        typer.echo("")
        typer.echo(render_properties(payload.main))


@graph_app.command("nav")
@require_active_schema
def graph_nav(
    target: str = typer.Argument(..., help="Label or id of a node in the active schema's graph."),
) -> None:
    """Open a related entity or abstract schema of the active schema."""
    catalog = open_catalog()
    model = _pick(catalog, None)
    payload = render_graph(model, catalog.index, _options(False, None), layout=False)

    needle = target.lower()
    node = next(
        (
            n for n in payload.nodes
            if n is not payload.main and (n.id.lower() == needle or n.data.label.lower() == needle)
        ),
        None,
    )
    if node is None:
        typer.echo(f"❌ No node '{target}' in the graph of {model.title}.")
        raise typer.Exit(code=1)

    selected = catalog.navigate(node, payload.nodes)
    if selected is None:
        typer.echo(f"❌ '{node.data.label}' has no schema in the catalog.")
        raise typer.Exit(code=1)

    ctx = load_context()
    ctx.visit(selected.path or selected.id)
    save_context(ctx)
    typer.echo(f"📂 Opened schema: {selected.title} [{selected.path or selected.id}]")
