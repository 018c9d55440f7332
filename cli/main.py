"""OSDU schema graph CLI - entry-point for catalog and graph operations.

Usage:
    python cli/main.py --help

Command groups:
    schema    → scan a schema tree, search it, open / go back
    graph     → graph JSON, ASCII tree, navigate to a related schema
    serve     → run the HTTP API
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that
# `from schema_graph.xxx import ...` works when the CLI is invoked as
# `python cli/main.py` from any working directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import logging
from typing import Optional

import typer

from schema_graph.config import settings
from cli.commands.graph import graph_app
from cli.commands.schemas import schema_app

app = typer.Typer(
    name="osdu-graph",
    help="OSDU schema entity-relationship graph CLI.",
    no_args_is_help=True,
)
app.add_typer(schema_app, name="schema")
app.add_typer(graph_app, name="graph")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG | INFO | WARNING | ERROR"),
) -> None:
    """Configure logging before any command runs."""
    level = (log_level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default: API_HOST)."),
    port: Optional[int] = typer.Option(None, help="Port (default: API_PORT)."),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes."),
) -> None:
    """Run the FastAPI app with uvicorn."""
    import uvicorn

    bind_host = host or settings.api_host
    bind_port = port or settings.api_port
    typer.echo(f"[serve] Listening on http://{bind_host}:{bind_port}")
    uvicorn.run("schema_graph.api.app:app", host=bind_host, port=bind_port, reload=reload)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
