"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from schema_graph.api import app

    uvicorn schema_graph.api:app --reload
"""

from schema_graph.api.app import app

__all__ = ["app"]
