"""In-memory catalog of loaded schemas: search, selection and navigation."""

from __future__ import annotations

from typing import Any, Iterator, Optional, Sequence

from schema_graph.graph.models import SchemaModel, SchemaNode


def _has_segment_suffix(path: str, segment: str) -> bool:
    """``True`` when *path* ends with *segment* on a ``/`` boundary (case-insensitive)."""
    lowered = path.lower()
    segment = segment.lower()
    return lowered == segment or lowered.endswith("/" + segment)


class SchemaCatalog:
    """Ordered collection of :class:`SchemaModel` plus the path -> schema index."""

    def __init__(self, models: Optional[Sequence[SchemaModel]] = None) -> None:
        self._models: list[SchemaModel] = []
        for model in models or []:
            self.add(model)

    def __len__(self) -> int:
        return len(self._models)

    def __iter__(self) -> Iterator[SchemaModel]:
        return iter(self._models)

    def add(self, model: SchemaModel) -> None:
        self._models.append(model)

    @property
    def models(self) -> list[SchemaModel]:
        return list(self._models)

    @property
    def index(self) -> dict[str, Any]:
        """``{key -> schema}`` used by the extractor to resolve references."""
        return {(m.path or m.id): m.schema for m in self._models}

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def search(self, term: Optional[str]) -> list[SchemaModel]:
        """Models whose title or id contains *term*, or whose version does."""
        if not term:
            return self.models
        needle = term.lower()
        return [
            m for m in self._models
            if needle in m.title.lower()
            or needle in m.id.lower()
            or (m.version is not None and term in m.version)
        ]

    def select(self, key: Optional[str]) -> Optional[SchemaModel]:
        """Resolve an id, partial id, title or file path to one model.

        Tried in order: exact id, exact path, path whose last segment is the
        key's last segment, id containing the key, title containing the key.
        """
        if not key:
            return None
        lowered = key.lower()
        last_segment = key.rsplit("/", 1)[-1].lower()
        checks = (
            lambda m: m.id == key,
            lambda m: (m.path or "").lower() == lowered,
            lambda m: bool(last_segment) and _has_segment_suffix(m.path or "", last_segment),
            lambda m: lowered in m.id.lower(),
            lambda m: lowered in m.title.lower(),
        )
        for check in checks:
            for model in self._models:
                if check(model):
                    return model
        return None

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    @staticmethod
    def navigation_key(node: SchemaNode, nodes: Sequence[SchemaNode] = ()) -> str:
        """The key a "navigate to this node" action should select.

        Prefers the node's file path; for a node that only knows its ``$id``,
        borrows the file path of any node whose path ends with the id's last
        segment; then falls back to the id, label and node id.
        """
        data = node.data
        if data.file_path:
            return data.file_path
        if data.schema_id:
            tail = data.schema_id.rsplit("/", 1)[-1].lower()
            for other in nodes:
                path = other.data.file_path or ""
                if tail and _has_segment_suffix(path, tail):
                    return path
            return data.schema_id
        return data.label or node.id

    def navigate(self, node: SchemaNode, nodes: Sequence[SchemaNode] = ()) -> Optional[SchemaModel]:
        return self.select(self.navigation_key(node, nodes))
