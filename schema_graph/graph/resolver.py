"""Best-effort resolution of ``$ref`` paths and entity names against an index.

The index maps a schema's key (its public file path) to the parsed schema.
Matching is string heuristics, tried as an ordered list of strategies; the
first strategy that finds a key wins.  False positives and negatives are
expected - an unresolved target simply becomes a ghost node.

Keys are always visited in sorted order so resolution does not depend on the
insertion order of the index.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence

from schema_graph.graph.models import CATEGORIES

_ID_UNSAFE = re.compile(r"[^a-zA-Z0-9_\-:.]")
_VERSION_TAIL = re.compile(r"[:.]\d+\.\d+\.\d+(?:\.json)?$")
_ID_SEPARATORS = re.compile(r"/|--|:")
_CAMEL_BOUNDARY = re.compile(r"([A-Z])")

# (key, schema, needle) -> matched?
Strategy = Callable[[str, Mapping[str, Any], str], bool]


@dataclass
class Resolution:
    key: str
    schema: Mapping[str, Any]

    @property
    def schema_id(self) -> Optional[str]:
        value = self.schema.get("$id")
        return value if isinstance(value, str) else None


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _basename(path: str) -> str:
    return path.rstrip("/").rsplit("/", 1)[-1]


def _strip_json(name: str) -> str:
    for suffix in (".min.json", ".json"):
        if name.lower().endswith(suffix):
            return name[: -len(suffix)]
    return name


def _file_stem(key: str) -> str:
    """``.../master-data/Well.1.2.0.min.json`` -> ``Well``."""
    return _basename(key).split(".", 1)[0]


def _id_stem(schema_id: str) -> str:
    """Last name segment of a schema ``$id`` with its version removed.

    ``osdu:wks:master-data--Well:1.0.0`` -> ``Well``;
    ``https://.../master-data/Well.1.0.0.json`` -> ``Well``.
    """
    trimmed = _VERSION_TAIL.sub("", schema_id)
    trimmed = _strip_json(trimmed)
    return _ID_SEPARATORS.split(trimmed)[-1].split(".", 1)[0]


def _schema_str(schema: Mapping[str, Any], key: str) -> str:
    value = schema.get(key)
    return value if isinstance(value, str) else ""


def normalize_ref_path(ref: str) -> str:
    """Drop the fragment and any leading ``./``, ``../`` or ``/`` segments."""
    path = ref.split("#", 1)[0]
    while True:
        if path.startswith("./"):
            path = path[2:]
        elif path.startswith("../"):
            path = path[3:]
        elif path.startswith("/"):
            path = path[1:]
        else:
            return path


def _ref_variants(path: str) -> list[str]:
    """The ref path plus its minified file variant."""
    variants = [path]
    if path.lower().endswith(".json") and not path.lower().endswith(".min.json"):
        variants.append(path[: -len(".json")] + ".min.json")
    return variants


# -- $ref strategies ---------------------------------------------------------

def _ref_path_suffix(key: str, schema: Mapping[str, Any], ref: str) -> bool:
    path = normalize_ref_path(ref)
    if not path:
        return False
    lowered = key.lower()
    return any(
        lowered == v.lower() or lowered.endswith("/" + v.lower()) for v in _ref_variants(path)
    )


def _ref_file_name(key: str, schema: Mapping[str, Any], ref: str) -> bool:
    name = _basename(normalize_ref_path(ref))
    if not name:
        return False
    return _basename(key).lower() in {v.lower() for v in _ref_variants(name)}


def _ref_schema_id(key: str, schema: Mapping[str, Any], ref: str) -> bool:
    schema_id = _schema_str(schema, "$id")
    if not schema_id:
        return False
    if schema_id == ref:
        return True
    path = normalize_ref_path(ref)
    return bool(path) and schema_id.lower().endswith("/" + path.lower())


def _ref_fuzzy_stem(key: str, schema: Mapping[str, Any], ref: str) -> bool:
    stem = _strip_json(_basename(normalize_ref_path(ref))).lower()
    return bool(stem) and _strip_json(_basename(key)).lower() == stem


REF_STRATEGIES: Sequence[Strategy] = (
    _ref_path_suffix,
    _ref_file_name,
    _ref_schema_id,
    _ref_fuzzy_stem,
)


# -- entity strategies -------------------------------------------------------

def _entity_file_stem(key: str, schema: Mapping[str, Any], entity: str) -> bool:
    return _file_stem(key).lower() == entity.lower()


def _entity_title(key: str, schema: Mapping[str, Any], entity: str) -> bool:
    title = _schema_str(schema, "title").replace(" ", "").lower()
    return bool(title) and title == entity.replace(" ", "").lower()


def _entity_id_stem(key: str, schema: Mapping[str, Any], entity: str) -> bool:
    schema_id = _schema_str(schema, "$id")
    return bool(schema_id) and _id_stem(schema_id).lower() == entity.lower()


def _entity_fuzzy(key: str, schema: Mapping[str, Any], entity: str) -> bool:
    lowered = key.lower()
    kebab = _CAMEL_BOUNDARY.sub(r"-\1", entity).lstrip("-").lower()
    return entity.lower() in lowered or kebab in lowered


ENTITY_STRATEGIES: Sequence[Strategy] = (
    _entity_file_stem,
    _entity_title,
    _entity_id_stem,
    _entity_fuzzy,
)


def _first_match(
    index: Mapping[str, Any],
    keys: Sequence[str],
    needle: str,
    strategies: Sequence[Strategy],
) -> Optional[Resolution]:
    for strategy in strategies:
        for key in keys:
            schema = index[key]
            if isinstance(schema, Mapping) and strategy(key, schema, needle):
                return Resolution(key=key, schema=schema)
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def normalize_id(value: str) -> str:
    """Make *value* safe for use as a node id."""
    return _ID_UNSAFE.sub("_", value)


def resolve_ref(index: Optional[Mapping[str, Any]], ref: str) -> Optional[Resolution]:
    """Find the indexed schema a ``$ref`` points at.

    Precedence: relative-path suffix > file name > ``$id`` > fuzzy stem.
    A ``.min.json`` key matches a ``.json`` ref.
    """
    if not index or not ref:
        return None
    return _first_match(index, sorted(index), ref, REF_STRATEGIES)


def resolve_entity(
    index: Optional[Mapping[str, Any]],
    entity: str,
    group_type: Optional[str] = None,
) -> Optional[Resolution]:
    """Find the indexed schema for a relationship target entity.

    Precedence: file stem > ``title`` > ``$id`` stem > fuzzy substring.
    When *group_type* is given, keys under ``/<group_type>/`` are searched
    with every strategy before the rest of the index.
    """
    if not index or not entity:
        return None
    keys = sorted(index)
    if group_type:
        segment = f"/{group_type.lower()}/"
        preferred = [k for k in keys if segment in k.lower()]
        if preferred:
            found = _first_match(index, preferred, entity, ENTITY_STRATEGIES)
            if found is not None:
                return found
    return _first_match(index, keys, entity, ENTITY_STRATEGIES)


def infer_category(path: Optional[str], schema_id: Optional[str]) -> Optional[str]:
    """Category of a related entity from its file path or ``$id``."""
    haystack = f"{path or ''} {schema_id or ''}".lower()
    for category in CATEGORIES:
        if category in haystack:
            return category
    return None


def ref_label(ref: str) -> str:
    """Display label for a ``$ref``: its file name without ``.json``."""
    name = _basename(normalize_ref_path(ref))
    return _strip_json(name) or ref
