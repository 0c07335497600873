"""OpenAPI 3.0 / 3.1 schema dialect handling.

Normalized fragments are produced in the 3.1 form (null unions, `const`,
numeric exclusive bounds, `prefixItems`). For a 3.0 target they are
downgraded here.
"""

from __future__ import annotations

from typing import Any

from ..settings import get_settings
from .metadata import is_null_branch
from .walker import walk_json_schema

JsonSchema = dict[str, Any]


def resolve_version(explicit: str | None, doc: dict[str, Any]) -> str:
    if explicit:
        return explicit
    declared = doc.get("openapi")
    if isinstance(declared, str) and declared:
        return declared
    return get_settings().openapi_version


def is_openapi_30(version: str) -> bool:
    return version.startswith("3.0")


def _nullable(branch: JsonSchema) -> JsonSchema:
    if "$ref" in branch:
        return {"allOf": [branch], "nullable": True}
    return {**branch, "nullable": True}


def _collapse_null_union(node: JsonSchema, key: str) -> JsonSchema:
    branches = node[key]
    if not isinstance(branches, list):
        return node
    nulls = [b for b in branches if is_null_branch(b)]
    if len(nulls) != 1:
        return node
    rest = [b for b in branches if not is_null_branch(b)]
    siblings = {k: v for k, v in node.items() if k != key}
    if len(rest) == 1:
        return {**_nullable(rest[0]), **siblings}
    return {**siblings, key: [_nullable(b) for b in rest]}


def _downgrade_node(node: JsonSchema) -> JsonSchema:
    for key in ("anyOf", "oneOf"):
        if key in node:
            node = _collapse_null_union(node, key)

    type_ = node.get("type")
    if isinstance(type_, list) and "null" in type_:
        remaining = [t for t in type_ if t != "null"]
        node["type"] = remaining[0] if len(remaining) == 1 else remaining
        node["nullable"] = True
    elif type_ == "null":
        # 3.0 has no null type; only `nullable` can say it
        del node["type"]
        node["nullable"] = True

    if "const" in node:
        node["enum"] = [node.pop("const")]

    for bound, plain in (("exclusiveMinimum", "minimum"), ("exclusiveMaximum", "maximum")):
        value = node.get(bound)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            node[plain] = value
            node[bound] = True

    prefix_items = node.pop("prefixItems", None)
    if isinstance(prefix_items, list):
        node["items"] = {"oneOf": prefix_items}
        node.setdefault("minItems", len(prefix_items))
        node.setdefault("maxItems", len(prefix_items))
    return node


def downgrade_to_30(schema: JsonSchema) -> JsonSchema:
    return walk_json_schema(schema, _downgrade_node)


def apply_dialect(schema: JsonSchema, version: str) -> JsonSchema:
    if is_openapi_30(version):
        return downgrade_to_30(schema)
    return schema
