"""Turn a generated root fragment into a DTO property record.

The documentation assembler only understands property-keyed records whose
entries carry a `type`, so composition keywords and references are parked
under marker keys here and restored by the cleanup engine.
"""

from __future__ import annotations

from typing import Any

from ..const import (
    ALL_OF_KEY,
    ANY_OF_KEY,
    CONST_KEY,
    EMPTY_TYPE_KEY,
    HAS_NULL_KEY,
    PARENT_ID_KEY,
    REF_KEY,
    UNWRAP_ROOT_KEY,
)
from .walker import walk_json_schema

JsonSchema = dict[str, Any]
PropertyRecord = dict[str, JsonSchema]

_ROOT_STRUCTURE_KEYS = frozenset({"type", "properties", "required"})


def is_null_branch(schema: Any) -> bool:
    return isinstance(schema, dict) and schema == {"type": "null"}


def _markerize_node(node: JsonSchema) -> JsonSchema:
    if "$ref" in node:
        node[REF_KEY] = node.pop("$ref")

    any_of = node.get("anyOf")
    if isinstance(any_of, list):
        nulls = [b for b in any_of if is_null_branch(b)]
        branches = [b for b in any_of if not is_null_branch(b)]
        del node["anyOf"]
        if len(nulls) == 1:
            node[HAS_NULL_KEY] = True
            node[ANY_OF_KEY] = branches
        else:
            node[ANY_OF_KEY] = any_of

    if "allOf" in node:
        node[ALL_OF_KEY] = node.pop("allOf")
    if "const" in node:
        node[CONST_KEY] = node.pop("const")
    return node


def markerize(schema: JsonSchema) -> JsonSchema:
    """Return a copy of `schema` with composition keywords moved under markers."""

    return walk_json_schema(schema, _markerize_node, clone=True)


def property_record(schema: JsonSchema, parent_id: str) -> PropertyRecord:
    """Build the property record of a markerized root fragment.

    Object roots map each property to its fragment plus a required flag
    (`selfRequired` for object-typed properties, whose own `required` holds
    the nested list). Any other root is stored whole under the unwrap marker.
    """

    properties = schema.get("properties")
    if not isinstance(properties, dict):
        entry = _with_type(dict(schema))
        entry[PARENT_ID_KEY] = parent_id
        return {UNWRAP_ROOT_KEY: entry}

    required = set(schema.get("required") or ())
    record: PropertyRecord = {}
    for key, fragment in properties.items():
        entry = _with_type(dict(fragment))
        flag = "selfRequired" if entry.get("type") == "object" else "required"
        entry[flag] = key in required
        entry[PARENT_ID_KEY] = parent_id
        record[key] = entry
    return record


def root_keywords(schema: JsonSchema) -> JsonSchema:
    """Root-level keywords of an object root that a property record cannot carry."""

    if not isinstance(schema.get("properties"), dict):
        return {}
    return {k: v for k, v in schema.items() if k not in _ROOT_STRUCTURE_KEYS}


def _with_type(entry: JsonSchema) -> JsonSchema:
    if "type" not in entry:
        entry["type"] = ""
        entry[EMPTY_TYPE_KEY] = True
    return entry


def strip_record_flags(entry: JsonSchema) -> JsonSchema:
    """Drop the record-only required flags, keeping a nested `required` list."""

    out = dict(entry)
    out.pop("selfRequired", None)
    if isinstance(out.get("required"), bool):
        del out["required"]
    return out


def is_required(entry: JsonSchema) -> bool:
    flag = entry.get("selfRequired", entry.get("required"))
    return flag is True
