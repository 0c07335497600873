"""Generic pre-order walker over JSON-Schema-shaped dicts."""

from __future__ import annotations

import copy
from typing import Any, Callable

from ..const import ALL_OF_KEY, ANY_OF_KEY


JsonSchema = dict[str, Any]
Visitor = Callable[[JsonSchema], JsonSchema]

_LIST_KEYS = ("oneOf", "anyOf", "allOf", "prefixItems", ANY_OF_KEY, ALL_OF_KEY)


def walk_json_schema(
    schema: JsonSchema, callback: Visitor, *, clone: bool = False
) -> JsonSchema:
    """Apply `callback` to `schema` and then to every sub-schema.

    The callback runs before children are visited, so it may rename composition
    keys (e.g. `anyOf` -> marker) and the walker follows the renamed key.
    With `clone=True` the input tree is deep-copied first and never mutated.
    """

    if clone:
        schema = copy.deepcopy(schema)
    return _walk(schema, callback)


def _walk(schema: JsonSchema, callback: Visitor) -> JsonSchema:
    schema = callback(schema)

    properties = schema.get("properties")
    if isinstance(properties, dict):
        for key, value in list(properties.items()):
            if isinstance(value, dict):
                properties[key] = _walk(value, callback)

    items = schema.get("items")
    if isinstance(items, dict):
        schema["items"] = _walk(items, callback)
    elif isinstance(items, list):
        schema["items"] = [_walk(i, callback) if isinstance(i, dict) else i for i in items]

    for key in _LIST_KEYS:
        branches = schema.get(key)
        if isinstance(branches, list):
            schema[key] = [_walk(b, callback) if isinstance(b, dict) else b for b in branches]

    for key in ("propertyNames", "additionalProperties"):
        sub = schema.get(key)
        if isinstance(sub, dict):
            schema[key] = _walk(sub, callback)

    return schema
