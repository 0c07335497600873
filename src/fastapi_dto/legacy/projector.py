"""Project legacy schema nodes into OpenAPI fragments.

Fragments use the 3.1 keywords (null unions, numeric exclusive bounds,
`prefixItems`); the dialect pass downgrades them for 3.0 documents.

Unions are emitted as `oneOf` here, while pydantic emits `anyOf`. Both forms
are kept as generated; the cleanup engine handles each of them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, assert_never

from ..const import DEFS_REF_PREFIX
from ..exceptions import SchemaCollisionError
from .nodes import (
    ArrayNode,
    BigIntNode,
    BooleanNode,
    DefaultNode,
    DiscriminatedUnionNode,
    EnumNode,
    IntersectionNode,
    LazyNode,
    LiteralNode,
    NativeEnumNode,
    NullableNode,
    NullNode,
    NumberNode,
    ObjectNode,
    OptionalNode,
    RecordNode,
    SchemaNode,
    SetNode,
    StringNode,
    TransformNode,
    TupleNode,
    UnionNode,
)

logger = logging.getLogger(__name__)

JsonSchema = dict[str, Any]


@dataclass
class _Context:
    visited: set[int]
    defs: dict[str, JsonSchema] | None
    root_id: str | None = None
    named: dict[str, int] = field(default_factory=dict)


def project(
    node: SchemaNode,
    visited: set[int] | None = None,
    defs: dict[str, JsonSchema] | None = None,
) -> JsonSchema:
    """Return the OpenAPI fragment for `node`.

    `visited` holds `id()`s of lazy handles on the current path. When `defs` is
    given, every named node below the root is emitted into it and referenced
    through `#/$defs/<id>`; otherwise named nodes are inlined.
    """

    ctx = _Context(visited=visited if visited is not None else set(), defs=defs, root_id=node.id)
    return _project(ctx, node, root=True)


def deep_merge(left: Any, right: Any) -> Any:
    """Merge two fragments: dicts key-wise, lists unioned, scalars last-wins."""

    if isinstance(left, dict) and isinstance(right, dict):
        out = dict(left)
        for key, value in right.items():
            out[key] = deep_merge(out[key], value) if key in out else value
        return out
    if isinstance(left, list) and isinstance(right, list):
        out_list = list(left)
        for item in right:
            if item not in out_list:
                out_list.append(item)
        return out_list
    return right


def _ref(schema_id: str) -> JsonSchema:
    return {"$ref": f"{DEFS_REF_PREFIX}{schema_id}"}


def _project(ctx: _Context, node: SchemaNode, *, root: bool = False) -> JsonSchema:
    if ctx.defs is not None and node.id and not root:
        return _project_named(ctx, node)

    fragment = _project_kind(ctx, node)
    if node.description is not None:
        fragment["description"] = node.description
    return fragment


def _project_named(ctx: _Context, node: SchemaNode) -> JsonSchema:
    assert ctx.defs is not None and node.id
    schema_id = node.id
    if schema_id == ctx.root_id:
        return _ref(schema_id)

    known = ctx.named.get(schema_id)
    if known is None:
        ctx.named[schema_id] = id(node)
        # Placeholder so that recursion through this node stops at a $ref.
        ctx.defs[schema_id] = {}
        ctx.defs[schema_id] = _project(ctx, node, root=True)
        logger.debug("legacy projector emitted definition %s", schema_id)
    elif known != id(node):
        other = _project(
            _Context(visited=set(), defs={}, root_id=schema_id), node, root=True
        )
        if other != ctx.defs[schema_id]:
            raise SchemaCollisionError(schema_id)
    return _ref(schema_id)


def _project_kind(ctx: _Context, node: SchemaNode) -> JsonSchema:
    match node:
        case StringNode():
            out: JsonSchema = {"type": "string"}
            if node.min_length is not None:
                out["minLength"] = node.min_length
            if node.max_length is not None:
                out["maxLength"] = node.max_length
            if node.format is not None:
                out["format"] = node.format
            if node.pattern is not None:
                out["pattern"] = node.pattern
            return out
        case NumberNode():
            out = {"type": "integer" if node.integer else "number"}
            if node.minimum is not None:
                out["minimum" if node.minimum_inclusive else "exclusiveMinimum"] = node.minimum
            if node.maximum is not None:
                out["maximum" if node.maximum_inclusive else "exclusiveMaximum"] = node.maximum
            if node.multiple_of is not None:
                out["multipleOf"] = node.multiple_of
            return out
        case BigIntNode():
            return {"type": "integer", "format": "int64"}
        case BooleanNode():
            return {"type": "boolean"}
        case NullNode():
            return {"type": "null"}
        case ArrayNode():
            out = {"type": "array", "items": _project(ctx, node.items)}
            if node.min_items is not None:
                out["minItems"] = node.min_items
            if node.max_items is not None:
                out["maxItems"] = node.max_items
            return out
        case SetNode():
            out = {"type": "array", "items": _project(ctx, node.items), "uniqueItems": True}
            if node.min_items is not None:
                out["minItems"] = node.min_items
            if node.max_items is not None:
                out["maxItems"] = node.max_items
            return out
        case TupleNode():
            return {
                "type": "array",
                "prefixItems": [_project(ctx, item) for item in node.items],
                "minItems": len(node.items),
                "maxItems": len(node.items),
            }
        case ObjectNode():
            return _project_object(ctx, node)
        case RecordNode():
            return {"type": "object", "additionalProperties": _project(ctx, node.values)}
        case UnionNode():
            return {"oneOf": [_project(ctx, option) for option in node.options]}
        case DiscriminatedUnionNode():
            return {"oneOf": [_project(ctx, option) for option in node.options]}
        case IntersectionNode():
            return deep_merge(_project(ctx, node.left), _project(ctx, node.right))
        case EnumNode():
            return {"type": "string", "enum": list(node.values)}
        case NativeEnumNode():
            return _project_native_enum(node.enum)
        case LiteralNode():
            return _project_literal(node.value)
        case OptionalNode():
            return _project(ctx, node.inner)
        case NullableNode():
            return {"anyOf": [_project(ctx, node.inner), {"type": "null"}]}
        case DefaultNode():
            return {**_project(ctx, node.inner), "default": node.default_value()}
        case TransformNode():
            return _project(ctx, node.inner)
        case LazyNode():
            return _project_lazy(ctx, node)
        case _:
            assert_never(node)


def _project_object(ctx: _Context, node: ObjectNode) -> JsonSchema:
    properties = {key: _project(ctx, member) for key, member in node.properties.items()}
    required = [
        key
        for key, member in node.properties.items()
        if not isinstance(member, (OptionalNode, DefaultNode))
    ]
    out: JsonSchema = {"type": "object", "properties": properties}
    if required:
        out["required"] = required
    return out


def _project_native_enum(enum_cls: type[Enum]) -> JsonSchema:
    values = [member.value for member in enum_cls]
    if all(isinstance(v, str) for v in values):
        type_ = "string"
    elif all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values):
        type_ = "number"
    else:
        type_ = None
    out: JsonSchema = {"enum": values, "x-enumNames": [member.name for member in enum_cls]}
    if type_ is not None:
        out = {"type": type_, **out}
    return out


def _project_literal(value: Any) -> JsonSchema:
    if value is None:
        return {"type": "null"}
    if isinstance(value, bool):
        return {"type": "boolean", "enum": [value]}
    if isinstance(value, int):
        return {"type": "integer", "minimum": value, "maximum": value}
    if isinstance(value, float):
        return {"type": "number", "minimum": value, "maximum": value}
    return {"type": "string", "enum": [value]}


def _project_lazy(ctx: _Context, node: LazyNode) -> JsonSchema:
    target = node.resolve()
    key = id(node)
    if key in ctx.visited:
        if target.id and ctx.defs is not None:
            return _ref(target.id)
        return {}

    ctx.visited.add(key)
    try:
        return _project(ctx, target)
    finally:
        ctx.visited.discard(key)
