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
    ParseResult,
    RecordNode,
    SchemaNode,
    SetNode,
    StringNode,
    TransformNode,
    TupleNode,
    UnionNode,
    array,
    bigint,
    boolean,
    discriminated_union,
    enum,
    integer,
    intersection,
    lazy,
    literal,
    native_enum,
    null,
    number,
    obj,
    record,
    set_of,
    string,
    tuple_of,
    union,
)
from .projector import deep_merge, project

__all__ = [
    "ArrayNode",
    "BigIntNode",
    "BooleanNode",
    "DefaultNode",
    "DiscriminatedUnionNode",
    "EnumNode",
    "IntersectionNode",
    "LazyNode",
    "LiteralNode",
    "NativeEnumNode",
    "NullableNode",
    "NullNode",
    "NumberNode",
    "ObjectNode",
    "OptionalNode",
    "ParseResult",
    "RecordNode",
    "SchemaNode",
    "SetNode",
    "StringNode",
    "TransformNode",
    "TupleNode",
    "UnionNode",
    "array",
    "bigint",
    "boolean",
    "deep_merge",
    "discriminated_union",
    "enum",
    "integer",
    "intersection",
    "lazy",
    "literal",
    "native_enum",
    "null",
    "number",
    "obj",
    "project",
    "record",
    "set_of",
    "string",
    "tuple_of",
    "union",
]
