"""Compile legacy schema nodes into pydantic-core validators.

Legacy schemas validate with the same engine as pydantic models, so issues
from both flavours share types, locations and messages. Scalars are strict
(no string to number coercion, no bool for int). Lazy handles become core
schema definitions, keyed by the handle's identity.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from functools import lru_cache
from typing import Annotated, Any, Callable
from uuid import UUID

from pydantic import AnyUrl, EmailStr, StringConstraints, TypeAdapter, ValidationError
from pydantic_core import CoreSchema, PydanticCustomError, SchemaValidator, core_schema

from ..exceptions import CapabilityError
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

_FORMAT_TYPES: dict[str, Any] = {
    "email": EmailStr,
    "uri": AnyUrl,
    "uuid": UUID,
    "date-time": datetime,
    "cuid": Annotated[str, StringConstraints(pattern=r"^c[a-z0-9]{8,}$")],
}


@lru_cache(maxsize=None)
def _format_adapter(fmt: str) -> TypeAdapter[Any]:
    return TypeAdapter(_FORMAT_TYPES[fmt])


def _check_format(fmt: str) -> Callable[[str], str]:
    adapter = _format_adapter(fmt)

    def check(value: str) -> str:
        # Strict string validation: a bare date is not a date-time.
        try:
            adapter.validate_strings(value, strict=True)
        except ValidationError as e:
            raise PydanticCustomError(
                "string_format", "String should be a valid {format}", {"format": fmt}
            ) from e
        return value

    return check


def _unique_items(items: list[Any]) -> list[Any]:
    # Items may be unhashable (objects), so compare pairwise.
    for i, item in enumerate(items):
        if item in items[:i]:
            raise PydanticCustomError("set_unique", "Set items should be unique")
    return items


def _transform(fn: Callable[[Any], Any]) -> Callable[[Any], Any]:
    def apply(value: Any) -> Any:
        try:
            return fn(value)
        except TypeError as e:
            raise ValueError(str(e)) from e

    return apply


def _enum_schema(enum_cls: type[Enum]) -> CoreSchema:
    members = list(enum_cls.__members__.values())
    if issubclass(enum_cls, str):
        return core_schema.enum_schema(enum_cls, members, sub_type="str")
    if issubclass(enum_cls, int):
        return core_schema.enum_schema(enum_cls, members, sub_type="int")
    if issubclass(enum_cls, float):
        return core_schema.enum_schema(enum_cls, members, sub_type="float")
    return core_schema.enum_schema(enum_cls, members)


def _literal_schema(value: Any) -> CoreSchema:
    if value is None:
        return core_schema.none_schema()
    if isinstance(value, bool):
        base = core_schema.bool_schema(strict=True)
    elif isinstance(value, int):
        base = core_schema.int_schema(strict=True)
    elif isinstance(value, float):
        base = core_schema.float_schema(strict=True)
    else:
        base = core_schema.str_schema(strict=True)
    return core_schema.chain_schema([base, core_schema.literal_schema([value])])


def _discriminator_tags(member: SchemaNode | None) -> list[Any]:
    while isinstance(member, LazyNode):
        member = member.resolve()
    match member:
        case LiteralNode():
            return [member.value]
        case EnumNode():
            return list(member.values)
        case NativeEnumNode():
            return [m.value for m in member.enum]
    raise CapabilityError(
        "[fastapi-dto] discriminated_union() options need a literal or enum discriminator"
    )


def _resolved(node: SchemaNode) -> SchemaNode:
    while isinstance(node, LazyNode):
        node = node.resolve()
    return node


class _Compiler:
    def __init__(self) -> None:
        self.refs: dict[int, str] = {}
        self.definitions: list[CoreSchema] = []

    def compile(self, node: SchemaNode) -> CoreSchema:
        match node:
            case StringNode():
                schema = core_schema.str_schema(
                    min_length=node.min_length,
                    max_length=node.max_length,
                    pattern=node.pattern,
                    strict=True,
                )
                if node.format is None:
                    return schema
                return core_schema.no_info_after_validator_function(_check_format(node.format), schema)
            case NumberNode():
                return self._number(node)
            case BigIntNode():
                return core_schema.int_schema(strict=True)
            case BooleanNode():
                return core_schema.bool_schema(strict=True)
            case NullNode():
                return core_schema.none_schema()
            case ArrayNode():
                return core_schema.list_schema(
                    self.compile(node.items), min_length=node.min_items, max_length=node.max_items
                )
            case SetNode():
                items = core_schema.list_schema(
                    self.compile(node.items), min_length=node.min_items, max_length=node.max_items
                )
                return core_schema.no_info_after_validator_function(_unique_items, items)
            case TupleNode():
                positional = core_schema.tuple_schema([self.compile(item) for item in node.items])
                return core_schema.no_info_after_validator_function(list, positional)
            case ObjectNode():
                return self._object(node)
            case RecordNode():
                keys = self.compile(node.keys) if node.keys is not None else core_schema.str_schema(strict=True)
                return core_schema.dict_schema(keys, self.compile(node.values))
            case UnionNode():
                return core_schema.union_schema(
                    [self.compile(option) for option in node.options],
                    mode="left_to_right",
                    custom_error_type="invalid_union",
                    custom_error_message="Input does not match any union member",
                )
            case DiscriminatedUnionNode():
                choices: dict[Any, CoreSchema] = {}
                for option in node.options:
                    compiled = self.compile(option)
                    for tag in _discriminator_tags(option.properties.get(node.discriminator)):
                        choices[tag] = compiled
                return core_schema.tagged_union_schema(choices, discriminator=node.discriminator)
            case IntersectionNode():
                left, right = _resolved(node.left), _resolved(node.right)
                if isinstance(left, ObjectNode) and isinstance(right, ObjectNode):
                    return self._object(ObjectNode(properties={**left.properties, **right.properties}))
                return core_schema.chain_schema([self.compile(node.left), self.compile(node.right)])
            case EnumNode():
                return core_schema.literal_schema(list(node.values))
            case NativeEnumNode():
                return _enum_schema(node.enum)
            case LiteralNode():
                return _literal_schema(node.value)
            case OptionalNode():
                return self.compile(node.inner)
            case NullableNode():
                return core_schema.nullable_schema(self.compile(node.inner))
            case DefaultNode():
                return core_schema.with_default_schema(
                    self.compile(node.inner), default_factory=node.default_value
                )
            case TransformNode():
                return core_schema.no_info_after_validator_function(
                    _transform(node.fn), self.compile(node.inner)
                )
            case LazyNode():
                return self._lazy(node)
            case _:
                raise TypeError(f"Unsupported schema node: {type(node).__name__}")

    def _number(self, node: NumberNode) -> CoreSchema:
        bounds: dict[str, Any] = {}
        if node.minimum is not None:
            bounds["ge" if node.minimum_inclusive else "gt"] = node.minimum
        if node.maximum is not None:
            bounds["le" if node.maximum_inclusive else "lt"] = node.maximum
        if node.multiple_of is not None:
            bounds["multiple_of"] = node.multiple_of
        if node.integer:
            return core_schema.int_schema(strict=True, **bounds)
        return core_schema.float_schema(strict=True, **bounds)

    def _object(self, node: ObjectNode) -> CoreSchema:
        fields = {
            key: core_schema.typed_dict_field(
                self.compile(member),
                required=not isinstance(member, (OptionalNode, DefaultNode)),
            )
            for key, member in node.properties.items()
        }
        return core_schema.typed_dict_schema(fields, extra_behavior="ignore")

    def _lazy(self, node: LazyNode) -> CoreSchema:
        ref = self.refs.get(id(node))
        if ref is None:
            ref = f"fastapi_dto.legacy.lazy-{len(self.refs)}"
            self.refs[id(node)] = ref
            target = self.compile(node.resolve())
            self.definitions.append({**target, "ref": ref})  # type: ignore[typeddict-item]
        return core_schema.definition_reference_schema(ref)


def compile_schema(node: SchemaNode) -> CoreSchema:
    compiler = _Compiler()
    schema = compiler.compile(node)
    if compiler.definitions:
        return core_schema.definitions_schema(schema, compiler.definitions)
    return schema


def compile_validator(node: SchemaNode) -> SchemaValidator:
    return SchemaValidator(compile_schema(node))
