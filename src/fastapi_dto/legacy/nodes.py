"""Legacy validation schemas.

A schema is an immutable tree of nodes discriminated by their class. Recursive
schemas are built with `LazyNode`, an explicit handle that is created empty and
defined exactly once:

    node = lazy()
    node.define(obj(name=string(), children=array(node)))

Cycle detection anywhere in the package compares handles by identity, never by
structure.

Parsing compiles the tree into a pydantic-core validator (see `compiler.py`)
on first use. Unknown object keys are stripped and missing keys are only
accepted for `optional()` / `default()` members. Unions pick the first
matching option.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import cached_property
from typing import TYPE_CHECKING, Any, Callable, Literal, Mapping

from pydantic import ValidationError

from ..exceptions import CapabilityError, SchemaParseError, issues_of
from ..result import ParseResult

if TYPE_CHECKING:
    from pydantic_core import SchemaValidator


StringFormat = Literal["email", "uri", "uuid", "cuid", "date-time"]


@dataclass(frozen=True, eq=False, kw_only=True)
class SchemaNode:
    description: str | None = None
    id: str | None = None

    # Legacy schemas have a single shape for input and output.
    supports_output = False
    is_codec = False

    def parse(self, value: Any) -> Any:
        result = self.safe_parse(value)
        if not result.success:
            raise SchemaParseError(result.issues)
        return result.data

    def safe_parse(self, value: Any) -> ParseResult:
        try:
            data = self.validator.validate_python(value)
        except ValidationError as e:
            return ParseResult(success=False, issues=issues_of(e) or [])
        return ParseResult(success=True, data=data)

    @cached_property
    def validator(self) -> SchemaValidator:
        from .compiler import compile_validator

        return compile_validator(self)

    def encode(self, value: Any) -> Any:
        raise CapabilityError(
            f"[fastapi-dto] {type(self).__name__} does not support encode()"
        )

    def describe(self, description: str) -> SchemaNode:
        return replace(self, description=description)

    def named(self, schema_id: str) -> SchemaNode:
        return replace(self, id=schema_id)

    def optional(self) -> OptionalNode:
        return OptionalNode(inner=self)

    def nullable(self) -> NullableNode:
        return NullableNode(inner=self)

    def default(self, value: Any) -> DefaultNode:
        return DefaultNode(inner=self, value=value)

    def transform(self, fn: Callable[[Any], Any]) -> TransformNode:
        return TransformNode(inner=self, fn=fn)


@dataclass(frozen=True, eq=False, kw_only=True)
class StringNode(SchemaNode):
    min_length: int | None = None
    max_length: int | None = None
    format: StringFormat | None = None
    pattern: str | None = None


@dataclass(frozen=True, eq=False, kw_only=True)
class NumberNode(SchemaNode):
    integer: bool = False
    minimum: float | None = None
    minimum_inclusive: bool = True
    maximum: float | None = None
    maximum_inclusive: bool = True
    multiple_of: float | None = None


@dataclass(frozen=True, eq=False, kw_only=True)
class BigIntNode(SchemaNode):
    pass


@dataclass(frozen=True, eq=False, kw_only=True)
class BooleanNode(SchemaNode):
    pass


@dataclass(frozen=True, eq=False, kw_only=True)
class NullNode(SchemaNode):
    pass


@dataclass(frozen=True, eq=False, kw_only=True)
class ArrayNode(SchemaNode):
    items: SchemaNode
    min_items: int | None = None
    max_items: int | None = None


@dataclass(frozen=True, eq=False, kw_only=True)
class SetNode(SchemaNode):
    """Unique items. Parses into a list that keeps the input order."""

    items: SchemaNode
    min_items: int | None = None
    max_items: int | None = None


@dataclass(frozen=True, eq=False, kw_only=True)
class TupleNode(SchemaNode):
    items: tuple[SchemaNode, ...]


@dataclass(frozen=True, eq=False, kw_only=True)
class ObjectNode(SchemaNode):
    properties: Mapping[str, SchemaNode] = field(default_factory=dict)


@dataclass(frozen=True, eq=False, kw_only=True)
class RecordNode(SchemaNode):
    values: SchemaNode
    keys: SchemaNode | None = None


@dataclass(frozen=True, eq=False, kw_only=True)
class UnionNode(SchemaNode):
    options: tuple[SchemaNode, ...]


@dataclass(frozen=True, eq=False, kw_only=True)
class DiscriminatedUnionNode(SchemaNode):
    discriminator: str
    options: tuple[ObjectNode, ...]


@dataclass(frozen=True, eq=False, kw_only=True)
class IntersectionNode(SchemaNode):
    left: SchemaNode
    right: SchemaNode


@dataclass(frozen=True, eq=False, kw_only=True)
class EnumNode(SchemaNode):
    values: tuple[str, ...]


@dataclass(frozen=True, eq=False, kw_only=True)
class NativeEnumNode(SchemaNode):
    enum: type[Enum]


@dataclass(frozen=True, eq=False, kw_only=True)
class LiteralNode(SchemaNode):
    value: str | int | float | bool | None


@dataclass(frozen=True, eq=False, kw_only=True)
class OptionalNode(SchemaNode):
    inner: SchemaNode


@dataclass(frozen=True, eq=False, kw_only=True)
class NullableNode(SchemaNode):
    inner: SchemaNode


@dataclass(frozen=True, eq=False, kw_only=True)
class DefaultNode(SchemaNode):
    inner: SchemaNode
    value: Any

    def default_value(self) -> Any:
        if callable(self.value):
            return self.value()
        return copy.deepcopy(self.value)


@dataclass(frozen=True, eq=False, kw_only=True)
class TransformNode(SchemaNode):
    inner: SchemaNode
    fn: Callable[[Any], Any]


@dataclass(frozen=True, eq=False, kw_only=True)
class LazyNode(SchemaNode):
    """Handle to a node defined after construction (recursive schemas)."""

    target: SchemaNode | None = None

    def define(self, target: SchemaNode) -> LazyNode:
        if self.target is not None:
            raise ValueError("LazyNode is already defined")
        object.__setattr__(self, "target", target)
        return self

    def resolve(self) -> SchemaNode:
        if self.target is None:
            raise ValueError("LazyNode was never defined")
        return self.target


# ---- constructors ----


def string(**checks: Any) -> StringNode:
    return StringNode(**checks)


def number(**checks: Any) -> NumberNode:
    return NumberNode(**checks)


def integer(**checks: Any) -> NumberNode:
    return NumberNode(integer=True, **checks)


def bigint() -> BigIntNode:
    return BigIntNode()


def boolean() -> BooleanNode:
    return BooleanNode()


def null() -> NullNode:
    return NullNode()


def array(items: SchemaNode, **checks: Any) -> ArrayNode:
    return ArrayNode(items=items, **checks)


def set_of(items: SchemaNode, **checks: Any) -> SetNode:
    return SetNode(items=items, **checks)


def tuple_of(*items: SchemaNode) -> TupleNode:
    return TupleNode(items=tuple(items))


def obj(**properties: SchemaNode) -> ObjectNode:
    return ObjectNode(properties=dict(properties))


def record(values: SchemaNode, keys: SchemaNode | None = None) -> RecordNode:
    return RecordNode(values=values, keys=keys)


def union(*options: SchemaNode) -> UnionNode:
    return UnionNode(options=tuple(options))


def discriminated_union(discriminator: str, *options: ObjectNode) -> DiscriminatedUnionNode:
    return DiscriminatedUnionNode(discriminator=discriminator, options=tuple(options))


def intersection(left: SchemaNode, right: SchemaNode) -> IntersectionNode:
    return IntersectionNode(left=left, right=right)


def enum(*values: str) -> EnumNode:
    return EnumNode(values=tuple(values))


def native_enum(enum_cls: type[Enum]) -> NativeEnumNode:
    return NativeEnumNode(enum=enum_cls)


def literal(value: str | int | float | bool | None) -> LiteralNode:
    return LiteralNode(value=value)


def lazy() -> LazyNode:
    return LazyNode()

