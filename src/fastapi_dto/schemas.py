"""Adapters that give every supported schema flavour one interface.

Three flavours can be bound to a DTO:

- pydantic models and any other type `TypeAdapter` accepts (`list[Book]`,
  `Annotated[...]`); these support asymmetric input/output typing and encoding
- legacy schema nodes (`fastapi_dto.legacy`)
- any other object exposing `parse(value)`; it validates but documents as an
  empty object
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError

from .exceptions import CapabilityError, issues_of
from .legacy.nodes import LazyNode, SchemaNode
from .legacy.projector import project
from .result import ParseResult

logger = logging.getLogger(__name__)

IO = Literal["input", "output"]
JsonSchema = dict[str, Any]


@dataclass(frozen=True)
class Projection:
    """A generated root fragment plus the named definitions it references.

    Refs point at `#/$defs/<public id>`; `defs` is keyed by public id.
    """

    schema: JsonSchema
    defs: dict[str, JsonSchema] = field(default_factory=dict)
    schema_id: str = ""


class BoundSchema(ABC):
    """Port between DTOs and a concrete validation library."""

    supports_output: bool = False
    is_codec: bool = False

    def __init__(self, target: Any) -> None:
        self.target = target

    @abstractmethod
    def safe_parse(self, value: Any) -> ParseResult:
        """Validate without raising."""

    @abstractmethod
    def parse(self, value: Any) -> Any:
        """Validate, raising the library's own validation error."""

    def encode(self, value: Any) -> Any:
        raise CapabilityError(
            f"[fastapi-dto] {type(self.target).__name__} does not support encode()"
        )

    @abstractmethod
    def project(self, io: IO, name: str) -> Projection:
        """Generate the JSON Schema of the target for `io`.

        `name` is the public id used for the root when the target does not
        carry an explicit one.
        """

    def explicit_id(self) -> str | None:
        return None


class PydanticSchema(BoundSchema):
    supports_output = True
    is_codec = True

    def __init__(self, target: Any, adapter: TypeAdapter[Any] | None = None) -> None:
        super().__init__(target)
        self.adapter = adapter if adapter is not None else TypeAdapter(target)

    def parse(self, value: Any) -> Any:
        return self.adapter.validate_python(value)

    def safe_parse(self, value: Any) -> ParseResult:
        try:
            data = self.adapter.validate_python(value)
        except ValidationError as e:
            return ParseResult(success=False, issues=issues_of(e) or [])
        return ParseResult(success=True, data=data)

    def encode(self, value: Any) -> Any:
        validated = self.adapter.validate_python(value)
        return self.adapter.dump_python(validated, mode="json")

    def project(self, io: IO, name: str) -> Projection:
        from .openapi.pydantic_projector import project_pydantic

        return project_pydantic(self.adapter, io=io, name=name)

    def explicit_id(self) -> str | None:
        config = getattr(self.target, "model_config", None) or {}
        extra = config.get("json_schema_extra")
        if isinstance(extra, dict) and isinstance(extra.get("id"), str):
            return extra["id"]
        return None


class LegacySchema(BoundSchema):
    def parse(self, value: Any) -> Any:
        return self.target.parse(value)

    def safe_parse(self, value: Any) -> ParseResult:
        return self.target.safe_parse(value)

    def explicit_id(self) -> str | None:
        node = self.target
        while node.id is None and isinstance(node, LazyNode):
            node = node.resolve()
        return node.id

    def project(self, io: IO, name: str) -> Projection:
        if io == "output":
            raise CapabilityError(
                "[fastapi-dto] Output DTOs require a schema capable of asymmetric input/output typing"
            )
        defs: dict[str, JsonSchema] = {}
        schema = project(self.target, defs=defs)
        root_id = self.explicit_id() or name
        schema = _inline_root_ref(schema, defs, root_id)
        for schema_id, definition in defs.items():
            definition["id"] = schema_id
        if self.explicit_id():
            schema["id"] = root_id
        return Projection(schema=schema, defs=defs, schema_id=root_id)


class ParserSchema(BoundSchema):
    """Any object with a `parse(value)` method."""

    def parse(self, value: Any) -> Any:
        return self.target.parse(value)

    def safe_parse(self, value: Any) -> ParseResult:
        try:
            data = self.target.parse(value)
        except Exception as e:
            issues = issues_of(e) or [{"type": "value_error", "loc": (), "msg": str(e)}]
            return ParseResult(success=False, issues=issues)
        return ParseResult(success=True, data=data)

    def project(self, io: IO, name: str) -> Projection:
        if io == "output":
            raise CapabilityError(
                "[fastapi-dto] Output DTOs require a schema capable of asymmetric input/output typing"
            )
        return Projection(schema={"type": "object", "properties": {}}, schema_id=name)


def _inline_root_ref(schema: JsonSchema, defs: dict[str, JsonSchema], root_id: str) -> JsonSchema:
    """Replace a root that is only a `$ref` into `defs` by the definition itself."""

    ref = schema.get("$ref")
    if set(schema) != {"$ref"} or not isinstance(ref, str):
        return schema
    key = ref.rsplit("/", 1)[-1]
    if key != root_id or key not in defs:
        return schema
    return copy.deepcopy(defs.pop(key))


def as_schema(target: Any) -> BoundSchema:
    if isinstance(target, BoundSchema):
        return target
    if isinstance(target, SchemaNode):
        return LegacySchema(target)
    if callable(getattr(target, "parse", None)) and not isinstance(target, type):
        return ParserSchema(target)
    try:
        adapter = TypeAdapter(target)
    except PydanticSchemaGenerationError as e:
        raise TypeError(f"Cannot bind {target!r}: not a supported schema") from e
    return PydanticSchema(target, adapter)
