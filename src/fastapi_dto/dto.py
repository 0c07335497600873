"""Schema-bound DTO classes.

    class BookDto(Dto, schema=Book):
        pass

    PersonDto = create_dto(person_node, name="PersonDto")

A DTO is never instantiated; it carries the schema, validates through
`create()` and describes itself to the documentation assembler through
`metadata()` / `root_metadata()`.
"""

from __future__ import annotations

import logging
import types
from typing import Any, ClassVar

from .const import OUTPUT_SUFFIX
from .exceptions import ensure
from .openapi.metadata import PropertyRecord, markerize, property_record, root_keywords
from .openapi.registry import SchemaRegistry, default_registry
from .result import ParseResult
from .schemas import IO, BoundSchema, Projection, as_schema

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class _OutputDescriptor:
    """Lazily derives (and caches per class) the output-variant DTO."""

    def __get__(self, instance: object, owner: type[Dto]) -> type[Dto]:
        cached = owner.__dict__.get("_output_dto")
        if cached is not None:
            return cached
        ensure(owner.io == "input", f"{owner.__name__} is already an output DTO")
        ensure(
            owner.bound_schema.supports_output,
            "Output DTOs require a schema capable of asymmetric input/output typing",
        )
        output = type(
            f"{owner.__name__}{OUTPUT_SUFFIX}",
            (owner,),
            {"io": "output", "__module__": owner.__module__},
        )
        setattr(owner, "_output_dto", output)
        return output


class Dto:
    is_bound: ClassVar[bool] = True
    io: ClassVar[IO] = "input"
    schema: ClassVar[Any]
    bound_schema: ClassVar[BoundSchema]

    Output = _OutputDescriptor()

    def __init_subclass__(cls, schema: Any = _UNSET, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if schema is not _UNSET:
            cls.schema = schema
            cls.bound_schema = as_schema(schema)
        elif not hasattr(cls, "bound_schema"):
            raise TypeError(f"{cls.__name__} must be declared with schema=...")

    def __new__(cls, *args: Any, **kwargs: Any) -> Any:
        raise TypeError(f"{cls.__name__} is a DTO class; use {cls.__name__}.create()")

    @classmethod
    def create(cls, value: Any) -> Any:
        return cls.bound_schema.parse(value)

    @classmethod
    def safe_parse(cls, value: Any) -> ParseResult:
        return cls.bound_schema.safe_parse(value)

    @classmethod
    def projection(cls) -> Projection:
        cached = cls.__dict__.get("_projection")
        if cached is None:
            cached = cls.bound_schema.project(cls.io, cls.__name__)
            setattr(cls, "_projection", cached)
        return cached

    @classmethod
    def schema_id(cls) -> str:
        return cls.projection().schema_id

    @classmethod
    def metadata(cls, registry: SchemaRegistry | None = None) -> PropertyRecord:
        """Property record for the documentation assembler.

        Named definitions referenced by the schema are recorded in `registry`
        (the process-wide one by default) for the cleanup engine to resolve.
        """

        projection = cls.projection()
        (registry if registry is not None else default_registry).register_all(projection.defs)
        return property_record(markerize(projection.schema), projection.schema_id)

    @classmethod
    def root_metadata(cls) -> dict[str, Any]:
        return root_keywords(markerize(cls.projection().schema))


def create_dto(schema: Any, name: str | None = None) -> type[Dto]:
    if name is None:
        name = getattr(schema, "__name__", None) or getattr(schema, "id", None) or "Dto"
    return types.new_class(name, (Dto,), {"schema": schema})


def is_dto(obj: Any) -> bool:
    return isinstance(obj, type) and getattr(obj, "is_bound", False) is True
