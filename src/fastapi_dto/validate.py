from __future__ import annotations

from typing import Any

from .dto import is_dto
from .exceptions import ExceptionCreator, SchemaParseError, create_validation_exception
from .schemas import BoundSchema, as_schema


def bound_schema_of(schema_or_dto: Any) -> BoundSchema:
    if is_dto(schema_or_dto):
        return schema_or_dto.bound_schema
    return as_schema(schema_or_dto)


def validate(
    value: Any,
    schema_or_dto: Any,
    create_exception: ExceptionCreator = create_validation_exception,
) -> Any:
    """Parse `value`, raising `create_exception(error)` when it is invalid.

    Validation failures are expected here, so the non-raising `safe_parse`
    path is used and the exception is only built at the boundary.
    """

    result = bound_schema_of(schema_or_dto).safe_parse(value)
    if not result.success:
        raise create_exception(SchemaParseError(result.issues))
    return result.data
