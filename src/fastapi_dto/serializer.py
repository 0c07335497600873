"""Response validation for endpoints.

`serializer_dto()` validates what an endpoint returns; `dto_response()` does the
same and also documents the response. A response that does not match its DTO
is a server bug: the client gets an opaque 500 and the issues go to the log.
"""

from __future__ import annotations

import functools
import inspect
import logging
from typing import Any, Callable, TypeVar

from fastapi import Response
from pydantic import ValidationError

from .dto import is_dto
from .exceptions import (
    ExceptionCreator,
    SchemaParseError,
    create_serialization_exception,
    ensure,
    issues_of,
)
from .openapi.assembler import ResponseSpec
from .schemas import BoundSchema
from .validate import bound_schema_of

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

RESPONSES_ATTR = "__fastapi_dto_responses__"

_PASSTHROUGH = (str, bytes, int, float, bool)


def _unpack(dto: Any) -> tuple[Any, bool]:
    if isinstance(dto, (list, tuple)):
        ensure(len(dto) == 1, "Array responses are declared as [dto]")
        return dto[0], True
    return dto, False


def _serialize_one(value: Any, schema: BoundSchema, create_exception: ExceptionCreator) -> Any:
    if schema.is_codec:
        try:
            return schema.encode(value)
        except ValidationError as e:
            logger.error("response serialization failed: %s", issues_of(e))
            raise create_exception(e) from e
    result = schema.safe_parse(value)
    if not result.success:
        logger.error("response serialization failed: %s", result.issues)
        raise create_exception(SchemaParseError(result.issues))
    return result.data


def serialize_response(
    value: Any,
    schema_or_dto: Any,
    *,
    is_array: bool = False,
    create_exception: ExceptionCreator = create_serialization_exception,
) -> Any:
    if value is None or isinstance(value, (Response, *_PASSTHROUGH)):
        return value

    schema = bound_schema_of(schema_or_dto)
    if not is_array:
        return _serialize_one(value, schema, create_exception)

    if not isinstance(value, (list, tuple)):
        error = SchemaParseError([{"type": "list_type", "loc": (), "msg": "Input should be a valid list"}])
        logger.error("response serialization failed: %s", error.issues)
        raise create_exception(error)
    return [_serialize_one(item, schema, create_exception) for item in value]


def serializer_dto(dto: Any) -> Callable[[F], F]:
    """Validate (or encode, for codec schemas) the endpoint's return value.

    Accepts a DTO, a bare schema, or a one-element list for array responses.
    """

    target, is_array = _unpack(dto)

    def decorator(fn: F) -> F:
        if inspect.iscoroutinefunction(fn):

            @functools.wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                return serialize_response(await fn(*args, **kwargs), target, is_array=is_array)

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return serialize_response(fn(*args, **kwargs), target, is_array=is_array)

        return wrapper  # type: ignore[return-value]

    return decorator


def dto_response(status: int, dto: Any, description: str | None = None) -> Callable[[F], F]:
    """Serialize with `dto` and document it as the `status` response.

    Schemas with asymmetric input/output typing are documented through their
    `Output` variant.
    """

    target, is_array = _unpack(dto)
    ensure(is_dto(target), "dto_response expects a DTO class")
    ensure(
        target.io != "output",
        "dto_response should be called with the DTO directly, not DTO.Output",
    )
    documented = target.Output if target.bound_schema.supports_output else target
    spec = ResponseSpec(status=status, dto=documented, is_array=is_array, description=description)

    def decorator(fn: F) -> F:
        wrapped = serializer_dto(dto)(fn)
        setattr(wrapped, RESPONSES_ATTR, [*getattr(fn, RESPONSES_ATTR, ()), spec])
        return wrapped

    return decorator


def responses_of(endpoint: Callable[..., Any]) -> list[ResponseSpec]:
    return list(getattr(endpoint, RESPONSES_ATTR, ()))
