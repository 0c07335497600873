"""Request validation as a FastAPI dependency.

    @app.post("/books")
    def create_book(book: dict = Depends(ValidationPipe(BookDto))) -> dict:
        ...

The pipe reads the raw value from the request (`body`, `query`, `params` or
`headers`), validates it and hands the parsed value to the endpoint.

Annotations in this module are evaluated eagerly: FastAPI reads the signature
of `__call__` on pipe instances, which carry no module globals.
"""

import json
import logging
from typing import Any, ClassVar, Literal

from fastapi import Request

from .dto import is_dto
from .exceptions import (
    ExceptionCreator,
    SchemaDeclarationError,
    SchemaParseError,
    ValidationFailed,
    create_validation_exception,
)
from .settings import get_settings
from .validate import validate

logger = logging.getLogger(__name__)

Source = Literal["body", "query", "params", "headers"]


async def read_source(request: Request, source: Source) -> Any:
    if source == "body":
        if not await request.body():
            return None
        try:
            return await request.json()
        except ValueError as e:
            # JSONDecodeError, or UnicodeDecodeError for a body that is not UTF-8
            reason = e.msg if isinstance(e, json.JSONDecodeError) else str(e)
            raise ValidationFailed(
                SchemaParseError([{"type": "json_invalid", "loc": ("body",), "msg": f"Invalid JSON: {reason}"}])
            ) from e
    if source == "query":
        out: dict[str, Any] = {}
        for key, value in request.query_params.multi_items():
            if key not in out:
                out[key] = value
            elif isinstance(out[key], list):
                out[key].append(value)
            else:
                out[key] = [out[key], value]
        return out
    if source == "params":
        return dict(request.path_params)
    if source == "headers":
        return dict(request.headers)
    raise ValueError(f"Unknown request source: {source}")


class ValidationPipe:
    create_validation_exception: ClassVar[ExceptionCreator] = staticmethod(create_validation_exception)
    # None defers to FASTAPI_DTO_STRICT_SCHEMA_DECLARATION.
    strict_schema_declaration: ClassVar[bool | None] = None

    def __init__(self, schema_or_dto: Any = None, source: Source = "body") -> None:
        self.schema_or_dto = schema_or_dto
        self.source = source

    @property
    def dto(self) -> Any:
        return self.schema_or_dto if is_dto(self.schema_or_dto) else None

    def transform(self, value: Any) -> Any:
        if self.schema_or_dto is None:
            strict = self.strict_schema_declaration
            if strict is None:
                strict = get_settings().strict_schema_declaration
            if strict:
                logger.error("validation pipe on %s has no schema bound", self.source)
                raise SchemaDeclarationError()
            return value
        return validate(value, self.schema_or_dto, self.create_validation_exception)

    async def __call__(self, request: Request) -> Any:
        return self.transform(await read_source(request, self.source))


def create_validation_pipe(
    *,
    create_validation_exception: ExceptionCreator | None = None,
    strict_schema_declaration: bool = False,
) -> type[ValidationPipe]:
    attrs: dict[str, Any] = {"strict_schema_declaration": strict_schema_declaration}
    if create_validation_exception is not None:
        attrs["create_validation_exception"] = staticmethod(create_validation_exception)
    return type("ValidationPipe", (ValidationPipe,), attrs)
