from typing import Any

from fastapi import Request

from .dto import is_dto
from .exceptions import ExceptionCreator, create_validation_exception
from .pipe import Source, read_source
from .validate import validate


class ValidationGuard:
    """Dependency that rejects a request whose `source` does not validate.

    Unlike `ValidationPipe` it does not hand the parsed value to the endpoint.
    Prefer the pipe; the guard is kept for routes that only need the check,
    e.g. in `dependencies=[Depends(ValidationGuard("query", FilterDto))]`.
    """

    def __init__(
        self,
        source: Source,
        schema_or_dto: Any,
        create_exception: ExceptionCreator = create_validation_exception,
    ) -> None:
        self.source = source
        self.schema_or_dto = schema_or_dto
        self.create_exception = create_exception

    @property
    def dto(self) -> Any:
        return self.schema_or_dto if is_dto(self.schema_or_dto) else None

    async def __call__(self, request: Request) -> None:
        validate(await read_source(request, self.source), self.schema_or_dto, self.create_exception)
