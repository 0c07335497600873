"""Error taxonomy.

- Request-side failures (`ValidationFailed`) are the caller's fault: 400, with the
  structured issue list.
- Response-side failures (`SerializationFailed`) are server bugs: 500, opaque
  to the client. The original error is kept on the exception for logging.
- Documentation-build failures (`DocumentBuildError` and subclasses) abort the
  whole OpenAPI assembly.
- Misuse of the DTO API (`CapabilityError`) is raised through `ensure()` and is
  not meant to be caught by application code.
"""

from __future__ import annotations

from typing import Any, Callable

from fastapi import HTTPException, status
from pydantic import ValidationError


Issue = dict[str, Any]


class SchemaParseError(ValueError):
    """Raised by `parse()` of schemas that are not backed by pydantic."""

    def __init__(self, issues: list[Issue]) -> None:
        self.issues = issues
        super().__init__(_summarize(issues))


def _summarize(issues: list[Issue]) -> str:
    if not issues:
        return "Validation failed"
    lines = [f"{len(issues)} validation issue(s):"]
    for issue in issues:
        loc = ".".join(str(p) for p in issue.get("loc", ())) or "(root)"
        lines.append(f"- {loc}: {issue.get('msg')} [type={issue.get('type')}]")
    return "\n".join(lines)


def issues_of(error: object) -> list[Issue] | None:
    """Return the issue list carried by a validation error, if it has one."""

    if isinstance(error, ValidationError):
        return [
            dict(e)
            for e in error.errors(
                include_url=False, include_context=False, include_input=False
            )
        ]
    if isinstance(error, SchemaParseError):
        return list(error.issues)
    return None


class ValidationFailed(HTTPException):
    def __init__(self, error: object) -> None:
        self.error = error
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "statusCode": status.HTTP_400_BAD_REQUEST,
                "message": "Validation failed",
                "errors": issues_of(error),
            },
        )


class SerializationFailed(HTTPException):
    def __init__(self, error: object) -> None:
        self.error = error
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        )


class SchemaDeclarationError(HTTPException):
    """A value reached a strict validation pipe without a bound schema."""

    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal Server Error",
        )


ExceptionCreator = Callable[[object], Exception]


def create_validation_exception(error: object) -> Exception:
    return ValidationFailed(error)


def create_serialization_exception(error: object) -> Exception:
    return SerializationFailed(error)


class CapabilityError(Exception):
    """Programmer error: an operation the bound schema cannot support."""


def ensure(condition: object, message: str = "Assertion failed") -> None:
    if not condition:
        raise CapabilityError(f"[fastapi-dto] {message}")


class DocumentBuildError(Exception):
    """Fatal error while assembling or cleaning an OpenAPI document."""


class SchemaCollisionError(DocumentBuildError):
    def __init__(self, schema_id: str) -> None:
        self.schema_id = schema_id
        super().__init__(
            f"[cleanup_openapi_doc] Found multiple schemas with name `{schema_id}`.  "
            "Please review your schemas to ensure that you are not using the same "
            "schema name for different schemas"
        )


class UnsupportedShapeError(DocumentBuildError):
    pass


class MissingDefinitionError(DocumentBuildError):
    def __init__(self, schema_id: str) -> None:
        self.schema_id = schema_id
        super().__init__(
            f"[cleanup_openapi_doc] No definition registered for schema `{schema_id}`"
        )
