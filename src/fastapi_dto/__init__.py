"""Schema-bound DTOs for FastAPI.

Minimal re-exports for convenient importing.
"""

from .dto import Dto, create_dto, is_dto
from .exceptions import (
    CapabilityError,
    DocumentBuildError,
    MissingDefinitionError,
    SchemaCollisionError,
    SchemaDeclarationError,
    SchemaParseError,
    SerializationFailed,
    UnsupportedShapeError,
    ValidationFailed,
    create_serialization_exception,
    create_validation_exception,
)
from .guard import ValidationGuard
from .openapi import SchemaRegistry, cleanup_openapi_doc, schema_id, walk_json_schema
from .openapi.integration import build_openapi, install_openapi
from .pipe import ValidationPipe, create_validation_pipe
from .result import ParseResult
from .serializer import dto_response, serializer_dto
from .validate import validate

__all__ = [
    "CapabilityError",
    "DocumentBuildError",
    "Dto",
    "MissingDefinitionError",
    "ParseResult",
    "SchemaCollisionError",
    "SchemaDeclarationError",
    "SchemaParseError",
    "SchemaRegistry",
    "SerializationFailed",
    "UnsupportedShapeError",
    "ValidationFailed",
    "ValidationGuard",
    "ValidationPipe",
    "build_openapi",
    "cleanup_openapi_doc",
    "create_dto",
    "create_serialization_exception",
    "create_validation_exception",
    "create_validation_pipe",
    "dto_response",
    "install_openapi",
    "is_dto",
    "schema_id",
    "serializer_dto",
    "validate",
    "walk_json_schema",
]
