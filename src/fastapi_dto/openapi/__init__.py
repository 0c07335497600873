"""OpenAPI generation and normalization.

`install_openapi` lives in `fastapi_dto.openapi.integration` and is re-exported
from the package root; it is not imported here because it depends on the
request-side modules.
"""

from .cleanup import cleanup_openapi_doc
from .pydantic_projector import schema_id
from .registry import SchemaRegistry, default_registry
from .walker import walk_json_schema

__all__ = [
    "SchemaRegistry",
    "cleanup_openapi_doc",
    "default_registry",
    "schema_id",
    "walk_json_schema",
]
