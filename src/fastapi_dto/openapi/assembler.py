"""Explore DTOs into a raw OpenAPI document.

This plays the part of a documentation generator that only understands
property records: every DTO becomes an object component built from
`metadata()` (plus `root_metadata()`), and parameter DTOs are flattened into
one parameter per property. The result still carries markers and must go
through `cleanup_openapi_doc()`.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Literal

from ..const import COMPONENTS_REF_PREFIX
from ..exceptions import SchemaCollisionError
from .metadata import is_required, strip_record_flags
from .registry import SchemaRegistry, default_registry

logger = logging.getLogger(__name__)

JsonSchema = dict[str, Any]
ParameterLocation = Literal["query", "path", "header"]


@dataclass(frozen=True)
class ResponseSpec:
    status: int
    dto: Any
    is_array: bool = False
    description: str | None = None


@dataclass
class OperationBinding:
    body: Any | None = None
    parameters: list[tuple[Any, ParameterLocation]] = field(default_factory=list)
    responses: list[ResponseSpec] = field(default_factory=list)

    def is_empty(self) -> bool:
        return self.body is None and not self.parameters and not self.responses


def _status_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Response"


class DocumentAssembler:
    """One documentation build. Explored DTOs are tracked per instance."""

    def __init__(self, registry: SchemaRegistry | None = None) -> None:
        self.registry = registry if registry is not None else default_registry
        self.components: dict[str, JsonSchema] = {}
        self._explored: dict[str, Any] = {}

    def component(self, dto: Any) -> JsonSchema:
        record = dto.metadata(self.registry)
        out: JsonSchema = {
            "type": "object",
            "properties": {key: strip_record_flags(entry) for key, entry in record.items()},
        }
        required = [key for key, entry in record.items() if is_required(entry)]
        if required:
            out["required"] = required
        out.update(copy.deepcopy(dto.root_metadata()))
        return out

    def component_ref(self, dto: Any) -> str:
        name = dto.__name__
        known = self._explored.get(name)
        if known is not dto:
            component = self.component(dto)
            if known is not None and self.components[name] != component:
                raise SchemaCollisionError(name)
            self._explored[name] = dto
            self.components[name] = component
            logger.debug("explored DTO %s", name)
        return f"{COMPONENTS_REF_PREFIX}{name}"

    def parameters(self, dto: Any, location: ParameterLocation) -> list[dict[str, Any]]:
        record = dto.metadata(self.registry)
        return [
            {
                "name": key,
                "in": location,
                "required": True if location == "path" else is_required(entry),
                "schema": strip_record_flags(entry),
            }
            for key, entry in record.items()
        ]

    def media_schema(self, dto: Any, *, is_array: bool = False) -> JsonSchema:
        ref = {"$ref": self.component_ref(dto)}
        if is_array:
            return {"type": "array", "items": ref}
        return ref

    def apply(self, operation: dict[str, Any], binding: OperationBinding) -> None:
        """Merge `binding` into an operation object in place."""

        if binding.body is not None:
            operation["requestBody"] = {
                "content": {"application/json": {"schema": self.media_schema(binding.body)}},
                "required": True,
            }

        if binding.parameters:
            parameters = operation.setdefault("parameters", [])
            seen = {(p.get("name"), p.get("in")) for p in parameters}
            for dto, location in binding.parameters:
                for parameter in self.parameters(dto, location):
                    if (parameter["name"], parameter["in"]) not in seen:
                        parameters.append(parameter)
                        seen.add((parameter["name"], parameter["in"]))

        responses = operation.setdefault("responses", {})
        for spec in binding.responses:
            responses[str(spec.status)] = {
                "description": spec.description or _status_phrase(spec.status),
                "content": {
                    "application/json": {
                        "schema": self.media_schema(spec.dto, is_array=spec.is_array)
                    }
                },
            }

    def finish(self, doc: dict[str, Any]) -> dict[str, Any]:
        """Return `doc` with the explored components added."""

        if not self.components:
            return doc
        components = dict(doc.get("components") or {})
        schemas = dict(components.get("schemas") or {})
        for name, component in self.components.items():
            if name in schemas and schemas[name] != component:
                raise SchemaCollisionError(name)
            schemas[name] = component
        components["schemas"] = schemas
        return {**doc, "components": components}
