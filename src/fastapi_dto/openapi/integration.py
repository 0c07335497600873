"""Plug DTO documentation into a FastAPI app.

    app = FastAPI()
    ...
    install_openapi(app)

`app.openapi()` then builds FastAPI's own document, adds the DTOs bound
through validation pipes/guards and `dto_response()`, and runs the cleanup.
The document is built once and cached on the app, like FastAPI does.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, Sequence

from fastapi import FastAPI, routing
from fastapi.dependencies.models import Dependant
from fastapi.openapi.utils import get_openapi
from fastapi.routing import APIRoute

from ..guard import ValidationGuard
from ..pipe import ValidationPipe
from ..serializer import responses_of
from .assembler import DocumentAssembler, OperationBinding, ParameterLocation
from .cleanup import cleanup_openapi_doc
from .registry import SchemaRegistry

logger = logging.getLogger(__name__)

_LOCATIONS: dict[str, ParameterLocation] = {
    "query": "query",
    "params": "path",
    "headers": "header",
}


def _walk_dependant(dependant: Dependant) -> list[Any]:
    calls: list[Any] = []
    for sub in dependant.dependencies:
        if sub.call is not None:
            calls.append(sub.call)
        calls.extend(_walk_dependant(sub))
    return calls


def iter_api_routes(routes: Sequence[Any]) -> Iterator[Any]:
    """Yield every API route of `routes`, descending into included routers.

    Older FastAPI releases copy the routes of `include_router()` onto the
    parent with their prefix applied. Newer ones keep the included router as
    one nested entry and expose the prefixed routes as route contexts, which
    answer the same attributes as an `APIRoute`.
    """

    iter_route_contexts = getattr(routing, "iter_route_contexts", None)
    if iter_route_contexts is None:
        for route in routes:
            if isinstance(route, APIRoute):
                yield route
        return
    for context in iter_route_contexts(routes):
        if isinstance(context.original_route, APIRoute):
            yield context


def route_binding(route: APIRoute) -> OperationBinding:
    binding = OperationBinding(responses=responses_of(route.endpoint))
    for call in _walk_dependant(route.dependant):
        if not isinstance(call, (ValidationPipe, ValidationGuard)) or call.dto is None:
            continue
        if call.source == "body":
            binding.body = call.dto
        else:
            binding.parameters.append((call.dto, _LOCATIONS[call.source]))
    return binding


def build_openapi(
    app: FastAPI,
    *,
    openapi_version: str | None = None,
    registry: SchemaRegistry | None = None,
) -> dict[str, Any]:
    """Build and clean the OpenAPI document of `app`.

    Each build uses its own registry unless one is passed, so definitions from
    unrelated apps never leak into the document.
    """

    registry = registry if registry is not None else SchemaRegistry()
    doc = get_openapi(
        title=app.title,
        version=app.version,
        openapi_version=openapi_version or app.openapi_version,
        summary=app.summary,
        description=app.description,
        routes=app.routes,
        tags=app.openapi_tags,
        servers=app.servers,
    )

    assembler = DocumentAssembler(registry)
    paths = doc.setdefault("paths", {})
    for route in iter_api_routes(app.routes):
        if not route.include_in_schema:
            continue
        binding = route_binding(route)
        if binding.is_empty():
            continue
        path_item = paths.setdefault(route.path_format, {})
        for method in route.methods:
            operation = path_item.get(method.lower())
            if operation is not None:
                assembler.apply(operation, binding)

    raw = assembler.finish(doc)
    logger.debug("assembled %d DTO components", len(assembler.components))
    return cleanup_openapi_doc(raw, openapi_version=openapi_version, registry=registry)


def install_openapi(
    app: FastAPI,
    *,
    openapi_version: str | None = None,
    registry: SchemaRegistry | None = None,
) -> Callable[[], dict[str, Any]]:
    def openapi() -> dict[str, Any]:
        if app.openapi_schema is None:
            app.openapi_schema = build_openapi(
                app, openapi_version=openapi_version, registry=registry
            )
        return app.openapi_schema

    app.openapi = openapi  # type: ignore[method-assign]
    return openapi
