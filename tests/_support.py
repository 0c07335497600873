"""Shared helpers for the test-suite."""

from __future__ import annotations

import json
from typing import Any

from fastapi_dto.const import COMPONENTS_REF_PREFIX, PREFIX
from fastapi_dto.openapi.assembler import DocumentAssembler, OperationBinding, ResponseSpec
from fastapi_dto.openapi.registry import SchemaRegistry


def raw_doc(
    registry: SchemaRegistry,
    *,
    body: Any = None,
    query: Any = None,
    params: Any = None,
    responses: list[ResponseSpec] | None = None,
    path: str = "/",
    method: str = "post",
    openapi: str = "3.1.0",
) -> dict[str, Any]:
    """Assemble a single-operation document the way `build_openapi()` does."""

    doc: dict[str, Any] = {
        "openapi": openapi,
        "info": {"title": "test", "version": "0.0.0"},
        "paths": {path: {method: {"responses": {}}}},
    }
    binding = OperationBinding(body=body, responses=list(responses or []))
    if query is not None:
        binding.parameters.append((query, "query"))
    if params is not None:
        binding.parameters.append((params, "path"))

    assembler = DocumentAssembler(registry)
    assembler.apply(doc["paths"][path][method], binding)
    return assembler.finish(doc)


def all_refs(value: Any) -> list[str]:
    refs: list[str] = []
    if isinstance(value, dict):
        for key, item in value.items():
            if key == "$ref" and isinstance(item, str):
                refs.append(item)
            else:
                refs.extend(all_refs(item))
    elif isinstance(value, list):
        for item in value:
            refs.extend(all_refs(item))
    return refs


def assert_refs_resolve(doc: dict[str, Any]) -> None:
    schemas = doc.get("components", {}).get("schemas", {})
    for ref in all_refs(doc):
        assert ref.startswith(COMPONENTS_REF_PREFIX), ref
        assert ref[len(COMPONENTS_REF_PREFIX):] in schemas, ref


def assert_marker_free(doc: dict[str, Any]) -> None:
    assert PREFIX not in json.dumps(doc)
