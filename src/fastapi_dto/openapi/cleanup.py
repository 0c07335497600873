"""Normalize an assembled OpenAPI document.

The assembler leaves DTO components and parameters in the marker form
produced by `metadata.property_record()`. `cleanup_openapi_doc()` turns that
into a plain document:

1. DTO components get their public ids and lose every marker.
2. Every referenced definition is pulled from the schema registry, until no
   new references appear.
3. Request bodies, responses and parameters of every operation are rewritten
   to the public ids; parameter DTOs must be flat, non-recursive objects.
4. Two different schemas claiming one public id abort the cleanup.
5. The rest of the document is passed through.

A component is treated as a DTO component only when its properties carry the
parent-id marker. Anything else (e.g. FastAPI's own error models, or an
already cleaned document) passes through untouched, which makes the cleanup
idempotent.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from ..const import (
    ALL_OF_KEY,
    ANY_OF_KEY,
    COMPONENTS_REF_PREFIX,
    CONST_KEY,
    DEFS_REF_PREFIX,
    EMPTY_TYPE_KEY,
    HAS_NULL_KEY,
    PARENT_ID_KEY,
    REF_KEY,
    UNWRAP_ROOT_KEY,
)
from ..exceptions import MissingDefinitionError, SchemaCollisionError, UnsupportedShapeError
from .dialect import apply_dialect, resolve_version
from .metadata import markerize, strip_record_flags
from .registry import SchemaRegistry, default_registry
from .walker import walk_json_schema

logger = logging.getLogger(__name__)

JsonSchema = dict[str, Any]

HTTP_METHODS = frozenset({"get", "put", "post", "delete", "options", "head", "patch", "trace"})


def cleanup_openapi_doc(
    doc: dict[str, Any],
    *,
    openapi_version: str | None = None,
    registry: SchemaRegistry | None = None,
) -> dict[str, Any]:
    """Return the normalized copy of `doc`. The input is not mutated."""

    version = resolve_version(openapi_version, doc)
    return _Cleanup(version, registry if registry is not None else default_registry).run(doc)


def parent_schema_id(component: Any) -> str | None:
    """Public id recorded on a DTO component's properties, if it is one."""

    if not isinstance(component, dict):
        return None
    properties = component.get("properties")
    if not isinstance(properties, dict):
        return None
    for prop in properties.values():
        if isinstance(prop, dict) and isinstance(prop.get(PARENT_ID_KEY), str):
            return prop[PARENT_ID_KEY]
    return None


def _ref_id(ref: str) -> str | None:
    for prefix in (DEFS_REF_PREFIX, COMPONENTS_REF_PREFIX):
        if ref.startswith(prefix):
            return ref[len(prefix):]
    return None


class _Cleanup:
    def __init__(self, version: str, registry: SchemaRegistry) -> None:
        self.version = version
        self.registry = registry
        self.rename: dict[str, str] = {}
        self.found: set[str] = set()
        self.schemas: dict[str, JsonSchema] = {}

    def run(self, doc: dict[str, Any]) -> dict[str, Any]:
        components = doc.get("components") or {}
        source = components.get("schemas") or {}

        # Stage 1: public ids first, so that refs between DTOs resolve
        # regardless of component order.
        dto_ids = {key: pid for key, s in source.items() if (pid := parent_schema_id(s)) is not None}
        self.rename = {key: pid for key, pid in dto_ids.items() if pid != key}
        for key, public in self.rename.items():
            logger.debug("cleanup renames component %s -> %s", key, public)

        for key, component in source.items():
            if key in dto_ids:
                public = dto_ids[key]
                self._claim(public, self._normalize_component(component, public, renamed=public != key))
            else:
                self._claim(key, copy.deepcopy(component))

        # Stage 3 runs before the registry pass: parameters may reference
        # definitions no component mentions.
        paths = {path: self._rewrite_path_item(item) for path, item in (doc.get("paths") or {}).items()}

        pulled = self._pull_definitions()

        logger.info(
            "cleaned OpenAPI document (openapi=%s): %d schemas, %d renamed, %d pulled from registry",
            self.version,
            len(self.schemas),
            len(self.rename),
            pulled,
        )

        out = dict(doc)
        out["paths"] = paths
        if self.schemas or "components" in doc:
            out["components"] = {**components, "schemas": self.schemas}
        return out

    # ---- Stage 1 ----

    def _normalize_component(self, component: JsonSchema, public: str, *, renamed: bool) -> JsonSchema:
        properties = component["properties"]
        if UNWRAP_ROOT_KEY in properties:
            normalized = self._resolve(strip_record_flags(properties[UNWRAP_ROOT_KEY]))
        else:
            normalized = self._resolve(component)
        if renamed:
            normalized["id"] = public
        return normalized

    def _resolve(self, schema: JsonSchema) -> JsonSchema:
        """Replace markers and internal refs; record every referenced id."""

        resolved = walk_json_schema(schema, self._resolve_node, clone=True)
        return apply_dialect(resolved, self.version)

    def _resolve_node(self, node: JsonSchema) -> JsonSchema:
        node.pop(PARENT_ID_KEY, None)
        if node.pop(EMPTY_TYPE_KEY, False) and node.get("type") == "":
            del node["type"]

        if REF_KEY in node:
            node["$ref"] = self._public_ref(node.pop(REF_KEY))
        elif isinstance(node.get("$ref"), str):
            node["$ref"] = self._public_ref(node["$ref"])

        has_null = node.pop(HAS_NULL_KEY, False)
        if ANY_OF_KEY in node:
            branches = list(node.pop(ANY_OF_KEY))
            if has_null:
                branches.append({"type": "null"})
            node["anyOf"] = branches
        if ALL_OF_KEY in node:
            node["allOf"] = node.pop(ALL_OF_KEY)
        if CONST_KEY in node:
            node["const"] = node.pop(CONST_KEY)

        discriminator = node.get("discriminator")
        if isinstance(discriminator, dict) and isinstance(discriminator.get("mapping"), dict):
            discriminator["mapping"] = {
                tag: self._public_ref(ref) if isinstance(ref, str) else ref
                for tag, ref in discriminator["mapping"].items()
            }
        return node

    def _public_ref(self, ref: str) -> str:
        schema_id = _ref_id(ref)
        if schema_id is None:
            return ref
        public = self.rename.get(schema_id, schema_id)
        self.found.add(public)
        return f"{COMPONENTS_REF_PREFIX}{public}"

    def _claim(self, public: str, schema: JsonSchema) -> None:
        existing = self.schemas.get(public)
        if existing is not None and existing != schema:
            raise SchemaCollisionError(public)
        self.schemas[public] = schema

    # ---- Stage 2 ----

    def _pull_definitions(self) -> int:
        pending = set(self.found)
        processed: set[str] = set()
        pulled = 0
        while pending:
            schema_id = pending.pop()
            processed.add(schema_id)

            claims = self.registry.claims(schema_id)
            if not claims:
                if schema_id not in self.schemas:
                    raise MissingDefinitionError(schema_id)
                continue

            normalized = [self._resolve(markerize(claim)) for claim in claims]
            first = normalized[0]
            if any(other != first for other in normalized[1:]):
                raise SchemaCollisionError(schema_id)
            if schema_id not in self.schemas:
                logger.debug("cleanup pulls definition %s from the registry", schema_id)
                pulled += 1
            self._claim(schema_id, first)

            pending |= self.found - processed
        return pulled

    # ---- Stage 3 ----

    def _rewrite_path_item(self, item: Any) -> Any:
        if not isinstance(item, dict):
            return item
        out = dict(item)
        for method, operation in item.items():
            if method in HTTP_METHODS and isinstance(operation, dict):
                out[method] = self._rewrite_operation(operation)
        return out

    def _rewrite_operation(self, operation: dict[str, Any]) -> dict[str, Any]:
        operation = copy.deepcopy(operation)

        body = operation.get("requestBody")
        if isinstance(body, dict):
            for media in (body.get("content") or {}).values():
                self._rewrite_media(media)

        for response in (operation.get("responses") or {}).values():
            if isinstance(response, dict):
                for media in (response.get("content") or {}).values():
                    self._rewrite_media(media)

        parameters = operation.get("parameters")
        if isinstance(parameters, list):
            operation["parameters"] = [self._normalize_parameter(p) for p in parameters]
        return operation

    def _rewrite_media(self, media: Any) -> None:
        if not isinstance(media, dict) or not isinstance(media.get("schema"), dict):
            return
        schema = media["schema"]
        target = schema
        if schema.get("type") == "array" and isinstance(schema.get("items"), dict):
            target = schema["items"]
        ref = target.get("$ref")
        if isinstance(ref, str) and _ref_id(ref) is not None:
            target["$ref"] = self._public_ref(ref)

    def _normalize_parameter(self, parameter: Any) -> Any:
        if not isinstance(parameter, dict):
            return parameter
        schema = parameter.get("schema")
        if not isinstance(schema, dict) or PARENT_ID_KEY not in schema:
            return parameter

        parent = schema[PARENT_ID_KEY]
        if parameter.get("name") == UNWRAP_ROOT_KEY:
            raise UnsupportedShapeError(
                f"[cleanup_openapi_doc] Query and path parameter DTOs must be of object type; `{parent}` is not"
            )

        resolved = self._resolve(schema)
        if self._reaches_cycle(_refs_of(resolved), parent):
            raise UnsupportedShapeError(
                f"[cleanup_openapi_doc] Recursive schemas are not supported for parameters (`{parent}`)"
            )
        return {**parameter, "schema": resolved}

    def _lookup(self, schema_id: str) -> JsonSchema | None:
        if schema_id in self.schemas:
            return self.schemas[schema_id]
        claims = self.registry.claims(schema_id)
        return claims[0] if claims else None

    def _reaches_cycle(self, start: set[str], parent: str) -> bool:
        """True if following refs from `start` reaches `parent` or a cycle."""

        done: set[str] = set()

        def visit(schema_id: str, path: set[str]) -> bool:
            if schema_id == parent or schema_id in path:
                return True
            if schema_id in done:
                return False
            definition = self._lookup(schema_id)
            if definition is not None:
                path.add(schema_id)
                try:
                    refs = {self.rename.get(r, r) for r in _refs_of(definition)}
                    if any(visit(r, path) for r in refs):
                        return True
                finally:
                    path.discard(schema_id)
            done.add(schema_id)
            return False

        return any(visit(s, set()) for s in start)


def _refs_of(schema: JsonSchema) -> set[str]:
    found: set[str] = set()

    def collect(node: JsonSchema) -> JsonSchema:
        for key in ("$ref", REF_KEY):
            ref = node.get(key)
            if isinstance(ref, str) and (schema_id := _ref_id(ref)) is not None:
                found.add(schema_id)
        return node

    walk_json_schema(schema, collect, clone=True)
    return found
