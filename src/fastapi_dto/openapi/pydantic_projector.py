"""JSON Schema generation for pydantic-backed DTOs.

pydantic names nested models by their definition key (the class name, or a
module-qualified name when two classes share one). A model can pick its own
public id through `json_schema_extra={"id": ...}` (see `schema_id()`).

For the output variant every public id gets the `_Output` suffix, so the input
and output shapes of the same model never claim the same component.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from pydantic import ConfigDict, TypeAdapter

from ..const import DEFS_REF_PREFIX, OUTPUT_SUFFIX
from ..exceptions import SchemaCollisionError
from ..schemas import IO, Projection
from .walker import walk_json_schema

logger = logging.getLogger(__name__)

JsonSchema = dict[str, Any]


def schema_id(public_id: str, **config: Any) -> ConfigDict:
    """Model config naming a pydantic model in the generated document.

        class Book(BaseModel):
            model_config = schema_id("Book")
    """

    extra = dict(config.pop("json_schema_extra", None) or {})
    extra["id"] = public_id
    return ConfigDict(json_schema_extra=extra, **config)


def project_pydantic(adapter: TypeAdapter[Any], *, io: IO, name: str) -> Projection:
    mode = "serialization" if io == "output" else "validation"
    raw = adapter.json_schema(mode=mode, ref_template=DEFS_REF_PREFIX + "{model}")
    raw = copy.deepcopy(raw)
    defs: dict[str, JsonSchema] = raw.pop("$defs", {})

    root_key = _root_ref_key(raw, defs)
    root = defs.pop(root_key) if root_key is not None else raw
    suffix = OUTPUT_SUFFIX if io == "output" else ""

    explicit = root.get("id") if isinstance(root.get("id"), str) else None
    root_public = f"{explicit}{suffix}" if explicit else name

    public: dict[str, str] = {}
    for key, definition in defs.items():
        own = definition.get("id") if isinstance(definition.get("id"), str) else None
        public[key] = f"{own or key}{suffix}"

    if root_key is not None:
        public[root_key] = root_public
        if not explicit:
            # Anonymous recursive root: definitions that point back at it are
            # only meaningful under this root, so namespace them by its name.
            for key in _keys_reaching(root_key, defs):
                if not _has_explicit_id(defs[key]):
                    public[key] = f"{root_public}__{public[key]}"

    def renamed(ref: Any) -> Any:
        if not isinstance(ref, str) or not ref.startswith(DEFS_REF_PREFIX):
            return ref
        key = ref[len(DEFS_REF_PREFIX):]
        return f"{DEFS_REF_PREFIX}{public.get(key, key)}"

    def rewrite(node: JsonSchema) -> JsonSchema:
        node.pop("title", None)
        if "$ref" in node:
            node["$ref"] = renamed(node["$ref"])
        discriminator = node.get("discriminator")
        if isinstance(discriminator, dict) and isinstance(discriminator.get("mapping"), dict):
            discriminator["mapping"] = {
                tag: renamed(ref) for tag, ref in discriminator["mapping"].items()
            }
        return node

    root = walk_json_schema(root, rewrite)
    if explicit:
        root["id"] = root_public

    out_defs: dict[str, JsonSchema] = {}
    for key, definition in defs.items():
        definition = walk_json_schema(definition, rewrite)
        if _has_explicit_id(definition):
            definition["id"] = public[key]
        target = public[key]
        if target in out_defs and out_defs[target] != definition:
            raise SchemaCollisionError(target)
        out_defs[target] = definition

    logger.debug(
        "projected %s (%s): root=%s defs=%s", name, io, root_public, sorted(out_defs)
    )
    return Projection(schema=root, defs=out_defs, schema_id=root_public)


def _has_explicit_id(definition: JsonSchema) -> bool:
    return isinstance(definition.get("id"), str)


def _root_ref_key(raw: JsonSchema, defs: dict[str, JsonSchema]) -> str | None:
    """Return the definition key when the root is only a reference to it.

    A root emitted inline that also appears verbatim among the definitions
    (recursive model) is treated the same way.
    """

    for key, definition in defs.items():
        if definition == raw:
            return key

    ref = raw.get("$ref")
    if ref is None:
        all_of = raw.get("allOf")
        if isinstance(all_of, list) and len(all_of) == 1 and set(raw) == {"allOf"}:
            ref = all_of[0].get("$ref")
    elif set(raw) != {"$ref"}:
        return None
    if not isinstance(ref, str) or not ref.startswith(DEFS_REF_PREFIX):
        return None
    key = ref[len(DEFS_REF_PREFIX):]
    return key if key in defs else None


def _refs_in(schema: JsonSchema) -> set[str]:
    found: set[str] = set()

    def collect(node: JsonSchema) -> JsonSchema:
        ref = node.get("$ref")
        if isinstance(ref, str) and ref.startswith(DEFS_REF_PREFIX):
            found.add(ref[len(DEFS_REF_PREFIX):])
        return node

    walk_json_schema(schema, collect, clone=True)
    return found


def _keys_reaching(target: str, defs: dict[str, JsonSchema]) -> set[str]:
    """Definition keys (other than `target`) that transitively reference `target`."""

    edges = {key: _refs_in(definition) for key, definition in defs.items()}
    reaching: set[str] = set()
    changed = True
    while changed:
        changed = False
        for key, refs in edges.items():
            if key == target or key in reaching:
                continue
            if target in refs or refs & reaching:
                reaching.add(key)
                changed = True
    return reaching
