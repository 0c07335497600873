"""Registry of named schema definitions emitted by the projectors.

Definitions are recorded as a side effect of generating DTO metadata and are
read back by the cleanup engine when it resolves transitive references.

Each key keeps every distinct claim made for it, so the cleanup engine can
report a naming collision instead of silently picking one of them.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Iterator


JsonSchema = dict[str, Any]


class SchemaRegistry:
    def __init__(self) -> None:
        self._claims: dict[str, list[JsonSchema]] = {}
        self._lock = threading.Lock()

    def register(self, schema_id: str, definition: JsonSchema) -> None:
        with self._lock:
            claims = self._claims.setdefault(schema_id, [])
            if any(c == definition for c in claims):
                return
            claims.append(copy.deepcopy(definition))

    def register_all(self, definitions: dict[str, JsonSchema]) -> None:
        for schema_id, definition in definitions.items():
            self.register(schema_id, definition)

    def claims(self, schema_id: str) -> list[JsonSchema]:
        return list(self._claims.get(schema_id, ()))

    def __contains__(self, schema_id: object) -> bool:
        return schema_id in self._claims

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._claims))

    def __len__(self) -> int:
        return len(self._claims)

    def clear(self) -> None:
        with self._lock:
            self._claims.clear()


default_registry = SchemaRegistry()
