"""Environment-driven defaults.

Controlled by env vars:
- FASTAPI_DTO_OPENAPI_VERSION=3.0.3|3.1.0 (default 3.1.0), used by cleanup when
  neither an explicit version nor `doc["openapi"]` is available
- FASTAPI_DTO_STRICT_SCHEMA_DECLARATION=1 makes the default validation pipe
  reject parameters that are not bound to a schema
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Final


_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class Settings:
    openapi_version: str = "3.1.0"
    strict_schema_declaration: bool = False


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in _TRUTHY


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    version = os.getenv("FASTAPI_DTO_OPENAPI_VERSION", "").strip() or "3.1.0"
    return Settings(
        openapi_version=version,
        strict_schema_declaration=_env_flag("FASTAPI_DTO_STRICT_SCHEMA_DECLARATION"),
    )
