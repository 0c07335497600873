"""Marker keys shared by the projectors and the cleanup engine.

Every marker lives under a single reserved prefix. A cleaned document must not
contain the prefix anywhere.
"""

from __future__ import annotations

from typing import Final


PREFIX: Final[str] = "x-fastapi-dto"

REF_KEY: Final[str] = f"{PREFIX}-ref"
ANY_OF_KEY: Final[str] = f"{PREFIX}-anyOf"
ALL_OF_KEY: Final[str] = f"{PREFIX}-allOf"
CONST_KEY: Final[str] = f"{PREFIX}-const"
EMPTY_TYPE_KEY: Final[str] = f"{PREFIX}-empty-type"
PARENT_ID_KEY: Final[str] = f"{PREFIX}-parent-schema-id"
UNWRAP_ROOT_KEY: Final[str] = f"{PREFIX}-unwrap-root"
HAS_NULL_KEY: Final[str] = f"{PREFIX}-has-null"

DEFS_REF_PREFIX: Final[str] = "#/$defs/"
COMPONENTS_REF_PREFIX: Final[str] = "#/components/schemas/"

OUTPUT_SUFFIX: Final[str] = "_Output"
