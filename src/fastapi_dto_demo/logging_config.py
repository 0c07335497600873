from __future__ import annotations

import logging
import os
from typing import Final


_FORMAT: Final[str] = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _level_from_env(name: str, default: str) -> int:
    value = os.getenv(name, default).strip().upper() or default
    return getattr(logging, value, logging.INFO)


def configure_logging() -> None:
    """Console logging for the demo app.

    Controlled by env vars:
    - LOG_LEVEL=DEBUG|INFO|WARNING|ERROR (default INFO), root level
    - FASTAPI_DTO_LOG_LEVEL (defaults to LOG_LEVEL), level of the `fastapi_dto`
      loggers; DEBUG shows every OpenAPI cleanup step

    uvicorn keeps its own logging config.
    """

    level = _level_from_env("LOG_LEVEL", "INFO")
    library_level = _level_from_env("FASTAPI_DTO_LOG_LEVEL", logging.getLevelName(level))

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=_FORMAT)
    else:
        root.setLevel(level)

    logging.getLogger("fastapi_dto").setLevel(library_level)
    if level >= logging.INFO:
        logging.getLogger("httpx").setLevel(logging.WARNING)
