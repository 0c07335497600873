from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# src/fastapi_dto_demo/services/env.py -> repo root
_REPO_ROOT = Path(__file__).resolve().parents[3]

ENV_FILES = (".env", ".env.local")


def load_env(root: Path | None = None) -> list[Path]:
    """Load `.env` then `.env.local` from `root` (the repo root by default).

    Existing environment variables are never overridden, so the
    `FASTAPI_DTO_*` settings can always be forced from the shell. Returns the
    files that were found.
    """

    base = root if root is not None else _REPO_ROOT
    loaded = []
    for name in ENV_FILES:
        path = base / name
        if load_dotenv(dotenv_path=path, override=False):
            loaded.append(path)
    if loaded:
        logger.debug("loaded env files: %s", ", ".join(str(p) for p in loaded))
    return loaded
