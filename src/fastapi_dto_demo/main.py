"""Demo app: every fastapi-dto surface wired into one FastAPI application.

    uvicorn fastapi_dto_demo.main:app --reload
"""

from __future__ import annotations

from fastapi import APIRouter, FastAPI

from fastapi_dto import install_openapi
from fastapi_dto.settings import get_settings

from .api.books import router as books_router
from .api.people import router as people_router
from .logging_config import configure_logging
from .services.env import load_env


def _build_router() -> APIRouter:
    root = APIRouter()

    @root.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "openapi": get_settings().openapi_version}

    root.include_router(books_router)
    root.include_router(people_router)
    return root


def create_app() -> FastAPI:
    app = FastAPI(title="fastapi-dto demo", version="0.1.0")
    app.include_router(_build_router())
    # The document is built on first request, after every router is mounted.
    install_openapi(app, openapi_version=get_settings().openapi_version)
    return app


# Env files first: settings are read once, on first use.
load_env()
configure_logging()

app = create_app()
