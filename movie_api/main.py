# movie_api/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from movie_api.core.errors import register_exception_handlers
from movie_api.core.logging import setup_logging
from movie_api.core.settings import Settings, get_settings
from movie_api.db.session import get_engine
from movie_api.routes import favorites, health, movies, reviews, users

log = logging.getLogger("startup")

API_PREFIX = "/api/v1"


def check_settings(settings: Settings) -> None:
    missing = settings.missing_required()
    if missing:
        log.error("Missing required configuration: %s", ", ".join(missing))
        raise SystemExit(1)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    check_settings(get_settings())
    log.info("Starting movie catalog API")
    yield
    log.info("Shutting down movie catalog API")
    await get_engine().dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Movie Catalog API",
        version="1.0.0",
        openapi_url=f"{API_PREFIX}/openapi.json",
        docs_url=f"{API_PREFIX}/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    # Cookies carry the session, so credentials must be allowed and origins explicit
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    api = APIRouter(prefix=API_PREFIX)
    api.include_router(health.router)
    api.include_router(users.router)
    api.include_router(movies.router)
    api.include_router(favorites.router)
    api.include_router(reviews.router)
    app.include_router(api)

    return app


app = create_app()
