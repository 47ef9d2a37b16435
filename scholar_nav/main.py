"""FastAPI application factory with lifespan events."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scholar_nav.api.dependencies import set_session_service
from scholar_nav.api.router import api_router
from scholar_nav.config import get_settings
from scholar_nav.services.cache_service import CacheService
from scholar_nav.services.semantic_scholar import SemanticScholarClient
from scholar_nav.services.session_service import SessionService
from scholar_nav.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    cache: CacheService | None = None
    if settings.REDIS_URL:
        cache = CacheService(settings.REDIS_URL, default_ttl=settings.CACHE_TTL_SECONDS)
        logger.info("s2_cache_enabled")

    scholar = SemanticScholarClient(settings, cache=cache)
    provider_http = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
    set_session_service(SessionService(settings, scholar, http_client=provider_http))

    logger.info(
        "app_started",
        providers=[p.name for p in settings.configured_providers()],
    )
    yield

    # Shutdown
    set_session_service(None)
    await provider_http.aclose()
    await scholar.close()
    if cache is not None:
        await cache.close()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    application = FastAPI(
        title="Scholar Navigator",
        description="Conversational research navigator with an expandable citation graph",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(api_router)

    @application.middleware("http")
    async def request_id_middleware(request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "type": type(exc).__name__},
        )

    return application


app = create_app()
