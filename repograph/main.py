"""FastAPI application factory with lifespan events."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from repograph.api.dependencies import set_github, set_repo_service
from repograph.api.router import api_router
from repograph.config import get_settings
from repograph.services.cache_service import CacheService
from repograph.services.github_client import GitHubClient
from repograph.services.repo_service import RepoService
from repograph.utils.exceptions import (
    GitHubAPIError,
    InvalidRepositoryError,
    RateLimitError,
    RepoGraphError,
    RepositoryNotFoundError,
)
from repograph.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

# Most specific first.
_ERROR_STATUS: tuple[tuple[type[RepoGraphError], int], ...] = (
    (RepositoryNotFoundError, 404),
    (InvalidRepositoryError, 422),
    (RateLimitError, 429),
    (GitHubAPIError, 502),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    github = GitHubClient(settings)
    set_github(github)

    cache: CacheService | None = None
    if settings.REDIS_URL:
        cache = CacheService(settings.REDIS_URL, default_ttl=settings.CACHE_TTL_SECONDS)
        logger.info("redis_cache_enabled", ttl=settings.CACHE_TTL_SECONDS)
    else:
        logger.info("redis_cache_disabled")

    set_repo_service(RepoService(github, settings, cache=cache))

    logger.info("app_started", github_api=settings.GITHUB_API_URL, authenticated=bool(settings.GITHUB_TOKEN))
    yield

    # Shutdown
    set_repo_service(None)
    set_github(None)
    await github.close()
    if cache is not None:
        await cache.close()
    logger.info("app_stopped")


def _internal_error_response(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", error=str(exc), path=request.url.path)
    headers: dict[str, str] = {}
    request_id = structlog.contextvars.get_contextvars().get("request_id")
    if request_id:
        headers["X-Request-ID"] = request_id
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": type(exc).__name__},
        headers=headers,
    )


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    application = FastAPI(
        title="repograph",
        description="GitHub commit history as a renderable lineage graph",
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
        try:
            response = await call_next(request)
        except Exception as exc:
            response = _internal_error_response(request, exc)
        response.headers["X-Request-ID"] = request_id
        return response

    @application.exception_handler(RepoGraphError)
    async def repograph_error_handler(request: Request, exc: RepoGraphError) -> JSONResponse:
        status_code = next((code for cls, code in _ERROR_STATUS if isinstance(exc, cls)), 500)
        headers: dict[str, str] = {}
        if isinstance(exc, RateLimitError) and exc.reset_at is not None:
            headers["X-RateLimit-Reset"] = str(int(exc.reset_at.timestamp()))
        logger.warning(
            "request_failed",
            error=str(exc),
            error_type=type(exc).__name__,
            status=status_code,
            path=request.url.path,
        )
        return JSONResponse(status_code=status_code, content={"detail": str(exc)}, headers=headers)

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        return _internal_error_response(request, exc)

    return application


app = create_app()
