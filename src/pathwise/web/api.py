"""FastAPI application factory.

Main entry point for the PathWise Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pathwise.config.app_config import load_app_config
from pathwise.core.errors import ErrorCategory, PathwiseError, RequestTimeoutError
from pathwise.db.database import init_db
from pathwise.llm.client import LLMConfigError, LLMError, LLMTimeoutError
from pathwise.store.client import StoreConfigError
from pathwise.web.routes import (
    admin_router,
    auth_router,
    dashboard_router,
    health_router,
    lessons_router,
    onboarding_router,
    profile_router,
    roadmap_router,
)

logger = structlog.get_logger(__name__)

_STATUS_BY_CATEGORY = {
    ErrorCategory.INVALID_CREDENTIALS: 401,
    ErrorCategory.FORBIDDEN: 403,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.RATE_LIMIT: 429,
    ErrorCategory.MALFORMED_AI_OUTPUT: 502,
    ErrorCategory.SERVICE_UNAVAILABLE: 503,
    ErrorCategory.NETWORK: 503,
    ErrorCategory.GENERIC: 400,
}


def status_for_error(error: PathwiseError) -> int:
    """HTTP status for a domain error."""
    if isinstance(error, (StoreConfigError, LLMConfigError)):
        return 503
    if isinstance(error, (RequestTimeoutError, LLMTimeoutError)):
        return 504
    if getattr(error, "code", None) == "timeout":
        return 504
    # A rejected AI key is a server problem, not the caller's session
    if isinstance(error, LLMError) and error.category == ErrorCategory.INVALID_CREDENTIALS:
        return 502
    return _STATUS_BY_CATEGORY.get(error.category, 400)


async def pathwise_error_handler(request: Request, exc: PathwiseError) -> JSONResponse:
    status_code = status_for_error(exc)
    logger.warning(
        "api_error",
        path=request.url.path,
        status=status_code,
        category=exc.category.value,
        error=exc.message,
    )
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    config = load_app_config()
    init_db(config.cache_db_path)
    logger.info(
        "api_startup",
        model=config.llm.model,
        cache_db=str(config.cache_db_path),
        store_configured=bool(config.store.get_url()),
    )
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="PathWise API",
        description="Web API for PathWise learning roadmaps",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PathwiseError, pathwise_error_handler)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(profile_router)
    app.include_router(onboarding_router)
    app.include_router(roadmap_router)
    app.include_router(lessons_router)
    app.include_router(dashboard_router)
    app.include_router(admin_router)

    return app


# Default app instance for uvicorn
app = create_app()
