"""FastAPI application factory for Reeltrack.

This module provides the main application factory function that creates
and configures a FastAPI application with:
- CORS middleware for the browser client
- Request logging middleware with correlation IDs
- Project store, chat client and Higgsfield client lifecycle management
- A uniform JSON error body and 400 responses for validation errors
- Static serving of uploaded hook clips under /uploads

Example usage:
    >>> from reeltrack.config import ReeltrackConfig
    >>> from reeltrack.web.app import create_app
    >>>
    >>> app = create_app(ReeltrackConfig())
    >>>
    >>> import uvicorn
    >>> uvicorn.run(app, host="0.0.0.0", port=5000)
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi import status as http_status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from reeltrack import __version__
from reeltrack.config import ReeltrackConfig
from reeltrack.generation.fallback import CannedScriptWriter, ScriptFallback
from reeltrack.generation.higgsfield import HiggsfieldClient
from reeltrack.generation.llm_client import ChatCompletionClient
from reeltrack.generation.script import ScriptGenerator
from reeltrack.logging import get_logger
from reeltrack.store import ProjectStore, build_store
from reeltrack.web.middleware import RequestLoggingMiddleware
from reeltrack.web.routes.health import create_health_router
from reeltrack.web.routes.media import create_media_router
from reeltrack.web.routes.projects import create_projects_router
from reeltrack.web.routes.scripts import create_scripts_router

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialise the project store on startup; close clients on shutdown."""
    config: ReeltrackConfig = app.state.config
    store: ProjectStore = app.state.store

    logger.info("app_startup_begin", host=config.web.host, port=config.web.port)
    await store.initialize()
    logger.info("store_initialized", backend=config.storage.backend)
    config.web.uploads_dir.mkdir(parents=True, exist_ok=True)

    yield

    logger.info("app_shutdown_begin")
    await app.state.media_client.close()
    await app.state.script_generator.close()
    await store.close()
    logger.info("app_shutdown_complete")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as ``{"error": ...}`` (dict details pass through)."""
    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request validation failures as 400 with field-level detail."""
    logger.warning(
        "request_validation_failed",
        path=request.url.path,
        error_count=len(exc.errors()),
    )
    return JSONResponse(
        status_code=http_status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "detail": jsonable_encoder(exc.errors())},
    )


def create_app(
    config: ReeltrackConfig | None = None,
    *,
    store: ProjectStore | None = None,
    script_generator: ScriptGenerator | None = None,
    script_fallback: ScriptFallback | None = None,
    media_client: HiggsfieldClient | None = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Services are built from the configuration unless passed in explicitly.
    They are stored on ``app.state`` and resolved by the route dependencies.

    Args:
        config: Optional ReeltrackConfig. If None, creates default config.
        store: Project store to use instead of ``build_store(config.storage)``
        script_generator: Script generator to use instead of one built from config.llm
        script_fallback: Fallback to use; defaults to CannedScriptWriter when
            config.llm.fallback_enabled is set
        media_client: Higgsfield client to use instead of one built from config.higgsfield

    Returns:
        Configured FastAPI application instance.
    """
    if config is None:
        config = ReeltrackConfig()

    app = FastAPI(
        title="Reeltrack",
        version=__version__,
        description="Project tracking for short-form video production",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.store = store if store is not None else build_store(config.storage)
    app.state.script_generator = (
        script_generator
        if script_generator is not None
        else ScriptGenerator(
            ChatCompletionClient(config.llm),
            enhance_temperature=config.llm.enhance_temperature,
        )
    )
    if script_fallback is None and config.llm.fallback_enabled:
        script_fallback = CannedScriptWriter()
    app.state.script_fallback = script_fallback
    app.state.media_client = (
        media_client if media_client is not None else HiggsfieldClient(config.higgsfield)
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.web.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]

    app.include_router(create_health_router())
    app.include_router(create_projects_router())
    app.include_router(create_scripts_router())
    app.include_router(create_media_router())
    # hook clips; the directory is created at startup or by the first upload
    app.mount(
        "/uploads",
        StaticFiles(directory=config.web.uploads_dir, check_dir=False),
        name="uploads",
    )

    logger.info(
        "app_created",
        cors_origins=config.web.cors_origins,
        store_backend=config.storage.backend,
        script_fallback=script_fallback is not None,
        version=__version__,
    )

    return app
