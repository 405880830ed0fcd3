"""Health check endpoints for Reeltrack.

This module provides:
- A liveness probe (/health/)
- A readiness probe (/health/ready) that checks the project store and
  reports whether the chat model and media provider are configured

Example:
    >>> from fastapi import FastAPI
    >>> from reeltrack.web.routes.health import create_health_router
    >>>
    >>> app = FastAPI()
    >>> app.include_router(create_health_router())
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from reeltrack.generation.higgsfield import HiggsfieldClient
from reeltrack.generation.script import ScriptGenerator
from reeltrack.logging import get_logger
from reeltrack.store.base import ProjectStore
from reeltrack.web.dependencies import get_media_client, get_script_generator, get_store

logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response model.

    Attributes:
        status: Current health status ("ok")
    """

    status: str


class ReadinessResponse(BaseModel):
    """Readiness check response model.

    Attributes:
        status: "ok" when the store is reachable, "unhealthy" otherwise
        store: "connected" or "disconnected"
        llm: "configured" or "fallback"/"unconfigured"
        media: "configured" or "unconfigured"
    """

    status: str
    store: str
    llm: str
    media: str


def create_health_router() -> APIRouter:
    """Create health check router.

    Routes:
        GET /health/ - Basic liveness check
        GET /health/ready - Readiness check with store verification
    """
    router = APIRouter(prefix="/health", tags=["health"])

    @router.get("/", response_model=HealthResponse)
    async def health() -> dict[str, Any]:
        return {"status": "ok"}

    @router.get("/ready", response_model=ReadinessResponse)
    async def readiness(
        store: ProjectStore = Depends(get_store),  # noqa: B008
        generator: ScriptGenerator = Depends(get_script_generator),  # noqa: B008
        media_client: HiggsfieldClient = Depends(get_media_client),  # noqa: B008
    ) -> dict[str, Any]:
        """Readiness check.

        Missing LLM or media credentials do not make the service unhealthy;
        projects can still be tracked by hand.
        """
        store_ok = await store.healthy()
        if store_ok:
            logger.debug("readiness_check_passed", store="connected")
        else:
            logger.warning("readiness_check_failed", store="disconnected")

        return {
            "status": "ok" if store_ok else "unhealthy",
            "store": "connected" if store_ok else "disconnected",
            "llm": "configured" if generator.available else "unconfigured",
            "media": "configured" if media_client.configured else "unconfigured",
        }

    return router
