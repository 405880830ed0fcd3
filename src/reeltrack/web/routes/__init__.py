"""FastAPI route definitions for the Reeltrack API.

This module contains route handlers for projects, script generation,
media generation and health checks.
"""

from __future__ import annotations

from reeltrack.web.routes.health import (
    HealthResponse,
    ReadinessResponse,
    create_health_router,
)
from reeltrack.web.routes.media import (
    GenerateImageBody,
    GenerateVideoBody,
    JobStatusResponse,
    create_media_router,
)
from reeltrack.web.routes.projects import create_projects_router
from reeltrack.web.routes.scripts import (
    EnhancePromptRequest,
    EnhancePromptResponse,
    create_scripts_router,
)

__all__ = [
    # Health
    "HealthResponse",
    "ReadinessResponse",
    "create_health_router",
    # Media
    "GenerateImageBody",
    "GenerateVideoBody",
    "JobStatusResponse",
    "create_media_router",
    # Projects
    "create_projects_router",
    # Scripts
    "EnhancePromptRequest",
    "EnhancePromptResponse",
    "create_scripts_router",
]
