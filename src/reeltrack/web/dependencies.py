"""FastAPI dependencies resolving shared services from app state."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from reeltrack.config import ReeltrackConfig
    from reeltrack.generation.fallback import ScriptFallback
    from reeltrack.generation.higgsfield import HiggsfieldClient
    from reeltrack.generation.script import ScriptGenerator
    from reeltrack.store.base import ProjectStore


def get_config(request: Request) -> ReeltrackConfig:
    """Application configuration from app.state."""
    return request.app.state.config  # type: ignore[no-any-return]


def get_store(request: Request) -> ProjectStore:
    """Project store from app.state."""
    return request.app.state.store  # type: ignore[no-any-return]


def get_script_generator(request: Request) -> ScriptGenerator:
    """Script generator from app.state."""
    return request.app.state.script_generator  # type: ignore[no-any-return]


def get_script_fallback(request: Request) -> ScriptFallback | None:
    """Canned-content fallback from app.state, None when disabled."""
    return request.app.state.script_fallback  # type: ignore[no-any-return]


def get_media_client(request: Request) -> HiggsfieldClient:
    """Higgsfield client from app.state."""
    return request.app.state.media_client  # type: ignore[no-any-return]
