"""Script and prompt generation endpoints for Reeltrack.

Routes:
    POST /api/generate-script - Script, title and prompts for a new project
    POST /api/enhance-prompt - More detailed image or video prompt

When no chat model is configured and a fallback is installed, both routes
answer with canned content instead of failing.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi import status as http_status
from pydantic import Field

from reeltrack.generation.fallback import ScriptFallback
from reeltrack.generation.script import (
    GenerationError,
    GeneratorUnavailableError,
    PromptKind,
    ScriptGenerator,
    ScriptRequest,
    ScriptResult,
)
from reeltrack.logging import get_logger
from reeltrack.models import CamelModel
from reeltrack.web.dependencies import get_script_fallback, get_script_generator

logger = get_logger(__name__)


class EnhancePromptRequest(CamelModel):
    """Request body for prompt enhancement."""

    prompt: str = Field(..., min_length=1)
    type: PromptKind = PromptKind.image


class EnhancePromptResponse(CamelModel):
    """Response body for prompt enhancement."""

    enhanced_prompt: str


def _generation_failed(error: str, exc: Exception) -> HTTPException:
    return HTTPException(
        status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": error, "message": str(exc)},
    )


def create_scripts_router() -> APIRouter:
    """Create router for script generation and prompt enhancement."""
    router = APIRouter(prefix="/api", tags=["generation"])

    @router.post("/generate-script", response_model=ScriptResult)
    async def generate_script(
        request: ScriptRequest,
        generator: ScriptGenerator = Depends(get_script_generator),  # noqa: B008
        fallback: ScriptFallback | None = Depends(get_script_fallback),  # noqa: B008
    ) -> ScriptResult:
        """Generate a script with title, image prompt and video prompt.

        Raises:
            HTTPException: 500 if generation fails
        """
        try:
            return await generator.generate(request)
        except GeneratorUnavailableError as exc:
            if fallback is None:
                logger.error("script_generator_unavailable", error=str(exc))
                raise _generation_failed("Failed to generate script", exc) from exc
            logger.info("script_fallback_used", purpose=request.purpose.value)
            return await fallback.generate(request)
        except GenerationError as exc:
            raise _generation_failed("Failed to generate script", exc) from exc

    @router.post("/enhance-prompt", response_model=EnhancePromptResponse)
    async def enhance_prompt(
        request: EnhancePromptRequest,
        generator: ScriptGenerator = Depends(get_script_generator),  # noqa: B008
        fallback: ScriptFallback | None = Depends(get_script_fallback),  # noqa: B008
    ) -> EnhancePromptResponse:
        """Rewrite a prompt with more visual detail.

        Raises:
            HTTPException: 500 if enhancement fails
        """
        try:
            enhanced = await generator.enhance_prompt(request.prompt, request.type)
        except GeneratorUnavailableError as exc:
            if fallback is None:
                logger.error("script_generator_unavailable", error=str(exc))
                raise _generation_failed("Failed to enhance prompt", exc) from exc
            logger.info("prompt_fallback_used", kind=request.type.value)
            enhanced = await fallback.enhance_prompt(request.prompt, request.type)
        except GenerationError as exc:
            raise _generation_failed("Failed to enhance prompt", exc) from exc

        return EnhancePromptResponse(enhanced_prompt=enhanced)

    return router
