"""Media generation endpoints for Reeltrack.

Routes:
    POST /api/media/generate-image - Generate an image and return its URL
    POST /api/media/generate-video - Animate an image and return the video URL
    GET /api/media/job-status/{job_id} - One-off status check of a provider job

Generation requests may name a ``projectId``. The project is looked up
before anything is submitted, and once the job has completed the URL and
the matching milestone flag are written in a single store update, so a
project never shows the flag without the URL or the other way round.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi import status as http_status
from pydantic import Field

from reeltrack.generation.errors import (
    GenerationTimeoutError,
    MediaGenerationError,
    MissingCredentialsError,
    ProviderRejectedError,
)
from reeltrack.generation.higgsfield import (
    AspectRatio,
    HiggsfieldClient,
    ImageGenerationRequest,
    Resolution,
    VideoGenerationRequest,
    VideoModel,
)
from reeltrack.generation.polling import MediaKind, MediaResult
from reeltrack.logging import bind_project_context, get_logger
from reeltrack.models import CamelModel
from reeltrack.store.base import ProjectNotFoundError, ProjectStore
from reeltrack.web.dependencies import get_media_client, get_store

logger = get_logger(__name__)

ERROR_STATUS: dict[type[MediaGenerationError], int] = {
    MissingCredentialsError: http_status.HTTP_500_INTERNAL_SERVER_ERROR,
    ProviderRejectedError: 422,
    GenerationTimeoutError: http_status.HTTP_504_GATEWAY_TIMEOUT,
}

# URL column and milestone flag written together when a job completes
PROJECT_FIELDS: dict[MediaKind, tuple[str, str]] = {
    MediaKind.image: ("image_url", "image_generated"),
    MediaKind.video: ("video_url", "video_generated"),
}


class GenerateImageBody(CamelModel):
    """Request body for image generation."""

    prompt: str = Field(..., min_length=1)
    aspect_ratio: AspectRatio = "4:3"
    resolution: Resolution = "720p"
    batch_size: int = Field(default=1, ge=1, le=4)
    enhance_prompt: bool = True
    style_strength: float = Field(default=1.0, ge=0.0, le=1.0)
    project_id: int | None = None


class GenerateVideoBody(CamelModel):
    """Request body for image-to-video generation."""

    image_url: str = Field(..., min_length=1)
    prompt: str | None = None
    model: VideoModel = "dop-turbo"
    project_id: int | None = None


class JobStatusResponse(CamelModel):
    """Best-effort snapshot of a provider job."""

    job_id: str
    status: str
    url: str | None = None
    message: str | None = None


def media_error_response(action: str, exc: MediaGenerationError) -> HTTPException:
    """Translate a media-generation error into an HTTPException."""
    status_code = http_status.HTTP_502_BAD_GATEWAY
    for error_type, mapped in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            status_code = mapped
            break
    return HTTPException(
        status_code=status_code,
        detail={"error": f"Failed to {action}", "message": str(exc), "code": exc.code},
    )


async def _require_project(store: ProjectStore, project_id: int | None) -> None:
    if project_id is None:
        return
    bind_project_context(project_id)
    if await store.get_project(project_id) is None:
        logger.warning("project_not_found", project_id=project_id)
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail="Project not found",
        )


async def _record_result(
    store: ProjectStore,
    project_id: int | None,
    kind: MediaKind,
    result: MediaResult,
) -> None:
    if project_id is None:
        return
    url_field, flag_field = PROJECT_FIELDS[kind]
    changes = {url_field: result.url, flag_field: True}
    try:
        await store.update_project(project_id, changes)
    except ProjectNotFoundError as exc:
        # Deleted while the job was running; the asset URL is still returned
        logger.warning("project_deleted_during_generation", project_id=project_id, kind=kind.value)
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail={"error": "Project not found", "url": result.url},
        ) from exc


def create_media_router() -> APIRouter:
    """Create router for Higgsfield-backed media generation."""
    router = APIRouter(prefix="/api/media", tags=["media"])

    @router.post("/generate-image", response_model=MediaResult)
    async def generate_image(
        body: GenerateImageBody,
        client: HiggsfieldClient = Depends(get_media_client),  # noqa: B008
        store: ProjectStore = Depends(get_store),  # noqa: B008
    ) -> MediaResult:
        """Generate an image from a prompt.

        Raises:
            HTTPException: 404 if projectId names a missing project,
                422 on content-policy rejection, 504 on polling timeout,
                500/502 on configuration or provider failures
        """
        await _require_project(store, body.project_id)
        request = ImageGenerationRequest(
            prompt=body.prompt,
            aspect_ratio=body.aspect_ratio,
            resolution=body.resolution,
            batch_size=body.batch_size,
            enhance_prompt=body.enhance_prompt,
            style_strength=body.style_strength,
        )
        try:
            result = await client.generate_image(request)
        except MediaGenerationError as exc:
            logger.error("image_generation_failed", error=str(exc), code=exc.code)
            raise media_error_response("generate image", exc) from exc

        await _record_result(store, body.project_id, MediaKind.image, result)
        return result

    @router.post("/generate-video", response_model=MediaResult)
    async def generate_video(
        body: GenerateVideoBody,
        client: HiggsfieldClient = Depends(get_media_client),  # noqa: B008
        store: ProjectStore = Depends(get_store),  # noqa: B008
    ) -> MediaResult:
        """Animate an image into a short video.

        Raises:
            HTTPException: same mapping as generate-image
        """
        await _require_project(store, body.project_id)
        options: dict[str, str] = {"image_url": body.image_url, "model": body.model}
        if body.prompt:
            options["prompt"] = body.prompt
        request = VideoGenerationRequest(**options)
        try:
            result = await client.generate_video(request)
        except MediaGenerationError as exc:
            logger.error("video_generation_failed", error=str(exc), code=exc.code)
            raise media_error_response("generate video", exc) from exc

        await _record_result(store, body.project_id, MediaKind.video, result)
        return result

    @router.get("/job-status/{job_id}", response_model=JobStatusResponse)
    async def job_status(
        job_id: str,
        client: HiggsfieldClient = Depends(get_media_client),  # noqa: B008
    ) -> JobStatusResponse:
        """Check a provider job once without waiting for it."""
        try:
            snapshot = await client.get_job_status(job_id)
        except MediaGenerationError as exc:
            logger.error("job_status_failed", job_id=job_id, error=str(exc), code=exc.code)
            raise media_error_response("check job status", exc) from exc

        return JobStatusResponse(
            job_id=job_id,
            status=snapshot.raw_status or snapshot.status.value,
            url=snapshot.url,
            message=snapshot.message,
        )

    return router
