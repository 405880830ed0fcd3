"""Project CRUD endpoints for Reeltrack.

This module provides REST API endpoints for managing video projects:
- List projects, newest first
- Get individual project by ID
- Create new projects
- Patch existing projects (partial update, including checklist toggles)
- Delete projects
- Upload an audio or video hook clip for a project

Example:
    >>> from fastapi import FastAPI
    >>> from reeltrack.web.routes.projects import create_projects_router
    >>>
    >>> app = FastAPI()
    >>> app.include_router(create_projects_router())
"""

from __future__ import annotations

import uuid
from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi import status as http_status

from reeltrack.config import ReeltrackConfig
from reeltrack.logging import get_logger
from reeltrack.models import Project, ProjectCreate, ProjectUpdate
from reeltrack.store.base import ProjectNotFoundError, ProjectStore
from reeltrack.web.dependencies import get_config, get_store

logger = get_logger(__name__)

HOOK_MIME_TYPES: frozenset[str] = frozenset(
    {
        "audio/mpeg",
        "audio/mp3",
        "audio/wav",
        "audio/ogg",
        "audio/webm",
        "video/mp4",
        "video/webm",
        "video/ogg",
        "video/quicktime",
    }
)

UPLOAD_CHUNK_BYTES = 1024 * 1024


class UploadTooLargeError(Exception):
    """Raised when an upload grows past the configured size cap."""


async def save_upload(upload: UploadFile, directory: Path, max_bytes: int) -> Path:
    """Stream an upload to a fresh ``hook-<hex><ext>`` file in ``directory``.

    The partial file is removed if the cap is exceeded or the write fails.

    Raises:
        UploadTooLargeError: If the upload is larger than ``max_bytes``
    """
    directory.mkdir(parents=True, exist_ok=True)
    suffix = Path(upload.filename or "").suffix
    target = directory / f"hook-{uuid.uuid4().hex}{suffix}"

    written = 0
    try:
        with target.open("wb") as out:
            while chunk := await upload.read(UPLOAD_CHUNK_BYTES):
                written += len(chunk)
                if written > max_bytes:
                    raise UploadTooLargeError(f"Upload exceeds {max_bytes} bytes")
                out.write(chunk)
    except BaseException:
        target.unlink(missing_ok=True)
        raise
    return target


def create_projects_router() -> APIRouter:
    """Create projects router with CRUD endpoints.

    Routes:
        GET /api/projects - List all projects, newest first
        GET /api/projects/{project_id} - Get project by ID
        POST /api/projects - Create new project
        PATCH /api/projects/{project_id} - Partially update project
        DELETE /api/projects/{project_id} - Delete project
        POST /api/projects/{project_id}/upload-hook - Upload a hook clip
    """
    router = APIRouter(prefix="/api/projects", tags=["projects"])

    @router.get("", response_model=list[Project])
    async def list_projects(
        store: ProjectStore = Depends(get_store),  # noqa: B008
    ) -> list[Project]:
        projects = await store.list_projects()
        logger.info("projects_listed", count=len(projects))
        return projects

    @router.get("/{project_id}", response_model=Project)
    async def get_project(
        project_id: int,
        store: ProjectStore = Depends(get_store),  # noqa: B008
    ) -> Project:
        """Get a project by ID.

        Raises:
            HTTPException: 404 if project not found
        """
        project = await store.get_project(project_id)
        if project is None:
            logger.warning("project_not_found", project_id=project_id)
            raise HTTPException(
                status_code=http_status.HTTP_404_NOT_FOUND,
                detail="Project not found",
            )
        return project

    @router.post("", response_model=Project, status_code=http_status.HTTP_201_CREATED)
    async def create_project(
        project_data: ProjectCreate,
        store: ProjectStore = Depends(get_store),  # noqa: B008
    ) -> Project:
        project = await store.create_project(project_data)
        logger.info("project_created_via_api", project_id=project.id)
        return project

    @router.patch("/{project_id}", response_model=Project)
    async def update_project(
        project_id: int,
        project_data: ProjectUpdate,
        store: ProjectStore = Depends(get_store),  # noqa: B008
    ) -> Project:
        """Patch a project.

        Only fields present in the request body are changed. An empty body
        returns the project unchanged.

        Raises:
            HTTPException: 404 if project not found
        """
        changes = project_data.changes()
        try:
            project = await store.update_project(project_id, changes)
        except ProjectNotFoundError as exc:
            logger.warning("project_not_found_for_update", project_id=project_id)
            raise HTTPException(
                status_code=http_status.HTTP_404_NOT_FOUND,
                detail="Project not found",
            ) from exc

        logger.info(
            "project_updated_via_api",
            project_id=project_id,
            fields_updated=sorted(changes),
        )
        return project

    @router.delete("/{project_id}", status_code=http_status.HTTP_204_NO_CONTENT)
    async def delete_project(
        project_id: int,
        store: ProjectStore = Depends(get_store),  # noqa: B008
    ) -> None:
        """Delete a project.

        Raises:
            HTTPException: 404 if project not found
        """
        deleted = await store.delete_project(project_id)
        if not deleted:
            raise HTTPException(
                status_code=http_status.HTTP_404_NOT_FOUND,
                detail="Project not found",
            )
        logger.info("project_deleted_via_api", project_id=project_id)

    @router.post("/{project_id}/upload-hook", response_model=Project)
    async def upload_hook(
        project_id: int,
        hook_file: UploadFile = File(..., alias="hookFile"),  # noqa: B008
        store: ProjectStore = Depends(get_store),  # noqa: B008
        config: ReeltrackConfig = Depends(get_config),  # noqa: B008
    ) -> Project:
        """Store a hook clip and record it on the project.

        The clip is served back under ``/uploads/``. The file name, URL and
        hook milestone are written in one update; the stored file is
        removed again if that update fails.

        Raises:
            HTTPException: 400 for a non audio/video file, 413 past the
                size cap, 404 if project not found, 500 if the update fails
        """
        if hook_file.content_type not in HOOK_MIME_TYPES:
            logger.warning(
                "hook_upload_rejected",
                project_id=project_id,
                content_type=hook_file.content_type,
            )
            raise HTTPException(
                status_code=http_status.HTTP_400_BAD_REQUEST,
                detail="Invalid file type. Only audio and video files are allowed.",
            )

        max_bytes = config.web.max_upload_mb * 1024 * 1024
        try:
            stored = await save_upload(hook_file, config.web.uploads_dir, max_bytes)
        except UploadTooLargeError as exc:
            logger.warning("hook_upload_too_large", project_id=project_id, max_bytes=max_bytes)
            raise HTTPException(
                status_code=413,
                detail=f"Hook file exceeds {config.web.max_upload_mb} MB",
            ) from exc
        finally:
            await hook_file.close()

        changes = {
            "hook": hook_file.filename,
            "hook_url": f"/uploads/{stored.name}",
            "hook_generated": True,
        }
        try:
            project = await store.update_project(project_id, changes)
        except ProjectNotFoundError as exc:
            stored.unlink(missing_ok=True)
            logger.warning("project_not_found_for_hook", project_id=project_id)
            raise HTTPException(
                status_code=http_status.HTTP_404_NOT_FOUND,
                detail="Project not found",
            ) from exc
        except Exception as exc:
            stored.unlink(missing_ok=True)
            logger.error("hook_upload_failed", project_id=project_id, error=str(exc))
            raise HTTPException(
                status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"error": "Failed to upload hook", "message": str(exc)},
            ) from exc

        logger.info(
            "hook_uploaded",
            project_id=project_id,
            file_name=stored.name,
            content_type=hook_file.content_type,
        )
        return project

    return router
