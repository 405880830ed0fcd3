"""In-process project store.

Records live in dicts guarded by a single asyncio lock. The id counter
only moves forward, so ids of deleted projects are never handed out again.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

from reeltrack.logging import get_logger
from reeltrack.models import Project, ProjectCreate, User, UserCreate
from reeltrack.store.base import (
    DuplicateUsernameError,
    ProjectNotFoundError,
    ProjectStore,
    utcnow,
    validate_changes,
)

logger = get_logger(__name__)


class MemoryProjectStore(ProjectStore):
    """Dict-backed store for a single process.

    Attributes:
        clock: Callable returning the timestamp stamped on new projects
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self.clock = clock
        self._projects: dict[int, Project] = {}
        self._users: dict[str, User] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    async def healthy(self) -> bool:
        return True

    async def create_project(self, fields: ProjectCreate) -> Project:
        async with self._lock:
            project_id = self._next_id
            self._next_id += 1
            project = Project(
                **fields.model_dump(),
                id=project_id,
                created_at=self.clock(),
            )
            self._projects[project_id] = project

        logger.info(
            "project_created",
            project_id=project_id,
            platform=project.platform.value,
        )
        return project.model_copy()

    async def get_project(self, project_id: int) -> Project | None:
        project = self._projects.get(project_id)
        return project.model_copy() if project is not None else None

    async def list_projects(self) -> list[Project]:
        async with self._lock:
            projects = list(self._projects.values())
        # ids grow with insertion order, so they break created_at ties
        projects.sort(key=lambda p: (p.created_at, p.id), reverse=True)
        return [p.model_copy() for p in projects]

    async def update_project(self, project_id: int, changes: dict[str, Any]) -> Project:
        validate_changes(changes)
        async with self._lock:
            existing = self._projects.get(project_id)
            if existing is None:
                raise ProjectNotFoundError(project_id)
            updated = Project.model_validate({**existing.model_dump(), **changes})
            self._projects[project_id] = updated

        logger.info(
            "project_updated",
            project_id=project_id,
            fields_updated=sorted(changes),
        )
        return updated.model_copy()

    async def delete_project(self, project_id: int) -> bool:
        async with self._lock:
            deleted = self._projects.pop(project_id, None) is not None

        if deleted:
            logger.info("project_deleted", project_id=project_id)
        else:
            logger.warning("project_not_found", project_id=project_id)
        return deleted

    async def create_user(self, user: UserCreate) -> User:
        async with self._lock:
            if any(u.username == user.username for u in self._users.values()):
                raise DuplicateUsernameError(f"Username already taken: {user.username}")
            record = User(id=str(uuid.uuid4()), **user.model_dump())
            self._users[record.id] = record

        logger.info("user_created", user_id=record.id)
        return record

    async def get_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    async def get_user_by_username(self, username: str) -> User | None:
        for user in self._users.values():
            if user.username == username:
                return user
        return None
