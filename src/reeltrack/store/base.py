"""Abstract project store for Reeltrack.

Route handlers and generation flows depend only on ``ProjectStore``; the
concrete backend (in-memory or SQL) is chosen by ``build_store`` from the
storage configuration.
"""

from __future__ import annotations

import abc
from datetime import datetime, timezone
from typing import Any

from reeltrack.models import IMMUTABLE_FIELDS, PROJECT_FIELDS, Project, ProjectCreate, User, UserCreate


class StoreError(Exception):
    """Base exception for project store errors."""

    pass


class ProjectNotFoundError(StoreError):
    """Raised when an update targets a project id that does not exist.

    Attributes:
        project_id: The id that was looked up.
    """

    def __init__(self, project_id: int) -> None:
        self.project_id = project_id
        super().__init__(f"Project {project_id} not found")


class DuplicateUsernameError(StoreError):
    """Raised when creating a user whose username is already taken."""

    pass


def utcnow() -> datetime:
    """Default store clock."""
    return datetime.now(timezone.utc)


def validate_changes(changes: dict[str, Any]) -> None:
    """Check that a patch only names known, mutable project fields.

    Raises:
        ValueError: If the patch names id/created_at or an unknown field.
    """
    immutable = sorted(IMMUTABLE_FIELDS & changes.keys())
    if immutable:
        raise ValueError(f"Fields cannot be updated: {', '.join(immutable)}")
    unknown = sorted(changes.keys() - PROJECT_FIELDS)
    if unknown:
        raise ValueError(f"Unknown project fields: {', '.join(unknown)}")


class ProjectStore(abc.ABC):
    """Persistence interface for projects and users.

    Each call is atomic with respect to a single record. There is no
    optimistic concurrency: concurrent patches to the same project are
    applied in arrival order and the last writer wins per field.
    """

    async def initialize(self) -> None:
        """Prepare the backend (create tables, open pools)."""

    async def close(self) -> None:
        """Release backend resources."""

    @abc.abstractmethod
    async def healthy(self) -> bool:
        """Return True if the backend can serve requests."""

    @abc.abstractmethod
    async def create_project(self, fields: ProjectCreate) -> Project:
        """Assign the next id, stamp created_at and persist the project."""

    @abc.abstractmethod
    async def get_project(self, project_id: int) -> Project | None:
        """Return the project, or None if it does not exist."""

    @abc.abstractmethod
    async def list_projects(self) -> list[Project]:
        """Return all projects, newest first.

        Projects sharing a created_at timestamp are ordered by insertion,
        the later insert first.
        """

    @abc.abstractmethod
    async def update_project(self, project_id: int, changes: dict[str, Any]) -> Project:
        """Merge changes onto the stored project and return the result.

        Raises:
            ProjectNotFoundError: If the project does not exist.
            ValueError: If changes name an unknown or immutable field.
        """

    @abc.abstractmethod
    async def delete_project(self, project_id: int) -> bool:
        """Delete the project; return False if it did not exist."""

    @abc.abstractmethod
    async def create_user(self, user: UserCreate) -> User:
        """Persist a user under a fresh UUID id."""

    @abc.abstractmethod
    async def get_user(self, user_id: str) -> User | None:
        """Return the user with this id, or None."""

    @abc.abstractmethod
    async def get_user_by_username(self, username: str) -> User | None:
        """Return the user with this username, or None."""
