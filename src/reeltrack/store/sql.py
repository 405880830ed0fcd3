"""SQLAlchemy-backed project store.

Provides the same contract as the in-memory store on top of any async
SQLAlchemy database (PostgreSQL via asyncpg in production, SQLite via
aiosqlite for local use and tests). Every operation runs in its own
transaction.
"""

from __future__ import annotations

import enum
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from reeltrack.config import StorageConfig
from reeltrack.database.connection import get_engine, get_session_factory
from reeltrack.database.models import Base, UserRecord, VideoProjectRecord
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


def _column_value(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    return value


def _to_project(row: VideoProjectRecord) -> Project:
    project = Project.model_validate(row)
    # SQLite drops tzinfo on the way back out
    if project.created_at.tzinfo is None:
        project.created_at = project.created_at.replace(tzinfo=timezone.utc)
    return project


class SqlProjectStore(ProjectStore):
    """Project store persisted through SQLAlchemy.

    Attributes:
        engine: Async engine the store owns and disposes on close
        clock: Callable returning the timestamp stamped on new projects
    """

    def __init__(
        self,
        engine: AsyncEngine,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.engine = engine
        self.clock = clock
        self._session_factory = get_session_factory(engine)

    @classmethod
    def from_config(cls, config: StorageConfig) -> SqlProjectStore:
        """Create a store with a fresh engine for the configured URL."""
        return cls(get_engine(config))

    async def initialize(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("sql_store_initialized", url=self.engine.url.render_as_string(hide_password=True))

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("sql_store_disposed")

    async def healthy(self) -> bool:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.warning("sql_store_unhealthy", error=str(exc))
            return False
        return True

    async def create_project(self, fields: ProjectCreate) -> Project:
        row = VideoProjectRecord(
            **{name: _column_value(value) for name, value in fields.model_dump().items()},
            created_at=self.clock(),
        )
        async with self._session_factory() as session:
            async with session.begin():
                session.add(row)
                await session.flush()
                await session.refresh(row)
            project = _to_project(row)

        logger.info(
            "project_created",
            project_id=project.id,
            platform=project.platform.value,
        )
        return project

    async def get_project(self, project_id: int) -> Project | None:
        async with self._session_factory() as session:
            row = await session.get(VideoProjectRecord, project_id)
            return _to_project(row) if row is not None else None

    async def list_projects(self) -> list[Project]:
        stmt = select(VideoProjectRecord).order_by(
            VideoProjectRecord.created_at.desc(),
            VideoProjectRecord.id.desc(),
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_to_project(row) for row in result.scalars().all()]

    async def update_project(self, project_id: int, changes: dict[str, Any]) -> Project:
        validate_changes(changes)
        async with self._session_factory() as session:
            async with session.begin():
                row = await session.get(VideoProjectRecord, project_id, with_for_update=True)
                if row is None:
                    raise ProjectNotFoundError(project_id)
                # rejected patches roll back with nothing written
                merged = Project.model_validate({**_to_project(row).model_dump(), **changes})
                for name in changes:
                    setattr(row, name, _column_value(getattr(merged, name)))
                await session.flush()
                await session.refresh(row)
            project = _to_project(row)

        logger.info(
            "project_updated",
            project_id=project_id,
            fields_updated=sorted(changes),
        )
        return project

    async def delete_project(self, project_id: int) -> bool:
        async with self._session_factory() as session:
            async with session.begin():
                stmt = delete(VideoProjectRecord).where(VideoProjectRecord.id == project_id)
                result = await session.execute(stmt)

        deleted = result.rowcount > 0
        if deleted:
            logger.info("project_deleted", project_id=project_id)
        else:
            logger.warning("project_not_found", project_id=project_id)
        return deleted

    async def create_user(self, user: UserCreate) -> User:
        row = UserRecord(id=str(uuid.uuid4()), **user.model_dump())
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(row)
        except IntegrityError as exc:
            raise DuplicateUsernameError(f"Username already taken: {user.username}") from exc

        logger.info("user_created", user_id=row.id)
        return User.model_validate(row)

    async def get_user(self, user_id: str) -> User | None:
        async with self._session_factory() as session:
            row = await session.get(UserRecord, user_id)
            return User.model_validate(row) if row is not None else None

    async def get_user_by_username(self, username: str) -> User | None:
        stmt = select(UserRecord).where(UserRecord.username == username)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            row = result.scalar_one_or_none()
            return User.model_validate(row) if row is not None else None
