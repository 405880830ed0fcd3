"""SQLAlchemy ORM models for Reeltrack."""

from __future__ import annotations

from reeltrack.database.models.base import Base
from reeltrack.database.models.project import VideoProjectRecord
from reeltrack.database.models.user import UserRecord

__all__ = [
    "Base",
    "UserRecord",
    "VideoProjectRecord",
]
