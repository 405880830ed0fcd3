"""SQLAlchemy persistence for the durable project store.

Provides the declarative models and the async engine/session factories
used by ``reeltrack.store.sql.SqlProjectStore``.
"""

from __future__ import annotations

from reeltrack.database.connection import get_engine, get_session_factory
from reeltrack.database.models import Base, UserRecord, VideoProjectRecord

__all__ = [
    "Base",
    "UserRecord",
    "VideoProjectRecord",
    "get_engine",
    "get_session_factory",
]
