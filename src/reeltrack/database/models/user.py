"""User table for Reeltrack."""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from reeltrack.database.models.base import Base


class UserRecord(Base):
    """A stored user.

    Attributes:
        id: UUID string primary key, generated by the store.
        username: Unique login name.
        password: Password as supplied by the caller.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    password: Mapped[str] = mapped_column(Text, nullable=False)
