"""Video project table for Reeltrack.

Column names follow the snake_case names of ``reeltrack.models.Project``,
so ORM rows validate directly into the domain model.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from reeltrack.database.models.base import Base


class VideoProjectRecord(Base):
    """A tracked video project row.

    The id column uses AUTOINCREMENT on SQLite (a serial sequence on
    PostgreSQL) so ids of deleted rows are never reissued.
    """

    __tablename__ = "video_projects"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    platform: Mapped[str] = mapped_column(Text, nullable=False)
    video_length: Mapped[int] = mapped_column(Integer, nullable=False, default=15)
    purpose: Mapped[str] = mapped_column(Text, nullable=False)
    tone: Mapped[str] = mapped_column(Text, nullable=False)
    key_phrase: Mapped[str | None] = mapped_column(Text, nullable=True)
    keyword: Mapped[str | None] = mapped_column(Text, nullable=True)
    script: Mapped[str | None] = mapped_column(Text, nullable=True)
    hook: Mapped[str | None] = mapped_column(Text, nullable=True)
    hook_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    enhanced_image_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    audio_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    selected_voice_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    hook_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    image_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    video_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    audio_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    editing_complete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
