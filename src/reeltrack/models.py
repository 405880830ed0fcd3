"""Domain models for Reeltrack.

Defines the Project record, the schemas used to create and patch it, and
the minimal User record. JSON payloads use camelCase field names
(``videoLength``, ``imageGenerated``); Python code uses snake_case. Both
spellings are accepted on input.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class Platform(str, enum.Enum):
    """Target short-form video platform."""

    reels = "reels"
    tiktok = "tiktok"
    shorts = "shorts"


class Purpose(str, enum.Enum):
    """What the video is for."""

    educational = "educational"
    explainer = "explainer"
    testimonial = "testimonial"
    promotional = "promotional"


class Tone(str, enum.Enum):
    """Voice of the script."""

    professional = "professional"
    casual = "casual"
    energetic = "energetic"
    emotional = "emotional"


MILESTONE_FIELDS: tuple[str, ...] = (
    "hook_generated",
    "image_generated",
    "video_generated",
    "audio_generated",
    "editing_complete",
)

# Fields that a patch may never touch
IMMUTABLE_FIELDS: frozenset[str] = frozenset({"id", "created_at"})


class CamelModel(BaseModel):
    """Base model serialising to camelCase and accepting either spelling."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ProjectCreate(CamelModel):
    """Request schema for creating a new project.

    Only title, platform, purpose and tone are required. Milestone flags
    default to False and optional text fields default to None.
    """

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=255)
    platform: Platform
    video_length: int = Field(default=15, ge=1, le=600)
    purpose: Purpose
    tone: Tone
    key_phrase: str | None = None
    keyword: str | None = None
    script: str | None = None
    hook: str | None = None
    hook_url: str | None = None
    image_prompt: str | None = None
    enhanced_image_prompt: str | None = None
    video_prompt: str | None = None
    image_url: str | None = None
    video_url: str | None = None
    audio_url: str | None = None
    selected_voice_id: str | None = None
    hook_generated: bool = False
    image_generated: bool = False
    video_generated: bool = False
    audio_generated: bool = False
    editing_complete: bool = False


class Project(ProjectCreate):
    """A tracked video-production project.

    Attributes:
        id: Integer id, assigned once and never reused
        created_at: Creation timestamp, set once by the store
    """

    model_config = ConfigDict(extra="ignore", from_attributes=True)

    id: int
    created_at: datetime


class ProjectUpdate(CamelModel):
    """Request schema for patching a project.

    Every field is optional. Fields that are not sent are left unchanged;
    nullable text fields may be cleared with an explicit null, required
    fields may not.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=1, max_length=255)
    platform: Platform | None = None
    video_length: int | None = Field(default=None, ge=1, le=600)
    purpose: Purpose | None = None
    tone: Tone | None = None
    key_phrase: str | None = None
    keyword: str | None = None
    script: str | None = None
    hook: str | None = None
    hook_url: str | None = None
    image_prompt: str | None = None
    enhanced_image_prompt: str | None = None
    video_prompt: str | None = None
    image_url: str | None = None
    video_url: str | None = None
    audio_url: str | None = None
    selected_voice_id: str | None = None
    hook_generated: bool | None = None
    image_generated: bool | None = None
    video_generated: bool | None = None
    audio_generated: bool | None = None
    editing_complete: bool | None = None

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> ProjectUpdate:
        """Reject explicit nulls for fields the record cannot hold as null."""
        non_nullable = {"title", "platform", "video_length", "purpose", "tone", *MILESTONE_FIELDS}
        nulled = sorted(
            name
            for name in self.model_fields_set & non_nullable
            if getattr(self, name) is None
        )
        if nulled:
            raise ValueError(f"Fields may not be null: {', '.join(nulled)}")
        return self

    def changes(self) -> dict[str, Any]:
        """Return only the fields the client actually sent, by python name."""
        return self.model_dump(exclude_unset=True)


class UserCreate(BaseModel):
    """Fields needed to create a user."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class User(UserCreate):
    """A stored user record keyed by a random UUID string."""

    model_config = ConfigDict(from_attributes=True)

    id: str


PROJECT_FIELDS: frozenset[str] = frozenset(Project.model_fields)
