"""Shared pytest fixtures for the Reeltrack test suite."""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone

import pytest

from reeltrack.models import Platform, ProjectCreate, Purpose, Tone


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep REELTRACK_* variables from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.startswith("REELTRACK_"):
            monkeypatch.delenv(name, raising=False)


class StepClock:
    """Deterministic clock that advances by a fixed step on every call.

    A zero step yields identical timestamps, which exercises the id
    tie-break of the newest-first listing.
    """

    def __init__(self, step: timedelta = timedelta(seconds=1)) -> None:
        self.current = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + self.step
        return now


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def frozen_clock() -> StepClock:
    return StepClock(step=timedelta(0))


def make_project(title: str = "Spring sale teaser", **overrides: object) -> ProjectCreate:
    """Build a valid ProjectCreate with sensible defaults."""
    fields: dict[str, object] = {
        "title": title,
        "platform": Platform.reels,
        "purpose": Purpose.promotional,
        "tone": Tone.energetic,
    }
    fields.update(overrides)
    return ProjectCreate(**fields)  # type: ignore[arg-type]


@pytest.fixture
def project_factory():  # type: ignore[no-untyped-def]
    return make_project
