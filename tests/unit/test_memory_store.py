"""Unit tests for the in-memory project store."""

from __future__ import annotations

import asyncio

import pytest

from reeltrack.models import Platform, UserCreate
from reeltrack.store import MemoryProjectStore
from reeltrack.store.base import DuplicateUsernameError, ProjectNotFoundError


@pytest.fixture
def store(clock) -> MemoryProjectStore:  # type: ignore[no-untyped-def]
    return MemoryProjectStore(clock=clock)


class TestCreateAndGet:
    """Test project creation and lookup."""

    @pytest.mark.asyncio
    async def test_get_returns_created_project(self, store: MemoryProjectStore, project_factory) -> None:  # type: ignore[no-untyped-def]
        """Test that get(create(p).id) equals the created record."""
        created = await store.create_project(project_factory(keyword="discount"))
        fetched = await store.get_project(created.id)
        assert fetched == created
        assert fetched is not None
        assert fetched.keyword == "discount"
        assert fetched.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_ids_are_sequential(self, store: MemoryProjectStore, project_factory) -> None:  # type: ignore[no-untyped-def]
        first = await store.create_project(project_factory("one"))
        second = await store.create_project(project_factory("two"))
        assert (first.id, second.id) == (1, 2)

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store: MemoryProjectStore) -> None:
        assert await store.get_project(99) is None

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, store: MemoryProjectStore, project_factory) -> None:  # type: ignore[no-untyped-def]
        """Test that mutating a returned record leaves the store untouched."""
        created = await store.create_project(project_factory())
        created.title = "mutated"
        fetched = await store.get_project(created.id)
        assert fetched is not None
        assert fetched.title == "Spring sale teaser"

    @pytest.mark.asyncio
    async def test_concurrent_creates_get_distinct_ids(self, store: MemoryProjectStore, project_factory) -> None:  # type: ignore[no-untyped-def]
        projects = await asyncio.gather(*(store.create_project(project_factory(f"p{i}")) for i in range(10)))
        assert sorted(p.id for p in projects) == list(range(1, 11))


class TestListProjects:
    """Test newest-first listing."""

    @pytest.mark.asyncio
    async def test_newest_first(self, store: MemoryProjectStore, project_factory) -> None:  # type: ignore[no-untyped-def]
        for title in ("oldest", "middle", "newest"):
            await store.create_project(project_factory(title))
        projects = await store.list_projects()
        assert [p.title for p in projects] == ["newest", "middle", "oldest"]

    @pytest.mark.asyncio
    async def test_ties_broken_by_id(self, frozen_clock, project_factory) -> None:  # type: ignore[no-untyped-def]
        """Test that equal timestamps list the later insert first."""
        store = MemoryProjectStore(clock=frozen_clock)
        for title in ("a", "b", "c"):
            await store.create_project(project_factory(title))
        projects = await store.list_projects()
        assert [p.id for p in projects] == [3, 2, 1]

    @pytest.mark.asyncio
    async def test_empty(self, store: MemoryProjectStore) -> None:
        assert await store.list_projects() == []


class TestUpdateProject:
    """Test partial updates."""

    @pytest.mark.asyncio
    async def test_only_named_fields_change(self, store: MemoryProjectStore, project_factory) -> None:  # type: ignore[no-untyped-def]
        """Test that a patch leaves every other field as it was."""
        created = await store.create_project(project_factory(script="Original script", keyword="sale"))
        updated = await store.update_project(created.id, {"image_generated": True, "script": "New script"})

        assert updated.image_generated is True
        assert updated.script == "New script"
        expected = created.model_dump(exclude={"image_generated", "script"})
        assert updated.model_dump(exclude={"image_generated", "script"}) == expected

    @pytest.mark.asyncio
    async def test_empty_patch_is_a_no_op(self, store: MemoryProjectStore, project_factory) -> None:  # type: ignore[no-untyped-def]
        created = await store.create_project(project_factory())
        assert await store.update_project(created.id, {}) == created

    @pytest.mark.asyncio
    async def test_nullable_field_can_be_cleared(self, store: MemoryProjectStore, project_factory) -> None:  # type: ignore[no-untyped-def]
        created = await store.create_project(project_factory(image_url="https://cdn/x.png"))
        updated = await store.update_project(created.id, {"image_url": None})
        assert updated.image_url is None

    @pytest.mark.asyncio
    async def test_enum_values_are_validated(self, store: MemoryProjectStore, project_factory) -> None:  # type: ignore[no-untyped-def]
        created = await store.create_project(project_factory())
        updated = await store.update_project(created.id, {"platform": "shorts"})
        assert updated.platform is Platform.shorts

    @pytest.mark.asyncio
    async def test_missing_project(self, store: MemoryProjectStore) -> None:
        with pytest.raises(ProjectNotFoundError) as exc_info:
            await store.update_project(7, {"title": "x"})
        assert exc_info.value.project_id == 7

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["id", "created_at"])
    async def test_immutable_fields_rejected(self, store: MemoryProjectStore, project_factory, field: str) -> None:  # type: ignore[no-untyped-def]
        created = await store.create_project(project_factory())
        with pytest.raises(ValueError, match="cannot be updated"):
            await store.update_project(created.id, {field: 5})

    @pytest.mark.asyncio
    async def test_unknown_fields_rejected(self, store: MemoryProjectStore, project_factory) -> None:  # type: ignore[no-untyped-def]
        created = await store.create_project(project_factory())
        with pytest.raises(ValueError, match="Unknown project fields"):
            await store.update_project(created.id, {"colour": "red"})


class TestDeleteProject:
    """Test deletion and id reuse."""

    @pytest.mark.asyncio
    async def test_delete_twice(self, store: MemoryProjectStore, project_factory) -> None:  # type: ignore[no-untyped-def]
        """Test that the second delete reports nothing was removed."""
        created = await store.create_project(project_factory())
        assert await store.delete_project(created.id) is True
        assert await store.delete_project(created.id) is False
        assert await store.get_project(created.id) is None

    @pytest.mark.asyncio
    async def test_ids_not_reused(self, store: MemoryProjectStore, project_factory) -> None:  # type: ignore[no-untyped-def]
        first = await store.create_project(project_factory("one"))
        second = await store.create_project(project_factory("two"))
        await store.delete_project(second.id)
        third = await store.create_project(project_factory("three"))
        assert third.id == 3
        assert first.id == 1


class TestUsers:
    """Test the user map."""

    @pytest.mark.asyncio
    async def test_create_and_lookup(self, store: MemoryProjectStore) -> None:
        user = await store.create_user(UserCreate(username="editor", password="hunter2"))
        assert user.id
        assert await store.get_user(user.id) == user
        assert await store.get_user_by_username("editor") == user
        assert await store.get_user_by_username("nobody") is None

    @pytest.mark.asyncio
    async def test_duplicate_username(self, store: MemoryProjectStore) -> None:
        await store.create_user(UserCreate(username="editor", password="a"))
        with pytest.raises(DuplicateUsernameError):
            await store.create_user(UserCreate(username="editor", password="b"))

    @pytest.mark.asyncio
    async def test_healthy(self, store: MemoryProjectStore) -> None:
        assert await store.healthy() is True
