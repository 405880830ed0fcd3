"""Pytest fixtures for integration tests.

Builds the FastAPI application around an in-memory project store and
exercises it through httpx's ASGI transport. Generation services default
to the real clients with no credentials configured; individual tests swap
in mocks or respx routes as needed.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from reeltrack.config import HiggsfieldConfig, ReeltrackConfig, StorageConfig
from reeltrack.generation.higgsfield import HiggsfieldClient
from reeltrack.store import MemoryProjectStore, SqlProjectStore
from reeltrack.web.app import create_app


async def no_sleep(seconds: float) -> None:
    """Sleep replacement that returns immediately."""


@pytest.fixture
def test_config() -> ReeltrackConfig:
    """Configuration with credentials for a fake Higgsfield endpoint."""
    return ReeltrackConfig(
        higgsfield=HiggsfieldConfig(
            base_url="https://higgsfield.test",
            credentials="test-key:test-secret",
            poll_interval_seconds=0.0,
        ),
    )


@pytest.fixture
def memory_store(clock) -> MemoryProjectStore:  # type: ignore[no-untyped-def]
    return MemoryProjectStore(clock=clock)


@pytest_asyncio.fixture
async def sql_store(tmp_path: Path, clock) -> AsyncGenerator[SqlProjectStore, None]:  # type: ignore[no-untyped-def]
    """SQLite-backed store in a per-test database file."""
    config = StorageConfig(backend="sql", url=f"sqlite+aiosqlite:///{tmp_path / 'reeltrack.db'}")
    store = SqlProjectStore.from_config(config)
    store.clock = clock
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def media_client(test_config: ReeltrackConfig) -> AsyncGenerator[HiggsfieldClient, None]:
    client = HiggsfieldClient(test_config.higgsfield, sleep=no_sleep)
    yield client
    await client.close()


@pytest.fixture
def app(
    test_config: ReeltrackConfig,
    memory_store: MemoryProjectStore,
    media_client: HiggsfieldClient,
) -> FastAPI:
    """Application wired to the in-memory store and the fake Higgsfield endpoint."""
    return create_app(test_config, store=memory_store, media_client=media_client)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http
