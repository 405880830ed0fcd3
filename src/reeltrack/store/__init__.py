"""Project persistence for Reeltrack.

Callers depend on the abstract ``ProjectStore``; ``build_store`` picks the
in-memory or SQL implementation from ``StorageConfig.backend``.
"""

from __future__ import annotations

from reeltrack.config import StorageConfig
from reeltrack.store.base import (
    DuplicateUsernameError,
    ProjectNotFoundError,
    ProjectStore,
    StoreError,
)
from reeltrack.store.memory import MemoryProjectStore
from reeltrack.store.sql import SqlProjectStore


def build_store(config: StorageConfig) -> ProjectStore:
    """Create the project store selected by the configuration."""
    if config.backend == "sql":
        return SqlProjectStore.from_config(config)
    return MemoryProjectStore()


__all__ = [
    "DuplicateUsernameError",
    "MemoryProjectStore",
    "ProjectNotFoundError",
    "ProjectStore",
    "SqlProjectStore",
    "StoreError",
    "build_store",
]
