"""Shared pytest fixtures for test modules."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from cycle_stats.storage.sqlite_store import SqliteKeyValueStore
from cycle_stats.storage.writer import ReliableGameWriter
from tests.fakes.store import FakeKeyValueStore

if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


@pytest.fixture(autouse=True)
def _clear_cycle_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CYCLE__* variables from the host out of config tests."""
    for name in list(os.environ):
        if name.upper().startswith("CYCLE__"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_store() -> FakeKeyValueStore:
    return FakeKeyValueStore()


@pytest.fixture
def writer(fake_store: FakeKeyValueStore) -> ReliableGameWriter:
    return ReliableGameWriter(fake_store, initial_delay=0.0, max_delay=0.0, sleep=lambda s: None)


@pytest.fixture
def sqlite_store(tmp_path: Path) -> Generator[SqliteKeyValueStore]:
    store = SqliteKeyValueStore(tmp_path / "stats.db")
    yield store
    store.close()
