"""Shared test fixtures."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator

import pytest
from records import SAVE_LOG

from flat_mapper.core.config import reset_settings
from flat_mapper.core.registry import NodeRegistry


@pytest.fixture(autouse=True)
def _clean_state() -> Iterator[None]:
    """Reset the save log and global settings around every test."""
    SAVE_LOG.clear()
    reset_settings()
    yield
    SAVE_LOG.clear()
    reset_settings()


@pytest.fixture
def save_log() -> list[str]:
    """Class names of records in the order they were saved."""
    return SAVE_LOG


@pytest.fixture
def registry() -> NodeRegistry:
    """Empty node class registry."""
    return NodeRegistry()


@pytest.fixture
def sqlite_conn() -> Iterator[sqlite3.Connection]:
    """SQLite in-memory connection with a ``people`` table."""
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE people (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT)")
    conn.commit()
    yield conn
    conn.close()
