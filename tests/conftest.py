"""Shared test fixtures."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest

from row_bridge.core import compilers, settings


@pytest.fixture(autouse=True)
def reset_defaults() -> Iterator[None]:
    """Restore process-wide compiler and mapper defaults around each test."""
    settings.reset()
    compilers.clear_custom()
    yield
    settings.reset()
    compilers.clear_custom()


@pytest.fixture
def sqlite_conn() -> Iterator[sqlite3.Connection]:
    """SQLite in-memory connection."""
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def mock_conn() -> MagicMock:
    """DB-API connection whose cursor records executions and returns no rows.

    The last cursor is available as ``mock_conn.cursor.return_value``.
    """
    conn = MagicMock()
    cursor = conn.cursor.return_value
    cursor.description = None
    cursor.rowcount = 0
    cursor.fetchone.return_value = None
    return conn


@pytest.fixture
def normalize():
    """Collapse whitespace runs (the query builder breaks lines before clauses)."""

    def _normalize(sql: str) -> str:
        return " ".join(sql.split())

    return _normalize
