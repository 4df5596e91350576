"""SQLite connection helpers shared by the store and scripts."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

import aiosqlite

from helixintel.core.config import settings


logger = logging.getLogger(__name__)


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


async def connect(*, db_path: str | None = None, busy_timeout_seconds: float | None = None) -> aiosqlite.Connection:
    """Open a connection in autocommit mode; transactions are explicit via ``transaction``."""
    path = get_db_path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    timeout = settings.sqlite_busy_timeout_seconds if busy_timeout_seconds is None else busy_timeout_seconds

    conn = await aiosqlite.connect(str(path), timeout=timeout, isolation_level=None)
    conn.row_factory = aiosqlite.Row
    await conn.execute("PRAGMA foreign_keys = ON")
    await conn.execute("PRAGMA journal_mode = WAL")
    await conn.execute(f"PRAGMA busy_timeout = {int(timeout * 1000)}")

    logger.info("Opened SQLite connection", extra={"db_path": str(path)})
    return conn


@asynccontextmanager
async def transaction(conn: aiosqlite.Connection) -> AsyncIterator[aiosqlite.Connection]:
    """Run a block inside ``BEGIN IMMEDIATE``; commit on success, roll back on any error.

    IMMEDIATE takes the write lock up front so reads inside the block see the
    rows the block is about to change.
    """
    await conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        await conn.rollback()
        raise
    else:
        await conn.commit()


def encode_value(value: Any) -> Any:
    """Convert a Python value to its SQLite column representation."""
    if isinstance(value, datetime):
        # Stored as UTC so ISO strings sort chronologically
        return value.astimezone(UTC).isoformat() if value.tzinfo else value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    return value


def row_to_dict(row: aiosqlite.Row) -> dict[str, Any]:
    """Convert a row to a plain dict."""
    return {key: row[key] for key in row.keys()}  # noqa: SIM118 - Row is not a mapping
