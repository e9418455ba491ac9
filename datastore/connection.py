from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Iterator, Optional

from datastore.errors import StorageError
from settings import get_settings

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS garden_data (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    sensor_id INTEGER NOT NULL,
    moisture_content INTEGER NOT NULL CHECK (moisture_content BETWEEN 0 AND 100),
    time TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_garden_data_sensor_time
    ON garden_data (sensor_id, time);

CREATE TABLE IF NOT EXISTS forecast (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    batch_time TEXT NOT NULL,
    country TEXT NOT NULL DEFAULT '',
    city TEXT NOT NULL DEFAULT '',
    time TEXT NOT NULL,
    weather TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    temp REAL,
    temp_min REAL,
    temp_max REAL,
    pressure REAL,
    humidity REAL
);
CREATE UNIQUE INDEX IF NOT EXISTS idx_forecast_batch_time
    ON forecast (batch_time, time);
"""


def to_storage_time(value: datetime) -> str:
    """Render ``value`` as fixed-width UTC ISO-8601 so text order is time order."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def from_storage_time(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ConnectionGuard:
    """Owns the single SQLite connection and serializes every use of it.

    Callers take exclusive access with :meth:`access` for one logical
    operation. The lock is released on every exit path, and any
    ``sqlite3.Error`` raised inside the block surfaces as
    :class:`~datastore.errors.StorageError`.
    """

    def __init__(self, database_path: str = MEMORY_DATABASE) -> None:
        self.database_path = database_path
        self._lock = Lock()
        self._closed = False
        if database_path != MEMORY_DATABASE:
            Path(database_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            # Autocommit: every statement is durable on its own.
            self._connection = sqlite3.connect(
                database_path, check_same_thread=False, isolation_level=None
            )
        except sqlite3.Error as exc:
            raise StorageError(f"Could not open database {database_path!r}: {exc}") from exc
        self._connection.row_factory = sqlite3.Row
        try:
            with self.access() as conn:
                conn.executescript(_SCHEMA)
        except StorageError:
            self._closed = True
            self._connection.close()
            raise

    @contextmanager
    def access(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            if self._closed:
                raise StorageError("Database connection is closed.")
            try:
                yield self._connection
            except sqlite3.Error as exc:
                logger.error("SQLite operation failed: %s", exc, extra={"reason": type(exc).__name__})
                raise StorageError(str(exc)) from exc

    def locked(self) -> bool:
        return self._lock.locked()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._connection.close()


@lru_cache
def build_default_guard(path: Optional[str] = None) -> ConnectionGuard:
    settings = get_settings()
    database_path = settings.database_path if path is None else path
    return ConnectionGuard(database_path=database_path)
