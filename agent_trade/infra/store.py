"""
Durable key-value store

The pool cache persists its whole snapshot as one value under one key.
SqliteStore keeps that value in a single-table sqlite database. Calls are
blocking; async callers run them through asyncio.to_thread.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Protocol, Union

from ..errors import PersistenceError

logger = logging.getLogger(__name__)


class DurableStore(Protocol):
    """Interface for byte-valued key-value backends"""

    def get(self, key: str) -> Optional[bytes]:
        ...

    def put(self, key: str, value: bytes) -> None:
        ...


CREATE_KV_TABLE = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value BLOB NOT NULL
);
"""


class SqliteStore:
    """
    sqlite-backed DurableStore

    Each call opens its own connection so the store can be used from
    worker threads. A process-local lock serializes writers.

    Usage:
        store = SqliteStore("agent_trade_db.sqlite3")
        store.put("filtered_pools", b"[]")
        data = store.get("filtered_pools")
    """

    def __init__(self, database_path: Union[str, Path]):
        self._database_path = Path(database_path)
        self._write_lock = threading.Lock()
        try:
            if self._database_path.parent and not self._database_path.parent.exists():
                self._database_path.parent.mkdir(parents=True, exist_ok=True)
            with self._connect() as con:
                con.execute(CREATE_KV_TABLE)
                con.commit()
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError(
                f"Failed to open store at {self._database_path}: {e}",
                original_error=e,
            )

    @property
    def path(self) -> Path:
        return self._database_path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        con = sqlite3.connect(str(self._database_path))
        try:
            yield con
        finally:
            con.close()

    def get(self, key: str) -> Optional[bytes]:
        """
        Read the value stored under key

        Returns:
            Stored bytes, or None when the key is absent

        Raises:
            PersistenceError: On sqlite failure
        """
        try:
            with self._connect() as con:
                row = con.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError.read_failed(key, e)
        if row is None:
            return None
        return bytes(row[0])

    def put(self, key: str, value: bytes) -> None:
        """
        Overwrite the value stored under key

        Raises:
            PersistenceError: On sqlite failure
        """
        try:
            with self._write_lock, self._connect() as con:
                con.execute(
                    """
                    INSERT INTO kv (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    """,
                    (key, sqlite3.Binary(value)),
                )
                con.commit()
        except sqlite3.Error as e:
            raise PersistenceError.write_failed(key, e)
        logger.debug(f"Stored {len(value)} bytes under '{key}'")

    def __repr__(self) -> str:
        return f"SqliteStore(path={self._database_path})"
