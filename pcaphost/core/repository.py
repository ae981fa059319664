"""
Durable address -> serialized HostRecord store.

One sqlite file holds one named key/value table. Rows are only ever
inserted (first write wins), so stored records never change until the
whole file is truncated.
"""

from __future__ import annotations

import atexit
import sqlite3
from pathlib import Path
from typing import Iterator

from pcaphost.core.models import HostRecord, deserialize, serialize
from pcaphost.utils.logger import get_logger

logger = get_logger(__name__)


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class HostRepository:
    """
    Usage:
        with HostRepository(path) as repo:
            repo.register(record)

    Opening registers close() as an atexit hook, closing removes it again,
    so the store is released exactly once however the process ends.
    """

    def __init__(self, path: str | Path, map_name: str = "TcpHost") -> None:
        self.path = Path(path)
        self.map_name = map_name
        self._table = _quote_identifier(map_name)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self.path))
        try:
            self._conn.execute("PRAGMA locking_mode=EXCLUSIVE")
            with self._conn:
                self._conn.execute(
                    f"CREATE TABLE IF NOT EXISTS {self._table} ("
                    " key TEXT PRIMARY KEY,"
                    " value TEXT NOT NULL"
                    ")"
                )
        except sqlite3.Error:
            self._conn.close()
            raise

        atexit.register(self.close)
        logger.debug("Opened host store %s (%s)", self.path, map_name)

    # -------------------------
    # Record access
    # -------------------------

    def register(self, record: HostRecord) -> bool:
        """
        Insert if the address is absent. Returns True when a row was written.
        """
        with self._conn:
            cur = self._conn.execute(
                f"INSERT OR IGNORE INTO {self._table} (key, value) VALUES (?, ?)",
                (record.address, serialize(record)),
            )
        inserted = cur.rowcount == 1
        if inserted:
            logger.debug("registered: %s", record)
        return inserted

    def find_all(self) -> Iterator[HostRecord]:
        cur = self._conn.execute(f"SELECT value FROM {self._table}")
        for (value,) in cur:
            yield deserialize(value)

    def count(self) -> int:
        (n,) = self._conn.execute(f"SELECT COUNT(*) FROM {self._table}").fetchone()
        return int(n)

    # -------------------------
    # Lifecycle
    # -------------------------

    def close(self) -> None:
        atexit.unregister(self.close)
        # sqlite3 treats a second close() as a no-op
        self._conn.close()

    def __enter__(self) -> "HostRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
