"""Short-lived job: creates the schema and seeds a few rows."""

from __future__ import annotations

import asyncio
import logging
import sqlite3

from pathlib import Path
from typing import Optional, Sequence

LOGGER = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS accounts (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL UNIQUE
)
"""


class SyncDatabase:
    def __init__(self) -> None:
        self.db_path: Optional[Path] = None

    async def configure(self) -> None:
        self.db_path = Path("service_stack.db")

    async def run(self, args: Optional[Sequence[str]] = None) -> int:
        if args:
            self.db_path = Path(args[0])
        names = list(args[1:]) if args else ["alice", "bob"]
        return await asyncio.to_thread(self._sync, names)

    def _sync(self, names: Sequence[str]) -> int:
        assert self.db_path is not None
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(SCHEMA)
            conn.executemany(
                "INSERT OR IGNORE INTO accounts (name) VALUES (?)",
                [(name,) for name in names],
            )
            count = conn.execute("SELECT COUNT(*) FROM accounts").fetchone()
        LOGGER.info("Synced %d account(s) into %s", count[0], self.db_path)
        return count[0]


default = SyncDatabase
