from __future__ import annotations

import logging
import sqlite3
from dataclasses import astuple, dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from core.errors import StoreError
from core.logging import log_event

logger = logging.getLogger(__name__)

SCHEMA = """
pragma journal_mode = wal;
create table if not exists wpbl (
  `id` integer not null primary key,
  `timestamp` text not null,
  `expiry` text not null,
  `rangestart` text not null,
  `rangeend` text not null
);
create index if not exists `by_timestamp` on wpbl (`timestamp`);
create index if not exists `by_expiry` on wpbl (`expiry`);
create index if not exists `by_rangestart` on wpbl (`rangestart`);
"""

SQLITE_MAX_INT = 2**63 - 1

INSERT_SQL = (
    "insert or ignore into wpbl (`id`, `timestamp`, `expiry`, `rangestart`, `rangeend`) "
    "values (?, ?, ?, ?, ?)"
)


@dataclass(frozen=True)
class BlockRecord:
    id: int
    timestamp: str
    expiry: str
    range_start: str
    range_end: str


class BlockStore:
    """SQLite mirror of the block list.

    Rows are only ever inserted; an insert whose ``id`` already exists is
    ignored, so redelivered records are harmless.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        try:
            # one writer, but calls may arrive from asyncio.to_thread workers
            self._conn = sqlite3.connect(self._path, check_same_thread=False)
            self._conn.executescript(SCHEMA)
        except sqlite3.Error as exc:
            raise StoreError(f"cannot open block store at {self._path}: {exc}") from exc
        log_event(logger, "store.open", path=str(self._path))

    @property
    def path(self) -> Path:
        return self._path

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "BlockStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def max_timestamp(self) -> Optional[str]:
        try:
            row = self._conn.execute("select max(`timestamp`) from wpbl").fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"cannot read checkpoint: {exc}") from exc
        return row[0] if row else None

    def insert(self, record: BlockRecord) -> bool:
        return self.insert_many([record]) == 1

    def insert_many(self, records: Iterable[BlockRecord]) -> int:
        """Insert records in one transaction; returns how many rows were new."""
        rows = [astuple(record) for record in records]
        if not rows:
            return 0
        try:
            with self._conn:
                before = self._conn.total_changes
                self._conn.executemany(INSERT_SQL, rows)
                return self._conn.total_changes - before
        except (sqlite3.Error, OverflowError) as exc:
            raise StoreError(f"cannot insert block records: {exc}") from exc

    def get(self, block_id: int) -> Optional[BlockRecord]:
        try:
            row = self._conn.execute(
                "select `id`, `timestamp`, `expiry`, `rangestart`, `rangeend` from wpbl where `id` = ?",
                (block_id,),
            ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"cannot read block {block_id}: {exc}") from exc
        return BlockRecord(*row) if row else None

    def ids(self) -> List[int]:
        try:
            rows = self._conn.execute("select `id` from wpbl order by `id`").fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"cannot list block ids: {exc}") from exc
        return [row[0] for row in rows]

    def count(self) -> int:
        try:
            row = self._conn.execute("select count(*) from wpbl").fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"cannot count blocks: {exc}") from exc
        return int(row[0])
