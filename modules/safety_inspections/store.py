"""Async key-value record store backed by a local SQLite file.

Each table holds one JSON payload per record id plus the sort key the
store orders by. Blocking SQLite calls run in a worker thread so the
store can be awaited from request handlers and background tasks.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .exceptions import PersistenceError

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class RecordStore:
    """Persist mappings keyed by ``id`` and return them newest first."""

    def __init__(self, db_path: Path | str, table: str, *, order_field: str) -> None:
        if not _IDENTIFIER.match(table):
            raise ValueError(f"Invalid table name: {table!r}")
        self.db_path = Path(db_path)
        self.table = table
        self.order_field = order_field
        self._initialized = False

    # -- lifecycle -------------------------------------------------------------
    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        if self._initialized:
            return
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                id TEXT PRIMARY KEY,
                order_key TEXT NOT NULL DEFAULT '',
                payload TEXT NOT NULL
            )
            """
        )
        conn.execute(
            f"CREATE INDEX IF NOT EXISTS idx_{self.table}_order ON {self.table}(order_key)"
        )
        conn.commit()
        self._initialized = True

    # -- sync operations -------------------------------------------------------
    def _put_sync(self, payload: Dict[str, Any]) -> None:
        record_id = str(payload["id"])
        encoded = json.dumps(payload, ensure_ascii=False)
        conn = self._connect()
        try:
            self._ensure_schema(conn)
            conn.execute(
                f"""
                INSERT INTO {self.table} (id, order_key, payload) VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    order_key = excluded.order_key,
                    payload = excluded.payload
                """,
                (record_id, str(payload.get(self.order_field) or ""), encoded),
            )
            conn.commit()
        finally:
            conn.close()

    def _get_all_sync(self) -> List[Dict[str, Any]]:
        conn = self._connect()
        try:
            self._ensure_schema(conn)
            rows = conn.execute(
                f"SELECT id, payload FROM {self.table} ORDER BY order_key DESC, id ASC"
            ).fetchall()
        finally:
            conn.close()
        payloads: List[Dict[str, Any]] = []
        for row in rows:
            try:
                payloads.append(json.loads(row["payload"]))
            except (TypeError, ValueError):
                logger.warning("Skipping undecodable %s row %s", self.table, row["id"])
        return payloads

    def _delete_sync(self, record_id: str) -> None:
        conn = self._connect()
        try:
            self._ensure_schema(conn)
            conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (record_id,))
            conn.commit()
        finally:
            conn.close()

    # -- async API -------------------------------------------------------------
    async def put(self, payload: Mapping[str, Any]) -> None:
        """Insert or replace the payload stored under ``payload['id']``."""
        record_id = payload.get("id")
        if not record_id:
            raise PersistenceError(f"Cannot store a {self.table} payload without an id")
        try:
            await asyncio.to_thread(self._put_sync, dict(payload))
        except (sqlite3.Error, OSError, TypeError, ValueError) as exc:
            logger.error("Failed to store %s %s: %s", self.table, record_id, exc)
            raise PersistenceError(f"Could not save {record_id}: {exc}", str(record_id)) from exc

    async def get_all(self) -> List[Dict[str, Any]]:
        try:
            return await asyncio.to_thread(self._get_all_sync)
        except (sqlite3.Error, OSError) as exc:
            logger.error("Failed to read %s: %s", self.table, exc)
            raise PersistenceError(f"Could not read {self.table}: {exc}") from exc

    async def delete(self, record_id: str) -> None:
        """Remove ``record_id``; deleting an absent id is not an error."""
        try:
            await asyncio.to_thread(self._delete_sync, str(record_id))
        except (sqlite3.Error, OSError) as exc:
            logger.error("Failed to delete %s %s: %s", self.table, record_id, exc)
            raise PersistenceError(f"Could not delete {record_id}: {exc}", str(record_id)) from exc


__all__ = ["RecordStore"]
