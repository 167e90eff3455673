"""Typed repositories over the local record store."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from . import config
from .exceptions import SafetyHubError
from .models import InspectionRecord
from .store import RecordStore
from .weekly.models import WeeklyReportRecord

logger = logging.getLogger(__name__)

INSPECTIONS_TABLE = "inspections"
WEEKLY_REPORTS_TABLE = "weekly_reports"

T = TypeVar("T", InspectionRecord, WeeklyReportRecord)


class _TypedRepository(Generic[T]):
    def __init__(self, store: RecordStore, decode: Callable[[Dict[str, Any]], T]) -> None:
        self.store = store
        self._decode = decode

    async def put(self, item: T) -> None:
        await self.store.put(item.to_record())

    async def get_all(self) -> List[T]:
        """Return every decodable item in store order; corrupt rows are skipped."""
        items: List[T] = []
        for payload in await self.store.get_all():
            try:
                items.append(self._decode(payload))
            except (KeyError, TypeError, ValueError, SafetyHubError) as exc:
                logger.warning(
                    "Skipping unreadable %s row %s: %s",
                    self.store.table,
                    payload.get("id") if isinstance(payload, dict) else None,
                    exc,
                )
        return items

    async def get(self, item_id: str) -> Optional[T]:
        for item in await self.get_all():
            if item.id == item_id:
                return item
        return None

    async def delete(self, item_id: str) -> None:
        await self.store.delete(item_id)


class InspectionRepository(_TypedRepository[InspectionRecord]):
    """Inspection records ordered by inspection date, newest first."""

    def __init__(self, store: RecordStore) -> None:
        super().__init__(store, InspectionRecord.from_record)


class WeeklyReportRepository(_TypedRepository[WeeklyReportRecord]):
    """Weekly reports ordered by week start, newest first."""

    def __init__(self, store: RecordStore) -> None:
        super().__init__(store, WeeklyReportRecord.from_record)


def open_repositories(
    data_dir: Path | str | None = None,
) -> Tuple[InspectionRepository, WeeklyReportRepository]:
    db_path = Path(data_dir) / config.DB_FILENAME if data_dir else config.db_path()
    return (
        InspectionRepository(RecordStore(db_path, INSPECTIONS_TABLE, order_field="date")),
        WeeklyReportRepository(RecordStore(db_path, WEEKLY_REPORTS_TABLE, order_field="week_start")),
    )


__all__ = ["InspectionRepository", "WeeklyReportRepository", "open_repositories"]
