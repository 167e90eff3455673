"""Business rules for saving, editing and patching inspection records.

``InspectionService`` owns the in-memory inspection collection. Writes
go to the store first and are published to the collection only once
they succeed, except for single-finding patches which are applied
optimistically and reconciled with the store if persisting fails.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Callable, Iterable, List, Optional, Set, Tuple

from utils.state import AppState

from . import config, localization
from .exceptions import NotFoundError, PersistenceError, ValidationError
from .models import Finding, InspectionRecord, new_record_id, parse_date
from .patches import FindingPatch
from .picklists import INSPECTORS, PickLists
from .repository import InspectionRepository
from .seed import seed_records

logger = logging.getLogger(__name__)

FailureHook = Callable[[InspectionRecord, PersistenceError], None]


class InspectionService:
    def __init__(
        self,
        repository: InspectionRepository,
        *,
        picklists: Optional[PickLists] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.repository = repository
        self.picklists = picklists
        self._today = today
        self._records: List[InspectionRecord] = []
        self._editing_id: Optional[str] = None
        self._failure_hooks: List[FailureHook] = []
        self._background: Set[asyncio.Task] = set()
        self.loaded = False

    # -- collection ------------------------------------------------------------
    @property
    def records(self) -> Tuple[InspectionRecord, ...]:
        return tuple(self._records)

    async def load(self, *, seed: Optional[bool] = None) -> Tuple[InspectionRecord, ...]:
        """Replace the collection with the store contents, seeding an empty store."""
        records = await self.repository.get_all()
        if seed is None:
            seed = config.seed_demo_data()
        if not records and seed:
            logger.info("Inspection store is empty; writing demonstration records")
            for record in seed_records():
                await self.repository.put(record)
            records = await self.repository.get_all()
        self._records = list(records)
        self.loaded = True
        if self.picklists is not None:
            self.picklists.ensure(INSPECTORS, AppState.get_active_user_name())
        return self.records

    def _index(self, record_id: str) -> int:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        raise NotFoundError("Inspection", record_id)

    def get(self, record_id: str) -> InspectionRecord:
        return self._records[self._index(record_id)]

    # -- submission ------------------------------------------------------------
    def _unique_record_id(self) -> str:
        record_id = new_record_id()
        existing = {record.id for record in self._records}
        candidate, n = record_id, 1
        while candidate in existing:
            n += 1
            candidate = f"{record_id}-{n}"
        return candidate

    def build_record(
        self,
        location: str,
        inspection_date,
        inspector_name: str,
        findings: Iterable[Finding],
        *,
        record_id: Optional[str] = None,
        inspector_id: Optional[str] = None,
        summary: Optional[str] = None,
        locale: Optional[str] = None,
    ) -> InspectionRecord:
        """Validate a submission and derive its overall risk and summary."""
        location = (location or "").strip()
        inspector_name = (inspector_name or "").strip()
        findings = list(findings)
        if not location:
            raise ValidationError("Location is required")
        if not inspector_name:
            raise ValidationError("Inspector is required")
        if not findings:
            raise ValidationError("An inspection needs at least one checklist item")
        seen: Set[str] = set()
        for finding in findings:
            if not finding.category.strip():
                raise ValidationError(f"Checklist item {finding.id!r} has no category")
            if finding.id in seen:
                raise ValidationError(f"Duplicate checklist item id {finding.id!r}")
            seen.add(finding.id)
        if not (summary or "").strip():
            at_risk = sum(1 for finding in findings if finding.is_at_risk)
            summary = localization.inspection_summary(
                location, at_risk, localization.normalize_locale(locale)
            )
        return InspectionRecord(
            id=record_id or self._unique_record_id(),
            date=parse_date(inspection_date) or self._today(),
            location=location,
            inspector_name=inspector_name,
            inspector_id=inspector_id if inspector_id is not None else str(AppState.get_active_user_id() or ""),
            findings=tuple(findings),
            summary=summary,
        )

    async def submit(
        self,
        location: str,
        inspection_date,
        inspector_name: str,
        findings: Iterable[Finding],
        *,
        record_id: Optional[str] = None,
        inspector_id: Optional[str] = None,
        summary: Optional[str] = None,
        locale: Optional[str] = None,
    ) -> InspectionRecord:
        """Persist a new record, or replace the one being edited."""
        record_id = record_id or self._editing_id
        if record_id is not None:
            existing = self.get(record_id)
            if inspector_id is None:
                inspector_id = existing.inspector_id
        record = self.build_record(
            location,
            inspection_date,
            inspector_name,
            findings,
            record_id=record_id,
            inspector_id=inspector_id,
            summary=summary,
            locale=locale,
        )
        await self.repository.put(record)
        if record_id is None:
            self._records.insert(0, record)
            logger.info("Saved inspection %s at %s", record.id, record.location)
        else:
            try:
                self._records[self._index(record.id)] = record
            except NotFoundError:
                # deleted while the write was in flight; the deletion wins
                logger.warning("Inspection %s was deleted during its edit; discarding the edit", record.id)
                await self.repository.delete(record.id)
                raise
            if self._editing_id == record.id:
                self._editing_id = None
            logger.info("Updated inspection %s", record.id)
        return record

    # -- edit session ----------------------------------------------------------
    @property
    def editing(self) -> Optional[InspectionRecord]:
        if self._editing_id is None:
            return None
        try:
            return self.get(self._editing_id)
        except NotFoundError:
            self._editing_id = None
            return None

    def begin_edit(self, record_id: str) -> InspectionRecord:
        record = self.get(record_id)
        self._editing_id = record.id
        return record

    def cancel_edit(self) -> None:
        self._editing_id = None

    # -- deletion --------------------------------------------------------------
    async def delete(self, record_id: str) -> None:
        self._index(record_id)
        await self.repository.delete(record_id)
        self._records = [record for record in self._records if record.id != record_id]
        if self._editing_id == record_id:
            logger.info("Cancelled edit of deleted inspection %s", record_id)
            self._editing_id = None

    # -- targeted finding patch ------------------------------------------------
    def add_failure_hook(self, hook: FailureHook) -> None:
        self._failure_hooks.append(hook)

    def apply_patch(self, record_id: str, finding_id: str, patch: FindingPatch) -> InspectionRecord:
        """Apply ``patch`` to the in-memory collection and return the updated record."""
        index = self._index(record_id)
        record = self._records[index]
        finding = record.get_finding(finding_id)
        updated = record.replace_finding(patch.apply(finding))
        self._records[index] = updated
        return updated

    async def _persist_patch(self, record_id: str) -> None:
        try:
            current = self.get(record_id)
        except NotFoundError:
            logger.info("Inspection %s was deleted before its patch was saved", record_id)
            return
        try:
            await self.repository.put(current)
        except PersistenceError as exc:
            logger.error("Failed to save patch to inspection %s: %s", record_id, exc)
            for hook in list(self._failure_hooks):
                try:
                    hook(current, exc)
                except Exception:
                    logger.exception("Patch failure hook raised for %s", record_id)
            await self._reconcile(record_id)
            raise

    async def _reconcile(self, record_id: str) -> None:
        try:
            stored = await self.repository.get(record_id)
        except PersistenceError as exc:
            logger.warning("Could not reload inspection %s; keeping unsaved changes: %s", record_id, exc)
            return
        if stored is None:
            self._records = [record for record in self._records if record.id != record_id]
            logger.warning("Inspection %s is not in the store; removed it", record_id)
            return
        try:
            self._records[self._index(record_id)] = stored
        except NotFoundError:
            return
        logger.warning("Reverted inspection %s to its stored version", record_id)

    async def patch_finding(self, record_id: str, finding_id: str, patch: FindingPatch) -> InspectionRecord:
        """Update one finding immediately, then persist the whole record.

        Raises ``NotFoundError`` before touching anything when the record or
        finding is unknown, and ``PersistenceError`` after reconciling with
        the store when the write fails.
        """
        updated = self.apply_patch(record_id, finding_id, patch)
        await self._persist_patch(record_id)
        return updated

    def patch_finding_nowait(
        self, record_id: str, finding_id: str, patch: FindingPatch
    ) -> Tuple[InspectionRecord, asyncio.Task]:
        """Apply the patch now and persist it in a background task."""
        updated = self.apply_patch(record_id, finding_id, patch)
        task = asyncio.get_running_loop().create_task(self._persist_patch(record_id))
        self._background.add(task)
        task.add_done_callback(self._background_done)
        return updated, task

    def _background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            # already reported through the failure hooks
            logger.debug("Background patch failed: %s", task.exception())

    async def drain(self) -> None:
        """Wait for background patch writes to settle."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)


__all__ = ["InspectionService", "FailureHook"]
