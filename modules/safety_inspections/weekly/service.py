"""Weekly report drafting, saving and viewing."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Callable, List, Optional, Tuple

from .. import localization
from ..exceptions import NotFoundError, ValidationError
from ..narrative.generator import NarrativeGenerator
from ..picklists import INSPECTORS, MANAGERS, PickLists
from ..repository import WeeklyReportRepository
from ..service import InspectionService
from .models import PendingWeek, ReportStatus, WeeklyReportRecord, WeeklyReportView, utcnow_iso
from .projection import covered_week_starts, pending_weeks, project_week, records_in_window
from .weeks import report_number, week_of

logger = logging.getLogger(__name__)


class WeeklyReportService:
    """Owns saved weekly reports and joins them with live inspection data."""

    def __init__(
        self,
        repository: WeeklyReportRepository,
        inspections: InspectionService,
        *,
        picklists: Optional[PickLists] = None,
        narrative: Optional[NarrativeGenerator] = None,
        today: Callable[[], date] = date.today,
        now: Callable[[], str] = utcnow_iso,
    ) -> None:
        self.repository = repository
        self.inspections = inspections
        self.picklists = picklists
        self.narrative = narrative
        self._today = today
        self._now = now
        self._reports: List[WeeklyReportRecord] = []
        self.loaded = False

    @property
    def reports(self) -> Tuple[WeeklyReportRecord, ...]:
        return tuple(self._reports)

    async def load(self) -> Tuple[WeeklyReportRecord, ...]:
        self._reports = list(await self.repository.get_all())
        self.loaded = True
        return self.reports

    def _index(self, report_id: str) -> int:
        for index, report in enumerate(self._reports):
            if report.id == report_id:
                return index
        raise NotFoundError("Weekly report", report_id)

    def get(self, report_id: str) -> WeeklyReportRecord:
        return self._reports[self._index(report_id)]

    def pending_weeks(self) -> List[PendingWeek]:
        return pending_weeks(self.inspections.records, self._reports)

    # -- drafting --------------------------------------------------------------
    def _default_pick(self, kind: str) -> str:
        return self.picklists.last_used(kind) if self.picklists is not None else ""

    def create_draft(self, week_start: date, *, locale: Optional[str] = None) -> WeeklyReportRecord:
        """Return an unsaved report for the week containing ``week_start``."""
        bucket = week_of(week_start)
        if bucket.start in covered_week_starts(self._reports):
            raise ValidationError(f"A weekly report already covers the week of {bucket.start.isoformat()}")
        return WeeklyReportRecord(
            id="",
            week_start=bucket.start,
            week_end=bucket.end,
            report_date=self._today(),
            prepared_by=self._default_pick(INSPECTORS),
            prepared_by_title=localization.preparer_title(localization.normalize_locale(locale)),
            endorsed_by=self._default_pick(MANAGERS),
        )

    async def generate_summary(self, report: WeeklyReportRecord, *, locale: Optional[str] = None) -> WeeklyReportRecord:
        """Return ``report`` with a generated summary; nothing is saved."""
        if self.narrative is None:
            self.narrative = NarrativeGenerator()
        generator = self.narrative
        records = records_in_window(self.inspections.records, report.week_start, report.week_end)
        summary = await generator.weekly_summary(records, locale)
        return replace(report, summary=summary)

    # -- persistence -----------------------------------------------------------
    async def _save(self, report: WeeklyReportRecord, status: ReportStatus) -> WeeklyReportRecord:
        bucket = week_of(report.week_start)
        if (report.week_start, report.week_end) != (bucket.start, bucket.end):
            raise ValidationError(
                f"Weekly report must cover {bucket.start.isoformat()} to {bucket.end.isoformat()}, "
                f"not {report.week_start.isoformat()} to {report.week_end.isoformat()}"
            )
        report_id = report.id or report_number(report.week_start)
        try:
            created_at = self.get(report_id).created_at
        except NotFoundError:
            created_at = ""
        now = self._now()
        saved = replace(
            report,
            id=report_id,
            status=status,
            created_at=created_at or report.created_at or now,
            updated_at=now,
        )
        await self.repository.put(saved)
        self._publish(saved)
        if self.picklists is not None:
            if saved.prepared_by:
                self.picklists.remember(INSPECTORS, saved.prepared_by)
            if saved.endorsed_by:
                self.picklists.remember(MANAGERS, saved.endorsed_by)
        logger.info("Saved weekly report %s as %s", saved.id, saved.status.value)
        return saved

    def _publish(self, saved: WeeklyReportRecord) -> None:
        reports = [report for report in self._reports if report.id != saved.id]
        reports.append(saved)
        reports.sort(key=lambda report: report.week_start, reverse=True)
        self._reports = reports

    async def save_draft(self, report: WeeklyReportRecord) -> WeeklyReportRecord:
        return await self._save(report, ReportStatus.DRAFT)

    async def submit(self, report: WeeklyReportRecord) -> WeeklyReportRecord:
        return await self._save(report, ReportStatus.SUBMITTED)

    async def delete(self, report_id: str) -> None:
        self._index(report_id)
        await self.repository.delete(report_id)
        self._reports = [report for report in self._reports if report.id != report_id]
        logger.info("Deleted weekly report %s", report_id)

    # -- viewing ---------------------------------------------------------------
    def view(self, report: WeeklyReportRecord | str) -> WeeklyReportView:
        """Join ``report`` with the current contents of its week."""
        if isinstance(report, str):
            report = self.get(report)
        projection = project_week(self.inspections.records, report.week_start, report.week_end)
        return WeeklyReportView(report, projection)


__all__ = ["WeeklyReportService"]
