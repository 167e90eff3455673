"""Weekly report records and their live views."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

from ..exceptions import ValidationError
from ..models import FindingLogEntry, InspectionRecord, parse_date
from .weeks import period_label, report_number


def utcnow_iso() -> str:
    """Return the current UTC timestamp as ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class ReportStatus(str, Enum):
    DRAFT = "Draft"
    SUBMITTED = "Submitted"

    @classmethod
    def normalize(cls, value) -> "ReportStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or cls.DRAFT.value).strip())
        except ValueError as exc:
            raise ValidationError(f"Unsupported report status: {value!r}") from exc


@dataclass(slots=True, frozen=True)
class WeeklyReportRecord:
    """Authored fields of a weekly report.

    Inspection content is never stored here; it is projected from the
    live inspection collection each time the report is viewed.
    """

    id: str
    week_start: date
    week_end: date
    report_date: date
    prepared_by: str = ""
    prepared_by_title: str = ""
    endorsed_by: str = ""
    summary: str = ""
    status: ReportStatus = ReportStatus.DRAFT
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        for name in ("week_start", "week_end", "report_date"):
            value = parse_date(getattr(self, name))
            if value is None:
                raise ValidationError(f"Weekly report requires {name}")
            object.__setattr__(self, name, value)
        if self.week_end < self.week_start:
            raise ValidationError("Weekly report ends before it starts")
        object.__setattr__(self, "status", ReportStatus.normalize(self.status))

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
            "report_date": self.report_date.isoformat(),
            "prepared_by": self.prepared_by,
            "prepared_by_title": self.prepared_by_title,
            "endorsed_by": self.endorsed_by,
            "summary": self.summary,
            "status": self.status.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> "WeeklyReportRecord":
        return cls(
            id=str(data["id"]),
            week_start=data.get("week_start"),
            week_end=data.get("week_end"),
            report_date=data.get("report_date") or data.get("week_end"),
            prepared_by=data.get("prepared_by") or "",
            prepared_by_title=data.get("prepared_by_title") or "",
            endorsed_by=data.get("endorsed_by") or "",
            summary=data.get("summary") or "",
            status=data.get("status") or ReportStatus.DRAFT,
            created_at=data.get("created_at") or "",
            updated_at=data.get("updated_at") or "",
        )


@dataclass(slots=True, frozen=True)
class PendingWeek:
    week_start: date
    week_end: date
    count: int


@dataclass(slots=True, frozen=True)
class WeekProjection:
    """Inspections inside a week window and their at-risk findings log."""

    start: date
    end: date
    inspections: Tuple[InspectionRecord, ...] = field(default_factory=tuple)
    findings: Tuple[FindingLogEntry, ...] = field(default_factory=tuple)

    @property
    def total_inspections(self) -> int:
        return len(self.inspections)

    @property
    def critical_hazards(self) -> int:
        return sum(1 for entry in self.findings if entry.finding.is_critical)


@dataclass(slots=True, frozen=True)
class WeeklyReportView:
    """A weekly report joined with the projection of its week."""

    report: WeeklyReportRecord
    projection: WeekProjection

    @property
    def inspections(self) -> Tuple[InspectionRecord, ...]:
        return self.projection.inspections

    @property
    def findings(self) -> Tuple[FindingLogEntry, ...]:
        return self.projection.findings

    @property
    def total_inspections(self) -> int:
        return self.projection.total_inspections

    @property
    def critical_hazards(self) -> int:
        return self.projection.critical_hazards

    @property
    def report_number(self) -> str:
        return self.report.id or report_number(self.report.week_start)

    def period_label(self, locale: str) -> str:
        return period_label(self.report.week_start, locale)


__all__ = [
    "PendingWeek",
    "ReportStatus",
    "WeekProjection",
    "WeeklyReportRecord",
    "WeeklyReportView",
    "utcnow_iso",
]
