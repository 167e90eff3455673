"""Live weekly projection over the inspection collection."""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List

from ..models import FindingLogEntry, InspectionRecord, flatten_at_risk
from .models import PendingWeek, WeekProjection, WeeklyReportRecord
from .weeks import week_of


def records_in_window(records: Iterable[InspectionRecord], start: date, end: date) -> List[InspectionRecord]:
    return [record for record in records if start <= record.date <= end]


def findings_log(records: Iterable[InspectionRecord]) -> List[FindingLogEntry]:
    """At-risk findings of ``records`` ordered by inspection date ascending."""
    return sorted(flatten_at_risk(records), key=lambda entry: entry.inspection_date)


def project_week(records: Iterable[InspectionRecord], start: date, end: date) -> WeekProjection:
    inspections = records_in_window(records, start, end)
    return WeekProjection(start, end, tuple(inspections), tuple(findings_log(inspections)))


def pending_weeks(
    records: Iterable[InspectionRecord],
    reports: Iterable[WeeklyReportRecord],
) -> List[PendingWeek]:
    """Weeks holding inspections that no saved report covers yet.

    A week is covered only by a report whose ``week_start`` equals the
    bucket's Monday exactly. Newest week first.
    """
    covered = covered_week_starts(reports)
    ends: Dict[date, date] = {}
    counts: Dict[date, int] = {}
    for record in records:
        bucket = week_of(record.date)
        if bucket.start in covered:
            continue
        ends[bucket.start] = bucket.end
        counts[bucket.start] = counts.get(bucket.start, 0) + 1
    weeks = [PendingWeek(start, ends[start], count) for start, count in counts.items()]
    weeks.sort(key=lambda week: week.week_start, reverse=True)
    return weeks


def covered_week_starts(reports: Iterable[WeeklyReportRecord]) -> set[date]:
    return {report.week_start for report in reports}


__all__ = [
    "covered_week_starts",
    "findings_log",
    "pending_weeks",
    "project_week",
    "records_in_window",
]
