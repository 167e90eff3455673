"""Follow-up view of open findings and dashboard counters."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from .models import ActionStatus, FindingLogEntry, InspectionRecord, flatten_at_risk


class SortOption(str, Enum):
    DATE_DESC = "date_desc"
    DATE_ASC = "date_asc"
    LOCATION = "location"
    CATEGORY = "category"


def _matches(entry: FindingLogEntry, needle: str) -> bool:
    haystacks = (entry.location, entry.finding.category, entry.finding.observation)
    return any(needle in (text or "").casefold() for text in haystacks)


def follow_up_findings(
    records: Iterable[InspectionRecord],
    *,
    search: str = "",
    status: Optional[ActionStatus] = None,
    sort: SortOption = SortOption.DATE_DESC,
) -> List[FindingLogEntry]:
    """Return at-risk findings across ``records`` filtered and sorted for follow-up.

    ``status=None`` keeps every action status. Text sorts are case-folded;
    all sorts are stable so ties keep collection order.
    """
    entries = flatten_at_risk(records)
    needle = (search or "").strip().casefold()
    if needle:
        entries = [entry for entry in entries if _matches(entry, needle)]
    if status is not None:
        status = ActionStatus.normalize(status)
        entries = [entry for entry in entries if entry.finding.action_status is status]

    sort = SortOption(sort)
    if sort is SortOption.DATE_ASC:
        entries.sort(key=lambda entry: entry.inspection_date)
    elif sort is SortOption.LOCATION:
        entries.sort(key=lambda entry: entry.location.casefold())
    elif sort is SortOption.CATEGORY:
        entries.sort(key=lambda entry: entry.finding.category.casefold())
    else:
        entries.sort(key=lambda entry: entry.inspection_date, reverse=True)
    return entries


@dataclass(slots=True, frozen=True)
class DashboardStats:
    total_inspections: int
    critical_hazards: int
    total_violations: int
    open_actions: int


def dashboard_stats(records: Iterable[InspectionRecord]) -> DashboardStats:
    records = list(records)
    entries = flatten_at_risk(records)
    return DashboardStats(
        total_inspections=len(records),
        critical_hazards=sum(1 for entry in entries if entry.finding.is_critical),
        total_violations=len(entries),
        open_actions=sum(1 for entry in entries if entry.finding.is_open),
    )


__all__ = ["DashboardStats", "SortOption", "dashboard_stats", "follow_up_findings"]
