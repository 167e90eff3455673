"""Pydantic schemas for safety inspection REST payloads."""

from __future__ import annotations

import datetime as dt
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator

from .followup import DashboardStats
from .models import (
    ActionStatus,
    ComplianceStatus,
    Finding,
    FindingLogEntry,
    InspectionRecord,
    Likelihood,
    RiskLevel,
    Severity,
)
from .patches import ActionStatusPatch, FindingPatch, TargetDatePatch
from .weekly.models import ReportStatus, WeeklyReportRecord, WeeklyReportView


def _not_blank(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("Field is required")
    return value.strip()


# -- inspections ------------------------------------------------------------------
class FindingIn(BaseModel):
    id: Optional[str] = None
    category: str
    status: ComplianceStatus
    observation: str = ""
    remedial_action: str = ""
    photo_url: Optional[str] = None
    photo_data: Optional[str] = None
    likelihood: Likelihood = Likelihood.POSSIBLE
    severity: Severity = Severity.MODERATE
    action_status: ActionStatus = ActionStatus.PENDING
    target_date: Optional[dt.date] = None

    @field_validator("category")
    @classmethod
    def category_required(cls, value: str) -> str:
        return _not_blank(value)

    def to_finding(self) -> Finding:
        if self.status is ComplianceStatus.AT_RISK:
            return Finding.at_risk(
                self.category,
                observation=self.observation,
                remedial_action=self.remedial_action,
                likelihood=self.likelihood,
                severity=self.severity,
                action_status=self.action_status,
                target_date=self.target_date,
                finding_id=self.id,
                photo_url=self.photo_url,
                photo_data=self.photo_data,
            )
        return Finding.safe(
            self.category,
            observation=self.observation,
            finding_id=self.id,
            photo_url=self.photo_url,
            photo_data=self.photo_data,
        )


class InspectionSubmit(BaseModel):
    location: str
    date: Optional[dt.date] = None
    inspector_name: str
    inspector_id: Optional[str] = None
    summary: Optional[str] = None
    locale: Optional[str] = None
    findings: List[FindingIn]


class FindingRead(BaseModel):
    id: str
    category: str
    description: str
    status: ComplianceStatus
    observation: str
    remedial_action: str
    photo_url: Optional[str]
    photo_data: Optional[str]
    risk_likelihood: Optional[Likelihood] = None
    risk_severity: Optional[Severity] = None
    risk_level: Optional[RiskLevel] = None
    action_status: Optional[ActionStatus] = None
    target_date: Optional[dt.date] = None

    @classmethod
    def from_finding(cls, finding: Finding) -> "FindingRead":
        return cls(
            id=finding.id,
            category=finding.category,
            description=finding.description,
            status=finding.status,
            observation=finding.observation,
            remedial_action=finding.remedial_action,
            photo_url=finding.photo_url,
            photo_data=finding.photo_data,
            risk_likelihood=finding.risk.likelihood if finding.risk else None,
            risk_severity=finding.risk.severity if finding.risk else None,
            risk_level=finding.risk_level,
            action_status=finding.action_status,
            target_date=finding.target_date,
        )


class InspectionRead(BaseModel):
    id: str
    date: dt.date
    location: str
    inspector_id: str
    inspector_name: str
    status: str
    overall_risk: RiskLevel
    summary: str
    findings: List[FindingRead]

    @classmethod
    def from_record(cls, record: InspectionRecord) -> "InspectionRead":
        return cls(
            id=record.id,
            date=record.date,
            location=record.location,
            inspector_id=record.inspector_id,
            inspector_name=record.inspector_name,
            status=record.status.value,
            overall_risk=record.overall_risk,
            summary=record.summary,
            findings=[FindingRead.from_finding(f) for f in record.findings],
        )


class ActionStatusPatchIn(BaseModel):
    op: Literal["action_status"]
    action_status: ActionStatus

    def to_patch(self) -> FindingPatch:
        return ActionStatusPatch(self.action_status)


class TargetDatePatchIn(BaseModel):
    op: Literal["target_date"]
    target_date: Optional[dt.date] = None

    def to_patch(self) -> FindingPatch:
        return TargetDatePatch(self.target_date)


FindingPatchIn = Annotated[Union[ActionStatusPatchIn, TargetDatePatchIn], Field(discriminator="op")]


class FindingPatchBody(RootModel[FindingPatchIn]):
    """Patch body tagged by ``op``."""

    def to_patch(self) -> FindingPatch:
        return self.root.to_patch()


class FollowUpEntryRead(BaseModel):
    inspection_id: str
    inspection_date: dt.date
    location: str
    inspector_name: str
    finding: FindingRead

    @classmethod
    def from_entry(cls, entry: FindingLogEntry) -> "FollowUpEntryRead":
        return cls(
            inspection_id=entry.inspection_id,
            inspection_date=entry.inspection_date,
            location=entry.location,
            inspector_name=entry.inspector_name,
            finding=FindingRead.from_finding(entry.finding),
        )


class DashboardRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_inspections: int
    critical_hazards: int
    total_violations: int
    open_actions: int

    @classmethod
    def from_stats(cls, stats: DashboardStats) -> "DashboardRead":
        return cls.model_validate(stats)


class PickListValue(BaseModel):
    value: str

    @field_validator("value")
    @classmethod
    def value_required(cls, value: str) -> str:
        return _not_blank(value)


class PickListRename(BaseModel):
    old: str
    new: str

    @field_validator("new")
    @classmethod
    def new_required(cls, value: str) -> str:
        return _not_blank(value)


# -- weekly reports ---------------------------------------------------------------
class PendingWeekRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    week_start: dt.date
    week_end: dt.date
    count: int


class DraftRequest(BaseModel):
    week_start: dt.date
    locale: Optional[str] = None


class WeeklyReportIn(BaseModel):
    id: str = ""
    week_start: dt.date
    week_end: dt.date
    report_date: dt.date
    prepared_by: str = ""
    prepared_by_title: str = ""
    endorsed_by: str = ""
    summary: str = ""

    def to_report(self) -> WeeklyReportRecord:
        return WeeklyReportRecord(
            id=self.id,
            week_start=self.week_start,
            week_end=self.week_end,
            report_date=self.report_date,
            prepared_by=self.prepared_by,
            prepared_by_title=self.prepared_by_title,
            endorsed_by=self.endorsed_by,
            summary=self.summary,
        )


class WeeklyReportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    week_start: dt.date
    week_end: dt.date
    report_date: dt.date
    prepared_by: str
    prepared_by_title: str
    endorsed_by: str
    summary: str
    status: ReportStatus
    created_at: str
    updated_at: str


class WeeklyReportViewRead(BaseModel):
    report: WeeklyReportRead
    report_number: str
    period_label: str
    total_inspections: int
    critical_hazards: int
    inspections: List[InspectionRead]
    findings: List[FollowUpEntryRead]

    @classmethod
    def from_view(cls, view: WeeklyReportView, locale: str) -> "WeeklyReportViewRead":
        return cls(
            report=WeeklyReportRead.model_validate(view.report),
            report_number=view.report_number,
            period_label=view.period_label(locale),
            total_inspections=view.total_inspections,
            critical_hazards=view.critical_hazards,
            inspections=[InspectionRead.from_record(r) for r in view.inspections],
            findings=[FollowUpEntryRead.from_entry(e) for e in view.findings],
        )


class SummaryRequest(BaseModel):
    report: WeeklyReportIn
    locale: Optional[str] = None


# -- narrative --------------------------------------------------------------------
class AssessRequest(BaseModel):
    observation: str
    category: str
    locale: Optional[str] = None


class AssessRead(BaseModel):
    risk: str
    action: str


__all__ = [
    "ActionStatusPatchIn",
    "AssessRead",
    "AssessRequest",
    "DashboardRead",
    "DraftRequest",
    "FindingIn",
    "FindingPatchBody",
    "FindingPatchIn",
    "FindingRead",
    "FollowUpEntryRead",
    "InspectionRead",
    "InspectionSubmit",
    "PendingWeekRead",
    "PickListRename",
    "PickListValue",
    "SummaryRequest",
    "TargetDatePatchIn",
    "WeeklyReportIn",
    "WeeklyReportRead",
    "WeeklyReportViewRead",
]
