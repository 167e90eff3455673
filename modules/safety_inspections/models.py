"""Domain models for factory safety inspections."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from .exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DateLike = Union[date, str, None]

NOT_APPLICABLE = "N/A"


class ComplianceStatus(str, Enum):
    """Outcome of a single checklist item."""

    SAFE = "Safe"
    AT_RISK = "At Risk"

    @classmethod
    def normalize(cls, value: Union[str, "ComplianceStatus"]) -> "ComplianceStatus":
        """Return a canonical status; the legacy ``N/A`` value reads as Safe."""
        if isinstance(value, cls):
            return value
        if not value:
            raise ValidationError("Compliance status is required")
        value = str(value).strip()
        if value == NOT_APPLICABLE:
            return cls.SAFE
        try:
            return cls(value)
        except ValueError as exc:
            raise ValidationError(f"Unsupported compliance status: {value}") from exc


class _RankedEnum(str, Enum):
    @property
    def rank(self) -> int:
        return list(type(self)).index(self) + 1

    @classmethod
    def normalize(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip())
        except ValueError as exc:
            raise ValidationError(f"Unsupported {cls.__name__.lower()}: {value!r}") from exc


class Likelihood(_RankedEnum):
    RARE = "Rare"
    UNLIKELY = "Unlikely"
    POSSIBLE = "Possible"
    LIKELY = "Likely"
    ALMOST_CERTAIN = "Almost Certain"


class Severity(_RankedEnum):
    NEGLIGIBLE = "Negligible"
    MINOR = "Minor"
    MODERATE = "Moderate"
    MAJOR = "Major"
    CATASTROPHIC = "Catastrophic"


class RiskLevel(_RankedEnum):
    """Risk band; ``rank`` gives the Low < Medium < High < Extreme order."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    EXTREME = "Extreme"


class ActionStatus(str, Enum):
    PENDING = "Pending"
    FOLLOW_UP = "Follow-up"
    COMPLETED = "Completed"

    @classmethod
    def normalize(cls, value: Union[str, "ActionStatus", None]) -> "ActionStatus":
        """Return a canonical action status; a missing value means Pending."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.PENDING
        try:
            return cls(str(value).strip())
        except ValueError as exc:
            raise ValidationError(f"Unsupported action status: {value!r}") from exc


class InspectionStatus(str, Enum):
    COMPLETED = "Completed"


CRITICAL_LEVELS = frozenset({RiskLevel.HIGH, RiskLevel.EXTREME})
OPEN_ACTION_STATUSES = frozenset({ActionStatus.PENDING, ActionStatus.FOLLOW_UP})


def parse_date(value: DateLike) -> Optional[date]:
    """Return ``value`` as a calendar date; ISO strings may carry a time part."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise ValidationError(f"Invalid calendar date: {value!r}") from exc


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def new_finding_id() -> str:
    return str(time.time_ns() // 1000)


def new_record_id() -> str:
    return f"INS-{time.time_ns() // 1_000_000}"


@dataclass(slots=True, frozen=True)
class RiskAssessment:
    """Likelihood and severity of an at-risk finding with the derived band."""

    likelihood: Likelihood
    severity: Severity
    level: RiskLevel

    @classmethod
    def assess(cls, likelihood, severity) -> "RiskAssessment":
        from .risk import score

        likelihood = Likelihood.normalize(likelihood)
        severity = Severity.normalize(severity)
        return cls(likelihood, severity, score(likelihood, severity))


@dataclass(slots=True, frozen=True)
class Remediation:
    action_status: ActionStatus = ActionStatus.PENDING
    target_date: Optional[date] = None


@dataclass(slots=True, frozen=True)
class Finding:
    """One checklist outcome within an inspection record.

    At-risk findings always carry both a :class:`RiskAssessment` and a
    :class:`Remediation`; safe findings carry neither. Findings are
    immutable, so an update produces a replacement finding.
    """

    id: str
    category: str
    status: ComplianceStatus
    observation: str = ""
    remedial_action: str = ""
    description: str = ""
    photo_url: Optional[str] = None
    photo_data: Optional[str] = None
    risk: Optional[RiskAssessment] = None
    remediation: Optional[Remediation] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", ComplianceStatus.normalize(self.status))
        if self.status is ComplianceStatus.AT_RISK:
            if self.risk is None or self.remediation is None:
                raise ValidationError(
                    f"At-risk finding {self.id!r} requires a risk assessment and remediation"
                )
        elif self.risk is not None or self.remediation is not None:
            raise ValidationError(
                f"Safe finding {self.id!r} cannot carry a risk assessment or remediation"
            )

    # -- factories -------------------------------------------------------------
    @classmethod
    def safe(
        cls,
        category: str,
        *,
        observation: str = "",
        finding_id: Optional[str] = None,
        photo_url: Optional[str] = None,
        photo_data: Optional[str] = None,
    ) -> "Finding":
        return cls(
            id=finding_id or new_finding_id(),
            category=category,
            status=ComplianceStatus.SAFE,
            observation=observation,
            remedial_action=NOT_APPLICABLE,
            description=f"Inspection of {category}",
            photo_url=photo_url,
            photo_data=photo_data,
        )

    @classmethod
    def at_risk(
        cls,
        category: str,
        *,
        observation: str = "",
        remedial_action: str = "",
        likelihood=Likelihood.POSSIBLE,
        severity=Severity.MODERATE,
        action_status=ActionStatus.PENDING,
        target_date: DateLike = None,
        finding_id: Optional[str] = None,
        photo_url: Optional[str] = None,
        photo_data: Optional[str] = None,
    ) -> "Finding":
        return cls(
            id=finding_id or new_finding_id(),
            category=category,
            status=ComplianceStatus.AT_RISK,
            observation=observation,
            remedial_action=remedial_action,
            description=f"Inspection of {category}",
            photo_url=photo_url,
            photo_data=photo_data,
            risk=RiskAssessment.assess(likelihood, severity),
            remediation=Remediation(ActionStatus.normalize(action_status), parse_date(target_date)),
        )

    # -- derived views ---------------------------------------------------------
    @property
    def is_at_risk(self) -> bool:
        return self.status is ComplianceStatus.AT_RISK

    @property
    def risk_level(self) -> Optional[RiskLevel]:
        return self.risk.level if self.risk else None

    @property
    def action_status(self) -> Optional[ActionStatus]:
        return self.remediation.action_status if self.remediation else None

    @property
    def target_date(self) -> Optional[date]:
        return self.remediation.target_date if self.remediation else None

    @property
    def is_critical(self) -> bool:
        return self.risk_level in CRITICAL_LEVELS

    @property
    def is_open(self) -> bool:
        return self.action_status in OPEN_ACTION_STATUSES

    # -- whole-item replacement ------------------------------------------------
    def _require_remediation(self) -> Remediation:
        if self.remediation is None:
            raise ValidationError(f"Finding {self.id!r} is safe and has no remedial action to track")
        return self.remediation

    def with_action_status(self, status) -> "Finding":
        remediation = self._require_remediation()
        return replace(self, remediation=replace(remediation, action_status=ActionStatus.normalize(status)))

    def with_target_date(self, target: DateLike) -> "Finding":
        remediation = self._require_remediation()
        return replace(self, remediation=replace(remediation, target_date=parse_date(target)))

    # -- serialization ---------------------------------------------------------
    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "description": self.description,
            "status": self.status.value,
            "observation": self.observation,
            "remedial_action": self.remedial_action,
            "photo_url": self.photo_url,
            "photo_data": self.photo_data,
            "risk_likelihood": self.risk.likelihood.value if self.risk else None,
            "risk_severity": self.risk.severity.value if self.risk else None,
            "risk_level": self.risk.level.value if self.risk else None,
            "action_status": self.action_status.value if self.action_status else None,
            "proposed_completion_date": _iso(self.target_date),
        }

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> "Finding":
        status = ComplianceStatus.normalize(data.get("status") or "")
        risk = remediation = None
        if status is ComplianceStatus.AT_RISK:
            likelihood = data.get("risk_likelihood")
            severity = data.get("risk_severity")
            if not likelihood or not severity:
                raise ValidationError(f"At-risk finding {data.get('id')!r} is missing its risk rating")
            risk = RiskAssessment.assess(likelihood, severity)
            stored = data.get("risk_level")
            if stored and stored != risk.level.value:
                logger.warning(
                    "Finding %s stored risk level %s; recomputed %s",
                    data.get("id"),
                    stored,
                    risk.level.value,
                )
            remediation = Remediation(
                ActionStatus.normalize(data.get("action_status")),
                parse_date(data.get("proposed_completion_date")),
            )
        return cls(
            id=str(data["id"]),
            category=data.get("category") or "",
            status=status,
            observation=data.get("observation") or "",
            remedial_action=data.get("remedial_action") or "",
            description=data.get("description") or "",
            photo_url=data.get("photo_url") or None,
            photo_data=data.get("photo_data") or None,
            risk=risk,
            remediation=remediation,
        )


@dataclass(slots=True, frozen=True)
class InspectionRecord:
    """A completed inspection: where, when, who, and its ordered findings."""

    id: str
    date: date
    location: str
    inspector_name: str
    findings: Tuple[Finding, ...] = field(default_factory=tuple)
    inspector_id: str = ""
    summary: str = ""
    status: InspectionStatus = InspectionStatus.COMPLETED

    def __post_init__(self) -> None:
        object.__setattr__(self, "findings", tuple(self.findings))
        parsed = parse_date(self.date)
        if parsed is None:
            raise ValidationError(f"Inspection {self.id!r} requires a date")
        object.__setattr__(self, "date", parsed)

    @property
    def overall_risk(self) -> RiskLevel:
        from .risk import overall_risk

        return overall_risk(self.findings)

    @property
    def at_risk_findings(self) -> Tuple[Finding, ...]:
        return tuple(f for f in self.findings if f.is_at_risk)

    def get_finding(self, finding_id: str) -> Finding:
        for finding in self.findings:
            if finding.id == finding_id:
                return finding
        raise NotFoundError("Finding", finding_id, self.id)

    def replace_finding(self, finding: Finding) -> "InspectionRecord":
        """Return a copy with ``finding`` swapped in at its existing position."""
        self.get_finding(finding.id)
        findings = tuple(finding if f.id == finding.id else f for f in self.findings)
        return replace(self, findings=findings)

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "location": self.location,
            "inspector_id": self.inspector_id,
            "inspector_name": self.inspector_name,
            "items": [f.to_record() for f in self.findings],
            "risk_level": self.overall_risk.value,
            "summary": self.summary,
            "status": self.status.value,
        }

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> "InspectionRecord":
        return cls(
            id=str(data["id"]),
            date=data.get("date"),
            location=data.get("location") or "",
            inspector_name=data.get("inspector_name") or "",
            inspector_id=data.get("inspector_id") or "",
            findings=tuple(Finding.from_record(item) for item in data.get("items") or ()),
            summary=data.get("summary") or "",
        )


@dataclass(slots=True, frozen=True)
class FindingLogEntry:
    """An at-risk finding joined with the inspection it was raised in."""

    finding: Finding
    inspection_id: str
    inspection_date: date
    location: str
    inspector_name: str

    @classmethod
    def from_inspection(cls, record: InspectionRecord, finding: Finding) -> "FindingLogEntry":
        return cls(finding, record.id, record.date, record.location, record.inspector_name)


def flatten_at_risk(records: Iterable[InspectionRecord]) -> list[FindingLogEntry]:
    """Return every at-risk finding across ``records`` in collection order."""
    return [
        FindingLogEntry.from_inspection(record, finding)
        for record in records
        for finding in record.findings
        if finding.is_at_risk
    ]


__all__ = [
    "ActionStatus",
    "ComplianceStatus",
    "CRITICAL_LEVELS",
    "Finding",
    "FindingLogEntry",
    "InspectionRecord",
    "InspectionStatus",
    "Likelihood",
    "NOT_APPLICABLE",
    "OPEN_ACTION_STATUSES",
    "Remediation",
    "RiskAssessment",
    "RiskLevel",
    "Severity",
    "flatten_at_risk",
    "new_finding_id",
    "new_record_id",
    "parse_date",
]
