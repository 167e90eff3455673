"""Risk scoring for at-risk findings."""

from __future__ import annotations

from typing import Dict, Iterable, Tuple

from .models import Finding, Likelihood, RiskLevel, Severity

# Inclusive upper bounds of the likelihood x severity product.
BAND_CUTOFFS: Tuple[Tuple[int, RiskLevel], ...] = (
    (3, RiskLevel.LOW),
    (6, RiskLevel.MEDIUM),
    (12, RiskLevel.HIGH),
)


def risk_score(likelihood, severity) -> int:
    return Likelihood.normalize(likelihood).rank * Severity.normalize(severity).rank


def band_for_score(value: int) -> RiskLevel:
    for cutoff, level in BAND_CUTOFFS:
        if value <= cutoff:
            return level
    return RiskLevel.EXTREME


def score(likelihood, severity) -> RiskLevel:
    """Return the risk band for a likelihood/severity pair."""
    return band_for_score(risk_score(likelihood, severity))


RISK_MATRIX: Dict[Tuple[Likelihood, Severity], RiskLevel] = {
    (likelihood, severity): score(likelihood, severity)
    for likelihood in Likelihood
    for severity in Severity
}


def highest_level(levels: Iterable[RiskLevel]) -> RiskLevel:
    highest = RiskLevel.LOW
    for level in levels:
        level = RiskLevel.normalize(level)
        if level.rank > highest.rank:
            highest = level
    return highest


def overall_risk(findings: Iterable[Finding]) -> RiskLevel:
    """Highest band among at-risk findings; Low when none are at risk."""
    return highest_level(f.risk_level for f in findings if f.is_at_risk and f.risk_level)


__all__ = [
    "BAND_CUTOFFS",
    "RISK_MATRIX",
    "band_for_score",
    "highest_level",
    "overall_risk",
    "risk_score",
    "score",
]
