"""Assistive text for findings and weekly summaries.

Every operation here resolves to text. When the model is unreachable or
answers with nothing usable, a localized placeholder is returned so the
caller can carry on and let a person fill the field in.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol

from .. import localization
from ..exceptions import GeneratorUnavailableError
from ..models import InspectionRecord
from .api_clients import GeminiClient

logger = logging.getLogger(__name__)

ASSESSMENT_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "risk": {"type": "STRING", "description": "Potential hazard or risk"},
        "action": {"type": "STRING", "description": "Remedial actions"},
    },
    "required": ["risk", "action"],
}

_LANGUAGE = {
    "zh": ("Traditional Chinese", "繁體中文（香港專業用語）"),
    "en": ("English", "English (Professional Safety Terminology)"),
}


class TextClient(Protocol):
    async def generate_text(self, prompt: str, *, response_schema: Optional[Dict[str, Any]] = None) -> str: ...


@dataclass(slots=True, frozen=True)
class RiskNote:
    risk_note: str
    action: str


def build_assessment_prompt(observation: str, category: str, locale: str) -> str:
    output_language, register = _LANGUAGE[locale]
    return (
        "You are a senior safety officer working to the Factories and Industrial "
        "Undertakings Ordinance (Cap. 59) of Hong Kong.\n"
        "Analyse the following factory safety observation.\n\n"
        f"Category: {category}\n"
        f'Observation: "{observation}"\n\n'
        f"Give a concise risk assessment and recommended remedial action in {register}.\n"
        f"Output MUST be in {output_language}."
    )


def summary_digest(records: Iterable[InspectionRecord]) -> List[Dict[str, Any]]:
    """Compact per-inspection data sent with the weekly summary request."""
    return [
        {
            "date": record.date.isoformat(),
            "location": record.location,
            "risks": [finding.observation for finding in record.at_risk_findings],
            "overallRisk": record.overall_risk.value,
        }
        for record in records
    ]


def build_weekly_prompt(records: Iterable[InspectionRecord], locale: str) -> str:
    output_language = _LANGUAGE[locale][0]
    digest = json.dumps(summary_digest(records), ensure_ascii=False, indent=2)
    return (
        "You are the factory's safety manager.\n"
        f"Write a formal weekly safety executive summary for the factory manager in {output_language}, "
        "referring to Cap. 59 requirements where appropriate.\n\n"
        f"Inspection data for the week:\n{digest}\n\n"
        "The summary should:\n"
        "1. State the total number of inspections and the main locations.\n"
        "2. Summarise the key hazards found, if any.\n"
        "3. Comment on the overall safety culture this week.\n"
        "4. Run to roughly 150-200 words."
    )


class NarrativeGenerator:
    def __init__(self, client: Optional[TextClient] = None) -> None:
        self.client = client if client is not None else GeminiClient()

    async def assess_finding(self, observation: str, category: str, locale: Optional[str] = None) -> RiskNote:
        locale = localization.normalize_locale(locale)
        try:
            text = await self.client.generate_text(
                build_assessment_prompt(observation, category, locale),
                response_schema=ASSESSMENT_SCHEMA,
            )
        except GeneratorUnavailableError as exc:
            logger.warning("Risk assessment unavailable: %s", exc)
            return RiskNote(*localization.ASSESSMENT_ERROR[locale])
        if not text:
            return RiskNote(*localization.ASSESSMENT_EMPTY[locale])
        try:
            data = json.loads(text)
            return RiskNote(str(data["risk"]), str(data["action"]))
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Risk assessment response was not usable: %s", exc)
            return RiskNote(*localization.ASSESSMENT_ERROR[locale])

    async def suggest_remedial_action(self, observation: str, category: str, locale: Optional[str] = None) -> str:
        """Text for the remedial action field of a single finding."""
        return (await self.assess_finding(observation, category, locale)).action

    async def weekly_summary(self, records: Iterable[InspectionRecord], locale: Optional[str] = None) -> str:
        locale = localization.normalize_locale(locale)
        try:
            text = await self.client.generate_text(build_weekly_prompt(records, locale))
        except GeneratorUnavailableError as exc:
            logger.warning("Weekly summary unavailable: %s", exc)
            return localization.SUMMARY_ERROR[locale]
        return text or localization.SUMMARY_EMPTY[locale]

    async def aclose(self) -> None:
        close = getattr(self.client, "aclose", None)
        if close is not None:
            await close()


__all__ = [
    "ASSESSMENT_SCHEMA",
    "NarrativeGenerator",
    "RiskNote",
    "TextClient",
    "build_assessment_prompt",
    "build_weekly_prompt",
    "summary_digest",
]
