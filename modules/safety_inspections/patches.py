"""Single-field updates applied to one finding of a saved inspection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from .models import ActionStatus, Finding


@dataclass(slots=True, frozen=True)
class ActionStatusPatch:
    action_status: ActionStatus

    def apply(self, finding: Finding) -> Finding:
        return finding.with_action_status(self.action_status)


@dataclass(slots=True, frozen=True)
class TargetDatePatch:
    """Set or clear the proposed completion date."""

    target_date: Optional[date]

    def apply(self, finding: Finding) -> Finding:
        return finding.with_target_date(self.target_date)


FindingPatch = Union[ActionStatusPatch, TargetDatePatch]

__all__ = ["ActionStatusPatch", "TargetDatePatch", "FindingPatch"]
