"""Saved names offered when filling in inspections and weekly reports."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from utils.settingsmanager import SettingsManager

from . import config
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

LOCATIONS = "locations"
CATEGORIES = "categories"
INSPECTORS = "inspectors"
MANAGERS = "managers"

DEFAULTS: Dict[str, Sequence[str]] = {
    LOCATIONS: ("生產線 A", "生產線 B", "倉庫 1 區", "化學品儲存區", "維修工場", "員工飯堂"),
    CATEGORIES: ("機械防護", "電力安全", "消防安全", "個人防護裝備 (PPE)", "工作環境整理", "起重機械"),
    INSPECTORS: ("陳大文", "黃偉文", "李小龍"),
    MANAGERS: ("陳經理", "Safety Manager", "Site Agent"),
}

_LAST_USED_KEY = "last_used"


class PickLists:
    """Editable name lists persisted in the settings file."""

    def __init__(self, settings: SettingsManager | None = None, *, path: Path | str | None = None) -> None:
        self.settings = settings or SettingsManager(path or config.settings_path())

    def _kind(self, kind: str) -> str:
        if kind not in DEFAULTS:
            raise ValidationError(f"Unknown list: {kind!r}")
        return kind

    def values(self, kind: str) -> List[str]:
        stored = self.settings.get(self._kind(kind))
        if not isinstance(stored, list):
            return list(DEFAULTS[kind])
        return [str(value) for value in stored]

    def _store(self, kind: str, values: List[str]) -> None:
        self.settings.set(kind, values)

    def add(self, kind: str, value: str) -> List[str]:
        value = (value or "").strip()
        if not value:
            raise ValidationError("Name is required")
        values = self.values(kind)
        if value not in values:
            values.append(value)
            self._store(kind, values)
        return values

    def rename(self, kind: str, old: str, new: str) -> List[str]:
        new = (new or "").strip()
        if not new:
            raise ValidationError("Name is required")
        values = self.values(kind)
        if old not in values:
            raise ValidationError(f"{old!r} is not in the {kind} list")
        if new != old and new in values:
            raise ValidationError(f"{new!r} is already in the {kind} list")
        values[values.index(old)] = new
        self._store(kind, values)
        if self.last_used(kind) == old:
            self.remember(kind, new)
        return values

    def remove(self, kind: str, value: str) -> str:
        """Drop ``value`` and return the entry to select next ("" when empty)."""
        values = self.values(kind)
        if value in values:
            values.remove(value)
            self._store(kind, values)
        return values[0] if values else ""

    def ensure(self, kind: str, value: Optional[str]) -> List[str]:
        if value and value not in self.values(kind):
            logger.info("Adding %s to %s list", value, kind)
            return self.add(kind, value)
        return self.values(kind)

    def remember(self, kind: str, value: str) -> None:
        last_used = dict(self.settings.get(_LAST_USED_KEY) or {})
        last_used[self._kind(kind)] = value
        self.settings.set(_LAST_USED_KEY, last_used)

    def last_used(self, kind: str) -> str:
        """Last remembered pick, else the first entry of the list."""
        remembered = (self.settings.get(_LAST_USED_KEY) or {}).get(self._kind(kind))
        if remembered:
            return remembered
        values = self.values(kind)
        return values[0] if values else ""


__all__ = ["PickLists", "DEFAULTS", "LOCATIONS", "CATEGORIES", "INSPECTORS", "MANAGERS"]
