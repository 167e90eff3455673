"""CSV exporter for the follow-up findings list."""

from __future__ import annotations

import csv
import io
from datetime import date
from pathlib import Path
from typing import Iterable, List

from .. import localization
from ..models import FindingLogEntry

BOM = "\ufeff"


def _entry_row(entry: FindingLogEntry, locale: str) -> List[str]:
    finding = entry.finding
    photo = finding.photo_url or (localization.PHOTO_UPLOADED[locale] if finding.photo_data else "")
    return [
        entry.inspection_date.isoformat(),
        entry.location,
        finding.category,
        finding.observation,
        localization.risk_label(finding.risk_level, locale),
        finding.remedial_action,
        finding.target_date.isoformat() if finding.target_date else "",
        localization.action_status_label(finding.action_status, locale),
        entry.inspector_name,
        photo,
    ]


def render_followup_csv(entries: Iterable[FindingLogEntry], locale: str) -> str:
    """Return the export text: byte-order mark, then every field quoted."""
    locale = localization.normalize_locale(locale)
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(list(localization.CSV_HEADERS[locale]))
    for entry in entries:
        writer.writerow(_entry_row(entry, locale))
    return BOM + buffer.getvalue().rstrip("\n")


def default_filename(today: date) -> str:
    return f"Safety_FollowUp_{today.isoformat()}.csv"


def export_followup_csv(entries: Iterable[FindingLogEntry], path: Path, locale: str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as fh:
        fh.write(render_followup_csv(entries, locale))
    return path


__all__ = ["BOM", "default_filename", "export_followup_csv", "render_followup_csv"]
