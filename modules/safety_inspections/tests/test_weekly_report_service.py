from __future__ import annotations

from dataclasses import replace
from datetime import date
from itertools import count

import pytest

from modules.safety_inspections import localization
from modules.safety_inspections.exceptions import NotFoundError, ValidationError
from modules.safety_inspections.models import Finding
from modules.safety_inspections.narrative.generator import NarrativeGenerator
from modules.safety_inspections.patches import ActionStatusPatch
from modules.safety_inspections.picklists import INSPECTORS, MANAGERS
from modules.safety_inspections.weekly.models import ReportStatus, WeeklyReportRecord
from modules.safety_inspections.weekly.service import WeeklyReportService

TODAY = date(2024, 5, 15)


@pytest.fixture
def text_client(text_client_factory):
    return text_client_factory(responses=["This week two lines were inspected."])


@pytest.fixture
def report_service(repos, inspection_service, picklists, text_client):
    ticks = count(1)
    return WeeklyReportService(
        repos[1],
        inspection_service,
        picklists=picklists,
        narrative=NarrativeGenerator(text_client),
        today=lambda: TODAY,
        now=lambda: f"2024-05-18T10:00:{next(ticks):02d}+00:00",
    )


def _guarding(finding_id="g1"):
    return Finding.at_risk(
        "Guarding",
        observation="Missing guard on belt drive",
        likelihood="Likely",
        severity="Major",
        finding_id=finding_id,
    )


async def _submit(service, day, location="Line A", findings=None):
    findings = findings or [Finding.safe("Fire Safety")]
    return await service.submit(location, day, "Inspector Lee", findings)


@pytest.mark.asyncio
async def test_pending_weeks_follow_saved_reports(inspection_service, report_service):
    await _submit(inspection_service, date(2024, 5, 14))
    await _submit(inspection_service, date(2024, 5, 7))
    assert [w.week_start for w in report_service.pending_weeks()] == [date(2024, 5, 13), date(2024, 5, 6)]

    await report_service.save_draft(report_service.create_draft(date(2024, 5, 13)))
    assert [w.week_start for w in report_service.pending_weeks()] == [date(2024, 5, 6)]


def test_draft_defaults(report_service):
    draft = report_service.create_draft(date(2024, 5, 16))
    assert draft.id == ""
    assert (draft.week_start, draft.week_end) == (date(2024, 5, 13), date(2024, 5, 18))
    assert draft.report_date == TODAY
    assert draft.prepared_by == "陳大文"
    assert draft.endorsed_by == "陳經理"
    assert draft.prepared_by_title == "Registered Safety Officer (RSO)"
    assert draft.status is ReportStatus.DRAFT
    assert report_service.create_draft(date(2024, 5, 16), locale="zh").prepared_by_title == "註冊安全主任 (RSO)"


@pytest.mark.asyncio
async def test_draft_rejected_for_covered_week(report_service):
    await report_service.save_draft(report_service.create_draft(date(2024, 5, 13)))
    with pytest.raises(ValidationError):
        report_service.create_draft(date(2024, 5, 15))


@pytest.mark.asyncio
async def test_save_assigns_number_and_keeps_created_at(repos, report_service):
    first = await report_service.save_draft(report_service.create_draft(date(2024, 5, 13)))
    assert first.id == "WR-20240513"
    assert first.created_at == first.updated_at

    submitted = await report_service.submit(first)
    assert submitted.status is ReportStatus.SUBMITTED
    assert submitted.created_at == first.created_at
    assert submitted.updated_at > first.updated_at
    assert len(report_service.reports) == 1
    assert await repos[1].get("WR-20240513") == submitted


@pytest.mark.asyncio
async def test_reports_are_listed_newest_week_first(report_service):
    await report_service.save_draft(report_service.create_draft(date(2024, 5, 6)))
    await report_service.save_draft(report_service.create_draft(date(2024, 5, 20)))
    await report_service.save_draft(report_service.create_draft(date(2024, 5, 13)))
    assert [r.week_start for r in report_service.reports] == [
        date(2024, 5, 20),
        date(2024, 5, 13),
        date(2024, 5, 6),
    ]


@pytest.mark.asyncio
async def test_view_is_projected_live(inspection_service, report_service):
    record = await _submit(inspection_service, date(2024, 5, 14), findings=[_guarding()])
    await _submit(inspection_service, date(2024, 5, 19))
    report = await report_service.save_draft(report_service.create_draft(date(2024, 5, 13)))

    view = report_service.view(report.id)
    assert [r.id for r in view.inspections] == [record.id]
    assert view.total_inspections == 1
    assert view.critical_hazards == 1
    assert view.report_number == "WR-20240513"
    assert view.period_label("en") == "May 2024 - Week 2"

    await inspection_service.patch_finding(record.id, "g1", ActionStatusPatch("Completed"))
    assert report_service.view(report.id).findings[0].finding.action_status.value == "Completed"

    await _submit(inspection_service, date(2024, 5, 18), location="Line C")
    assert report_service.view(report).total_inspections == 2

    await inspection_service.delete(record.id)
    refreshed = report_service.view(report)
    assert refreshed.critical_hazards == 0
    assert refreshed.findings == ()


@pytest.mark.asyncio
async def test_generate_summary_is_not_saved(inspection_service, report_service, text_client):
    await _submit(inspection_service, date(2024, 5, 14), findings=[_guarding()])
    draft = report_service.create_draft(date(2024, 5, 13))
    filled = await report_service.generate_summary(draft, locale="en")
    assert filled.summary == "This week two lines were inspected."
    assert report_service.reports == ()
    prompt, schema = text_client.prompts[0]
    assert "Missing guard on belt drive" in prompt
    assert schema is None


@pytest.mark.asyncio
async def test_generate_summary_falls_back_to_placeholder(inspection_service, report_service, text_client):
    text_client.responses = []
    draft = report_service.create_draft(date(2024, 5, 13))
    filled = await report_service.generate_summary(draft, locale="zh")
    assert filled.summary == localization.SUMMARY_EMPTY["zh"]


@pytest.mark.asyncio
async def test_saving_remembers_names(report_service, picklists):
    draft = report_service.create_draft(date(2024, 5, 13))
    await report_service.save_draft(
        replace(draft, prepared_by="黃偉文", endorsed_by="Site Agent")
    )
    assert picklists.last_used(INSPECTORS) == "黃偉文"
    assert picklists.last_used(MANAGERS) == "Site Agent"
    assert report_service.create_draft(date(2024, 5, 6)).prepared_by == "黃偉文"


@pytest.mark.asyncio
async def test_delete_and_reload(repos, inspection_service, report_service):
    saved = await report_service.save_draft(report_service.create_draft(date(2024, 5, 13)))
    other = WeeklyReportService(repos[1], inspection_service)
    assert [r.id for r in await other.load()] == [saved.id]

    await report_service.delete(saved.id)
    assert report_service.reports == ()
    with pytest.raises(NotFoundError):
        report_service.view(saved.id)
    with pytest.raises(NotFoundError):
        await report_service.delete(saved.id)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "week_start, week_end",
    [
        (date(2024, 5, 15), date(2024, 5, 18)),
        (date(2024, 5, 13), date(2024, 5, 19)),
        (date(2024, 5, 13), date(2024, 5, 17)),
    ],
)
async def test_save_rejects_week_not_matching_bucket(inspection_service, report_service, repos, week_start, week_end):
    await _submit(inspection_service, date(2024, 5, 13))
    report = WeeklyReportRecord(id="", week_start=week_start, week_end=week_end, report_date=TODAY)
    with pytest.raises(ValidationError):
        await report_service.save_draft(report)
    with pytest.raises(ValidationError):
        await report_service.submit(report)
    assert report_service.reports == ()
    assert await repos[1].get_all() == []
    assert [w.week_start for w in report_service.pending_weeks()] == [date(2024, 5, 13)]


@pytest.mark.asyncio
async def test_generate_summary_reuses_one_generator(repos, inspection_service):
    service = WeeklyReportService(repos[1], inspection_service, today=lambda: TODAY)
    draft = service.create_draft(date(2024, 5, 13))
    await service.generate_summary(draft, locale="en")
    generator = service.narrative
    filled = await service.generate_summary(draft, locale="en")
    assert service.narrative is generator
    assert filled.summary == localization.SUMMARY_ERROR["en"]
    await generator.aclose()
