from __future__ import annotations

import asyncio
from datetime import date

import pytest

from modules.safety_inspections.exceptions import NotFoundError, PersistenceError, ValidationError
from modules.safety_inspections.models import ActionStatus, Finding, RiskLevel
from modules.safety_inspections.patches import ActionStatusPatch, TargetDatePatch
from modules.safety_inspections.service import InspectionService
from utils.state import AppState


def _findings():
    return [
        Finding.at_risk("Guarding", observation="Guard missing", likelihood="Possible", severity="Major", finding_id="f1"),
        Finding.safe("Fire Safety", finding_id="f2"),
        Finding.at_risk("Electrical", observation="Exposed wiring", likelihood="Rare", severity="Minor", finding_id="f3"),
    ]


async def _submit(service, location="Line A", day=date(2024, 5, 15)):
    return await service.submit(location, day, "Inspector Lee", _findings())


@pytest.mark.asyncio
async def test_submit_persists_then_prepends(inspection_service, flaky_repo):
    older = await _submit(inspection_service, "Line B", date(2024, 5, 13))
    record = await _submit(inspection_service)
    assert inspection_service.records[0] == record
    assert inspection_service.records[1] == older
    assert record.id.startswith("INS-")
    assert record.overall_risk is RiskLevel.HIGH
    assert record.summary == "Location: Line A. Found 2 non-compliance items."
    stored = await flaky_repo.get(record.id)
    assert stored == record


@pytest.mark.asyncio
async def test_summary_follows_locale(inspection_service):
    record = await inspection_service.submit("生產線 A", date(2024, 5, 15), "陳大文", _findings(), locale="zh")
    assert record.summary == "地點：生產線 A。發現 2 項違規事項。"


@pytest.mark.asyncio
async def test_missing_date_uses_today(inspection_service):
    record = await inspection_service.submit("Line A", None, "Inspector Lee", _findings())
    assert record.date == date(2024, 5, 15)


@pytest.mark.asyncio
async def test_active_user_is_default_inspector_id(inspection_service):
    AppState.set_active_user("u9", "Inspector Lee")
    record = await _submit(inspection_service)
    assert record.inspector_id == "u9"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "location, inspector, findings",
    [
        ("", "Inspector Lee", [Finding.safe("Fire Safety")]),
        ("Line A", "  ", [Finding.safe("Fire Safety")]),
        ("Line A", "Inspector Lee", []),
        ("Line A", "Inspector Lee", [Finding.safe(" ")]),
        ("Line A", "Inspector Lee", [Finding.safe("A", finding_id="x"), Finding.safe("B", finding_id="x")]),
    ],
)
async def test_invalid_submission_changes_nothing(inspection_service, flaky_repo, location, inspector, findings):
    with pytest.raises(ValidationError):
        await inspection_service.submit(location, date(2024, 5, 15), inspector, findings)
    assert inspection_service.records == ()
    assert flaky_repo.puts == 0


@pytest.mark.asyncio
async def test_store_failure_leaves_collection_unchanged(inspection_service, flaky_repo):
    flaky_repo.fail_puts = True
    with pytest.raises(PersistenceError):
        await _submit(inspection_service)
    assert inspection_service.records == ()


@pytest.mark.asyncio
async def test_edit_replaces_in_place(inspection_service):
    first = await _submit(inspection_service, "Line A", date(2024, 5, 13))
    second = await _submit(inspection_service, "Line B", date(2024, 5, 14))
    inspection_service.begin_edit(first.id)
    edited = await inspection_service.submit(
        "Line A East", date(2024, 5, 13), "Inspector Lee", [Finding.safe("Fire Safety", finding_id="f1")]
    )
    assert edited.id == first.id
    assert [r.id for r in inspection_service.records] == [second.id, first.id]
    assert inspection_service.records[1].location == "Line A East"
    assert inspection_service.records[1].overall_risk is RiskLevel.LOW
    assert inspection_service.editing is None


@pytest.mark.asyncio
async def test_edit_of_unknown_record(inspection_service):
    with pytest.raises(NotFoundError):
        await inspection_service.submit("Line A", date(2024, 5, 15), "Lee", _findings(), record_id="INS-404")


@pytest.mark.asyncio
async def test_delete_cancels_open_edit(inspection_service, flaky_repo):
    record = await _submit(inspection_service)
    inspection_service.begin_edit(record.id)
    await inspection_service.delete(record.id)
    assert inspection_service.records == ()
    assert inspection_service.editing is None
    assert await flaky_repo.get(record.id) is None
    with pytest.raises(NotFoundError):
        await inspection_service.delete(record.id)


@pytest.mark.asyncio
async def test_patch_updates_only_the_target_finding(inspection_service, flaky_repo):
    record = await _submit(inspection_service)
    updated = await inspection_service.patch_finding(record.id, "f3", ActionStatusPatch(ActionStatus.COMPLETED))
    assert [f.id for f in updated.findings] == ["f1", "f2", "f3"]
    assert updated.findings[0] == record.findings[0]
    assert updated.findings[2].action_status is ActionStatus.COMPLETED
    assert inspection_service.get(record.id) == updated
    assert await flaky_repo.get(record.id) == updated


@pytest.mark.asyncio
async def test_patch_target_date(inspection_service):
    record = await _submit(inspection_service)
    updated = await inspection_service.patch_finding(record.id, "f1", TargetDatePatch(date(2024, 6, 1)))
    assert updated.findings[0].target_date == date(2024, 6, 1)


@pytest.mark.asyncio
async def test_patch_unknown_ids_leave_collection_untouched(inspection_service):
    record = await _submit(inspection_service)
    with pytest.raises(NotFoundError):
        await inspection_service.patch_finding("INS-404", "f1", ActionStatusPatch(ActionStatus.COMPLETED))
    with pytest.raises(NotFoundError):
        await inspection_service.patch_finding(record.id, "nope", ActionStatusPatch(ActionStatus.COMPLETED))
    assert inspection_service.records == (record,)


@pytest.mark.asyncio
async def test_patch_on_safe_finding_is_rejected(inspection_service):
    record = await _submit(inspection_service)
    with pytest.raises(ValidationError):
        await inspection_service.patch_finding(record.id, "f2", ActionStatusPatch(ActionStatus.COMPLETED))
    assert inspection_service.get(record.id) == record


@pytest.mark.asyncio
async def test_failed_patch_notifies_and_reconciles(inspection_service, flaky_repo):
    record = await _submit(inspection_service)
    failures = []
    inspection_service.add_failure_hook(lambda rec, exc: failures.append((rec.id, str(exc))))
    flaky_repo.fail_puts = True
    with pytest.raises(PersistenceError):
        await inspection_service.patch_finding(record.id, "f1", ActionStatusPatch(ActionStatus.COMPLETED))
    assert failures == [(record.id, "disk full")]
    assert inspection_service.get(record.id) == record


@pytest.mark.asyncio
async def test_failed_patch_keeps_optimistic_state_when_store_unreadable(inspection_service, flaky_repo):
    record = await _submit(inspection_service)
    flaky_repo.fail_puts = True
    flaky_repo.fail_reads = True
    with pytest.raises(PersistenceError):
        await inspection_service.patch_finding(record.id, "f1", ActionStatusPatch(ActionStatus.COMPLETED))
    assert inspection_service.get(record.id).findings[0].action_status is ActionStatus.COMPLETED


@pytest.mark.asyncio
async def test_background_patch_is_visible_before_it_is_saved(inspection_service, flaky_repo):
    record = await _submit(inspection_service)
    updated, task = inspection_service.patch_finding_nowait(record.id, "f1", ActionStatusPatch("Follow-up"))
    assert inspection_service.get(record.id).findings[0].action_status is ActionStatus.FOLLOW_UP
    await task
    assert await flaky_repo.get(record.id) == updated


@pytest.mark.asyncio
async def test_background_patch_failure_goes_to_hooks(inspection_service, flaky_repo):
    record = await _submit(inspection_service)
    seen = []
    inspection_service.add_failure_hook(lambda rec, exc: seen.append(rec.id))
    flaky_repo.fail_puts = True
    inspection_service.patch_finding_nowait(record.id, "f1", ActionStatusPatch("Completed"))
    await inspection_service.drain()
    await asyncio.sleep(0)
    assert seen == [record.id]
    assert inspection_service.get(record.id) == record


@pytest.mark.asyncio
async def test_load_seeds_empty_store(flaky_repo, picklists):
    AppState.set_active_user("u7", "Inspector Wong")
    service = InspectionService(flaky_repo, picklists=picklists)
    records = await service.load(seed=True)
    assert [r.id for r in records] == ["INS-1715421", "INS-1715428"]
    assert records[0].overall_risk is RiskLevel.HIGH
    assert records[1].overall_risk is RiskLevel.LOW
    assert "Inspector Wong" in picklists.values("inspectors")

    again = InspectionService(flaky_repo)
    assert len(await again.load(seed=True)) == 2


@pytest.mark.asyncio
async def test_load_respects_seed_setting(flaky_repo):
    service = InspectionService(flaky_repo)
    assert await service.load() == ()


@pytest.mark.asyncio
async def test_edit_of_record_deleted_mid_write_is_discarded(inspection_service, flaky_repo, monkeypatch):
    record = await inspection_service.submit("Line A", date(2024, 5, 14), "Inspector Lee", [Finding.safe("Fire Safety")])
    real_put = flaky_repo.put

    async def put_after_delete(item):
        await inspection_service.delete(item.id)
        await real_put(item)

    inspection_service.begin_edit(record.id)
    monkeypatch.setattr(flaky_repo, "put", put_after_delete)
    with pytest.raises(NotFoundError):
        await inspection_service.submit("Line B", date(2024, 5, 14), "Inspector Lee", [Finding.safe("Fire Safety")])

    assert inspection_service.records == ()
    assert inspection_service.editing is None
    assert await flaky_repo.get(record.id) is None
