"""FastAPI routes for factory safety inspections and weekly reports."""

from __future__ import annotations

from datetime import date
from io import BytesIO
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse, StreamingResponse

from . import config, localization
from .exceptions import NotFoundError, PersistenceError, SafetyHubError, ValidationError
from .exporters import csv_exporter, pdf_export
from .followup import SortOption, dashboard_stats, follow_up_findings
from .models import ActionStatus
from .narrative.generator import NarrativeGenerator
from .picklists import PickLists
from .repository import open_repositories
from .service import InspectionService
from .validators import (
    AssessRead,
    AssessRequest,
    DashboardRead,
    DraftRequest,
    FindingPatchBody,
    FollowUpEntryRead,
    InspectionRead,
    InspectionSubmit,
    PendingWeekRead,
    PickListRename,
    PickListValue,
    SummaryRequest,
    WeeklyReportIn,
    WeeklyReportRead,
    WeeklyReportViewRead,
)
from .weekly.service import WeeklyReportService

router = APIRouter(prefix="/api", tags=["safety-inspections"])


class ServiceContainer:
    """Services sharing one data directory, loaded on first use."""

    def __init__(
        self,
        data_dir: Path | str | None = None,
        *,
        narrative: Optional[NarrativeGenerator] = None,
        seed: Optional[bool] = None,
    ) -> None:
        inspection_repo, report_repo = open_repositories(data_dir)
        settings_path = Path(data_dir) / config.SETTINGS_FILENAME if data_dir else None
        self.picklists = PickLists(path=settings_path)
        self.narrative = narrative or NarrativeGenerator()
        self.inspections = InspectionService(inspection_repo, picklists=self.picklists)
        self.reports = WeeklyReportService(
            report_repo, self.inspections, picklists=self.picklists, narrative=self.narrative
        )
        self._seed = seed

    async def ensure_loaded(self) -> "ServiceContainer":
        if not self.inspections.loaded:
            await self.inspections.load(seed=self._seed)
        if not self.reports.loaded:
            await self.reports.load()
        return self

    async def aclose(self) -> None:
        await self.narrative.aclose()


_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    global _container
    _container = None


async def close_container() -> None:
    """Release the shared container's network clients and forget it."""
    global _container
    container, _container = _container, None
    if container is not None:
        await container.aclose()


async def get_services(container: ServiceContainer = Depends(get_container)) -> ServiceContainer:
    return await container.ensure_loaded()


_ERROR_STATUS = (
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY, "validation_error"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "not_found"),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE, "persistence_error"),
)


async def handle_safety_error(request: Request, exc: SafetyHubError) -> JSONResponse:
    for exc_type, code, kind in _ERROR_STATUS:
        if isinstance(exc, exc_type):
            return JSONResponse(status_code=code, content={"error": kind, "message": str(exc)})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "safety_hub_error", "message": str(exc)},
    )


def _status_filter(value: Optional[str]) -> Optional[ActionStatus]:
    if not value or value == "All":
        return None
    return ActionStatus.normalize(value)


# -- inspections ------------------------------------------------------------------
@router.get("/inspections", response_model=List[InspectionRead])
async def list_inspections(services: ServiceContainer = Depends(get_services)) -> List[InspectionRead]:
    return [InspectionRead.from_record(r) for r in services.inspections.records]


@router.post("/inspections", response_model=InspectionRead, status_code=status.HTTP_201_CREATED)
async def submit_inspection(
    payload: InspectionSubmit, services: ServiceContainer = Depends(get_services)
) -> InspectionRead:
    record = await services.inspections.submit(
        payload.location,
        payload.date,
        payload.inspector_name,
        [f.to_finding() for f in payload.findings],
        inspector_id=payload.inspector_id,
        summary=payload.summary,
        locale=payload.locale,
    )
    return InspectionRead.from_record(record)


@router.get("/inspections/follow-up", response_model=List[FollowUpEntryRead])
async def follow_up(
    search: str = Query(""),
    action_status: Optional[str] = Query(None, alias="status"),
    sort: SortOption = Query(SortOption.DATE_DESC),
    services: ServiceContainer = Depends(get_services),
) -> List[FollowUpEntryRead]:
    entries = follow_up_findings(
        services.inspections.records, search=search, status=_status_filter(action_status), sort=sort
    )
    return [FollowUpEntryRead.from_entry(e) for e in entries]


@router.get("/inspections/follow-up.csv")
async def export_follow_up(
    search: str = Query(""),
    action_status: Optional[str] = Query(None, alias="status"),
    sort: SortOption = Query(SortOption.DATE_DESC),
    locale: Optional[str] = Query(None),
    services: ServiceContainer = Depends(get_services),
) -> Response:
    entries = follow_up_findings(
        services.inspections.records, search=search, status=_status_filter(action_status), sort=sort
    )
    content = csv_exporter.render_followup_csv(entries, localization.normalize_locale(locale))
    filename = csv_exporter.default_filename(date.today())
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/inspections/{record_id}", response_model=InspectionRead)
async def get_inspection(record_id: str, services: ServiceContainer = Depends(get_services)) -> InspectionRead:
    return InspectionRead.from_record(services.inspections.get(record_id))


@router.get("/inspections/{record_id}/export")
async def export_inspection_pdf(
    record_id: str,
    locale: Optional[str] = Query(None),
    services: ServiceContainer = Depends(get_services),
) -> StreamingResponse:
    record = services.inspections.get(record_id)
    pdf_bytes = pdf_export.build_inspection_pdf(record, locale=localization.normalize_locale(locale))
    return StreamingResponse(
        BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={"Content-Disposition": f"inline; filename=Form3A_{record.id}.pdf"},
    )


@router.put("/inspections/{record_id}", response_model=InspectionRead)
async def edit_inspection(
    record_id: str, payload: InspectionSubmit, services: ServiceContainer = Depends(get_services)
) -> InspectionRead:
    record = await services.inspections.submit(
        payload.location,
        payload.date,
        payload.inspector_name,
        [f.to_finding() for f in payload.findings],
        record_id=record_id,
        inspector_id=payload.inspector_id,
        summary=payload.summary,
        locale=payload.locale,
    )
    return InspectionRead.from_record(record)


@router.delete("/inspections/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_inspection(record_id: str, services: ServiceContainer = Depends(get_services)) -> Response:
    await services.inspections.delete(record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/inspections/{record_id}/findings/{finding_id}", response_model=InspectionRead)
async def patch_finding(
    record_id: str,
    finding_id: str,
    payload: FindingPatchBody,
    services: ServiceContainer = Depends(get_services),
) -> InspectionRead:
    record = await services.inspections.patch_finding(record_id, finding_id, payload.to_patch())
    return InspectionRead.from_record(record)


@router.get("/dashboard", response_model=DashboardRead)
async def dashboard(services: ServiceContainer = Depends(get_services)) -> DashboardRead:
    return DashboardRead.from_stats(dashboard_stats(services.inspections.records))


# -- saved name lists -------------------------------------------------------------
@router.get("/picklists/{kind}", response_model=List[str])
async def get_picklist(kind: str, services: ServiceContainer = Depends(get_services)) -> List[str]:
    return services.picklists.values(kind)


@router.post("/picklists/{kind}", response_model=List[str])
async def add_picklist_value(
    kind: str, payload: PickListValue, services: ServiceContainer = Depends(get_services)
) -> List[str]:
    return services.picklists.add(kind, payload.value)


@router.put("/picklists/{kind}", response_model=List[str])
async def rename_picklist_value(
    kind: str, payload: PickListRename, services: ServiceContainer = Depends(get_services)
) -> List[str]:
    return services.picklists.rename(kind, payload.old, payload.new)


@router.delete("/picklists/{kind}/{value}")
async def remove_picklist_value(
    kind: str, value: str, services: ServiceContainer = Depends(get_services)
) -> dict:
    selected = services.picklists.remove(kind, value)
    return {"values": services.picklists.values(kind), "selected": selected}


# -- weekly reports ---------------------------------------------------------------
@router.get("/weekly-reports", response_model=List[WeeklyReportRead])
async def list_reports(services: ServiceContainer = Depends(get_services)) -> List[WeeklyReportRead]:
    return [WeeklyReportRead.model_validate(r) for r in services.reports.reports]


@router.get("/weekly-reports/pending", response_model=List[PendingWeekRead])
async def list_pending_weeks(services: ServiceContainer = Depends(get_services)) -> List[PendingWeekRead]:
    return [PendingWeekRead.model_validate(w) for w in services.reports.pending_weeks()]


@router.post("/weekly-reports/draft", response_model=WeeklyReportRead)
async def create_draft(payload: DraftRequest, services: ServiceContainer = Depends(get_services)) -> WeeklyReportRead:
    draft = services.reports.create_draft(payload.week_start, locale=payload.locale)
    return WeeklyReportRead.model_validate(draft)


@router.post("/weekly-reports/save-draft", response_model=WeeklyReportRead)
async def save_draft(payload: WeeklyReportIn, services: ServiceContainer = Depends(get_services)) -> WeeklyReportRead:
    saved = await services.reports.save_draft(payload.to_report())
    return WeeklyReportRead.model_validate(saved)


@router.post("/weekly-reports/submit", response_model=WeeklyReportRead)
async def submit_report(payload: WeeklyReportIn, services: ServiceContainer = Depends(get_services)) -> WeeklyReportRead:
    saved = await services.reports.submit(payload.to_report())
    return WeeklyReportRead.model_validate(saved)


@router.post("/weekly-reports/summary", response_model=WeeklyReportRead)
async def generate_summary(
    payload: SummaryRequest, services: ServiceContainer = Depends(get_services)
) -> WeeklyReportRead:
    report = await services.reports.generate_summary(payload.report.to_report(), locale=payload.locale)
    return WeeklyReportRead.model_validate(report)


@router.get("/weekly-reports/{report_id}", response_model=WeeklyReportViewRead)
async def view_report(
    report_id: str,
    locale: Optional[str] = Query(None),
    services: ServiceContainer = Depends(get_services),
) -> WeeklyReportViewRead:
    view = services.reports.view(report_id)
    return WeeklyReportViewRead.from_view(view, localization.normalize_locale(locale))


@router.delete("/weekly-reports/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_report(report_id: str, services: ServiceContainer = Depends(get_services)) -> Response:
    await services.reports.delete(report_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/weekly-reports/{report_id}/export")
async def export_report_pdf(
    report_id: str,
    locale: Optional[str] = Query(None),
    services: ServiceContainer = Depends(get_services),
) -> StreamingResponse:
    view = services.reports.view(report_id)
    pdf_bytes = pdf_export.build_weekly_report_pdf(view, locale=localization.normalize_locale(locale))
    return StreamingResponse(
        BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={"Content-Disposition": f"inline; filename={view.report_number}.pdf"},
    )


# -- narrative --------------------------------------------------------------------
@router.post("/narrative/assess", response_model=AssessRead)
async def assess_finding(payload: AssessRequest, services: ServiceContainer = Depends(get_services)) -> AssessRead:
    note = await services.narrative.assess_finding(payload.observation, payload.category, payload.locale)
    return AssessRead(risk=note.risk_note, action=note.action)
