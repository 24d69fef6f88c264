"""Request handlers for the `/reports` collection."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request

from models.errors import NotFound, StoreUnavailable, ValidationRejected
from models.report import ReportDraft, ReportPatch, ReportStatus
from services.store.sqlite_store import SqliteReportStore


def _store(request: Request) -> SqliteReportStore:
    return request.app.state.report_store


async def list_reports(request: Request) -> List[Dict[str, Any]]:
    """Return every report document, newest first."""
    try:
        reports = await _store(request).list()
    except StoreUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return [report.to_document() for report in reports]


async def get_report(request: Request, report_id: str) -> Dict[str, Any]:
    try:
        report = await _store(request).get(report_id)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except StoreUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return report.to_document()


async def create_report(
    request: Request,
    latitude: str,
    longitude: str,
    status: ReportStatus,
    description: str,
    photo_file_name: Optional[str] = None,
) -> Dict[str, Any]:
    """Persist a new report and return its server-assigned id."""
    draft = ReportDraft(
        latitude=latitude,
        longitude=longitude,
        status=status,
        description=description,
        photo_file_name=photo_file_name,
    )
    try:
        report_id = await _store(request).create(draft)
    except ValidationRejected as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except StoreUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return {"id": report_id}


async def update_report(request: Request, report_id: str, patch: ReportPatch) -> Dict[str, Any]:
    try:
        await _store(request).update(report_id, patch)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValidationRejected as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except StoreUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return {"id": report_id}


async def delete_report(request: Request, report_id: str) -> None:
    try:
        await _store(request).delete(report_id)
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except StoreUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
