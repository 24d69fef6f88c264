"""FastAPI routes for the report collection."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel

from controllers.report_controller import (
	create_report,
	delete_report,
	get_report,
	list_reports,
	update_report,
)
from models.report import DEFAULT_STATUS, ReportPatch, ReportStatus

router = APIRouter(prefix="/reports")


class ReportPayload(BaseModel):
	latitude: str
	longitude: str
	status: ReportStatus = DEFAULT_STATUS
	description: str
	photo_file_name: Optional[str] = None


class ReportPatchPayload(BaseModel):
	latitude: Optional[str] = None
	longitude: Optional[str] = None
	status: Optional[ReportStatus] = None
	description: Optional[str] = None
	photo_file_name: Optional[str] = None


@router.get("")
async def list_reports_route(request: Request):
	try:
		return await list_reports(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("", status_code=201)
async def create_report_route(request: Request, payload: ReportPayload):
	try:
		return await create_report(
			request,
			payload.latitude,
			payload.longitude,
			payload.status,
			payload.description,
			payload.photo_file_name,
		)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{report_id}")
async def get_report_route(request: Request, report_id: str):
	try:
		return await get_report(request, report_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.patch("/{report_id}")
async def update_report_route(request: Request, report_id: str, payload: ReportPatchPayload):
	patch = ReportPatch(**payload.model_dump())
	try:
		return await update_report(request, report_id, patch)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/{report_id}", status_code=204)
async def delete_report_route(request: Request, report_id: str):
	try:
		await delete_report(request, report_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
	return Response(status_code=204)
