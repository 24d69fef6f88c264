"""FastAPI routes for the user and admin dashboards."""

from fastapi import APIRouter, HTTPException, Request

from controllers.dashboard_view_controller import admin_dashboard, user_dashboard

router = APIRouter()


@router.get("/dashboard")
async def user_dashboard_route(request: Request):
	"""Recent reports and the map summary shown to field workers."""
	try:
		return await user_dashboard(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/admin/dashboard")
async def admin_dashboard_route(request: Request):
	"""Status totals and chart data for administrators."""
	try:
		return await admin_dashboard(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
