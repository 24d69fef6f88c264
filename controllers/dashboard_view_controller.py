"""Server-side projections backing the user and admin dashboards."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import HTTPException, Request

from config import RECENT_REPORTS_LIMIT
from models.errors import StoreUnavailable
from services import aggregation


async def user_dashboard(request: Request, limit: int = RECENT_REPORTS_LIMIT) -> Dict[str, Any]:
    """Recent reports card plus the map placeholder summary."""
    try:
        reports = await request.app.state.report_store.list()
    except StoreUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    total = len(reports)
    return {
        "recent_reports": [
            {**report.to_document(), "status_label": report.status.label}
            for report in reports[:limit]
        ],
        "total": total,
        "has_more": total > limit,
        "map_summary": aggregation.map_summary(total),
    }


async def admin_dashboard(request: Request) -> Dict[str, Any]:
    """Per-status totals and bar chart rows."""
    try:
        reports = await request.app.state.report_store.list()
    except StoreUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    counts = aggregation.count_by_status(reports)
    return {
        "counts": {status.value: count for status, count in counts.items()},
        "total": len(reports),
        "chart": aggregation.chart_data(reports),
    }
