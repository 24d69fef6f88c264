"""Status counts and chart rows for the admin dashboard."""

from __future__ import annotations

from typing import Dict, Iterable, List

from models.report import Report, ReportStatus

STATUS_ORDER = (
    ReportStatus.IDENTIFIED,
    ReportStatus.DOUBTFUL,
    ReportStatus.NOT_YET_IDENTIFIED,
)

STATUS_COLORS = {
    ReportStatus.IDENTIFIED: "hsl(var(--chart-1))",
    ReportStatus.DOUBTFUL: "hsl(var(--chart-2))",
    ReportStatus.NOT_YET_IDENTIFIED: "hsl(var(--chart-5))",
}


def count_by_status(reports: Iterable[Report]) -> Dict[ReportStatus, int]:
    """Count reports per status; every status is present, zero included."""
    counts = {status: 0 for status in STATUS_ORDER}
    for report in reports:
        counts[report.status] += 1
    return counts


def chart_data(reports: Iterable[Report]) -> List[Dict[str, object]]:
    """Bar chart rows in fixed status order."""
    counts = count_by_status(reports)
    return [
        {
            "status": status.value,
            "label": status.label,
            "count": counts[status],
            "fill": STATUS_COLORS[status],
        }
        for status in STATUS_ORDER
    ]


def map_summary(count: int) -> str:
    """Placeholder text shown where the report map will be rendered."""
    if count == 0:
        return "No reports to display on map yet."
    return f"Currently showing {count} report(s) on map."
