"""Print the reports stored in the project's SQLite database.

Reports are listed newest first, followed by the per-status totals shown on
the admin dashboard. It reuses the same `DATABASE_DIR` behavior as the
application via `utils.database_init.AsyncDatabaseInitializer`.

Run: set the `DATABASE_DIR` environment variable and run
      `python print_reports.py`.
"""
import asyncio
from typing import List

from models.report import Report
from services.aggregation import STATUS_ORDER, count_by_status
from services.store.sqlite_store import SqliteReportStore
from utils.database_init import AsyncDatabaseInitializer


def format_report(report: Report) -> str:
    """Return a one-line summary of a report."""
    line = (
        f"{report.timestamp:%Y-%m-%d %H:%M:%S} [{report.status.label}] "
        f"({report.latitude}, {report.longitude}) {report.description!r}"
    )
    if report.photo_file_name:
        line += f" photo={report.photo_file_name}"
    return f"{report.id}: {line}"


def format_totals(reports: List[Report]) -> List[str]:
    counts = count_by_status(reports)
    return [f"Total {status.label}: {counts[status]}" for status in STATUS_ORDER]


async def main() -> None:
    """List every stored report and the status totals."""
    store = SqliteReportStore(AsyncDatabaseInitializer(reset=False))
    reports = await store.list()
    if not reports:
        print("No reports submitted yet.")
    for report in reports:
        print(format_report(report))
    print()
    for line in format_totals(reports):
        print(line)


if __name__ == "__main__":
    asyncio.run(main())
