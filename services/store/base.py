"""Contract shared by every report store client."""

from __future__ import annotations

from typing import List, Protocol

from models.report import Report, ReportDraft, ReportPatch


class ReportStore(Protocol):
    """Async collection of reports keyed by an opaque id.

    Implementations raise `StoreUnavailable` when the backing service cannot
    be reached, `ValidationRejected` from `create` for incomplete drafts and
    `NotFound` from `update`/`delete` for unknown ids.
    """

    async def list(self) -> List[Report]:
        """Return every report, newest `timestamp` first."""
        ...

    async def create(self, draft: ReportDraft) -> str:
        """Persist a new report, assigning its id and timestamp."""
        ...

    async def update(self, report_id: str, patch: ReportPatch) -> None:
        ...

    async def delete(self, report_id: str) -> None:
        ...

    async def aclose(self) -> None:
        ...
