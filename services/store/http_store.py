"""Remote report store client talking to the CableEye HTTP service."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from models.errors import NotFound, StoreUnavailable, ValidationRejected
from models.report import Report, ReportDraft, ReportPatch

LOGGER = logging.getLogger(__name__)


class HttpReportStore:
    """ReportStore over the `/reports` REST collection.

    Args:
        base_url: Root URL of the report service (e.g. http://localhost:8000).
        timeout: Per-request timeout in seconds.
        client: Optional preconfigured `httpx.AsyncClient` (tests inject one
            with a mock transport). The store only closes clients it created.
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def _request(self, method: str, url: str, report_id: Optional[str] = None, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            LOGGER.error("Report service request %s %s failed: %s", method, url, exc)
            raise StoreUnavailable(f"Report service unreachable: {exc}") from exc

        if response.status_code == 404 and report_id is not None:
            raise NotFound(report_id)
        if response.status_code == 422:
            raise ValidationRejected(_detail(response))
        if response.status_code >= 400:
            LOGGER.error("Report service returned %s for %s %s", response.status_code, method, url)
            raise StoreUnavailable(f"Report service error {response.status_code}: {_detail(response)}")
        return response

    async def list(self) -> List[Report]:
        response = await self._request("GET", "/reports")
        try:
            docs = response.json()
            if not isinstance(docs, list) or not all(isinstance(doc, dict) for doc in docs):
                raise ValueError("expected a list of report documents")
            return [Report.from_document(doc) for doc in docs]
        except ValueError as exc:
            raise StoreUnavailable(f"Malformed report listing: {exc}") from exc

    async def create(self, draft: ReportDraft) -> str:
        payload: Dict[str, Any] = {
            "latitude": draft.latitude,
            "longitude": draft.longitude,
            "status": _status_value(draft.status),
            "description": draft.description,
            "photo_file_name": draft.photo_file_name,
        }
        response = await self._request("POST", "/reports", json=payload)
        try:
            body = response.json()
        except ValueError as exc:
            raise StoreUnavailable(f"Malformed create response: {exc}") from exc
        if not isinstance(body, dict) or not body.get("id"):
            raise StoreUnavailable("Report service did not return a report id")
        return str(body["id"])

    async def update(self, report_id: str, patch: ReportPatch) -> None:
        payload = {
            key: _status_value(value) if key == "status" else value
            for key, value in patch.changes().items()
        }
        await self._request("PATCH", f"/reports/{report_id}", report_id=report_id, json=payload)

    async def delete(self, report_id: str) -> None:
        await self._request("DELETE", f"/reports/{report_id}", report_id=report_id)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _status_value(status: Any) -> Any:
    return getattr(status, "value", status)


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)
