"""Report form: draft editing, location capture and the photo preview lifecycle."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Awaitable, Callable, Dict, Optional, Tuple

from controllers.dashboard_controller import DashboardController
from models.errors import ValidationFailed
from models.report import DEFAULT_STATUS, Report, ReportDraft, validate_draft
from utils.media_validation import validate_photo

LOGGER = logging.getLogger(__name__)

# Async geolocation source returning (latitude, longitude).
Locator = Callable[[], Awaitable[Tuple[float, float]]]

_EDITABLE_FIELDS = ("latitude", "longitude", "status", "description")


class ReportForm:
    """Modal form used both to create and to edit reports.

    A photo preview selected in the form belongs to the form until the
    draft is submitted; it is released when replaced or when the form
    closes without submitting.
    """

    def __init__(self, controller: DashboardController) -> None:
        self.controller = controller
        self.notifier = controller.notifier
        self.previews = controller.previews
        self.is_open = False
        self.editing: Optional[Report] = None
        self.values = ReportDraft()
        self.errors: Dict[str, str] = {}
        self.file_name: Optional[str] = None
        self.preview_ref: Optional[str] = None
        self._owned_preview: Optional[str] = None

    @property
    def title(self) -> str:
        return "Edit Anomaly Report" if self.editing else "Report New Anomaly"

    @property
    def submit_label(self) -> str:
        return "Update Report" if self.editing else "Submit Report"

    @property
    def shows_existing_photo(self) -> bool:
        """True while an edited report's stored photo has not been replaced."""
        return bool(
            self.editing
            and self.editing.photo_file_name
            and self._owned_preview is None
            and self.file_name == self.editing.photo_file_name
        )

    def open(self, initial: Optional[Report] = None) -> None:
        """Reset the form, pre-filling it from `initial` when editing."""
        self._release_owned()
        self.editing = initial
        self.errors = {}
        if initial is None:
            self.values = ReportDraft(status=DEFAULT_STATUS)
            self.file_name = None
            self.preview_ref = None
        else:
            self.values = ReportDraft(
                latitude=initial.latitude,
                longitude=initial.longitude,
                status=initial.status,
                description=initial.description,
            )
            self.file_name = initial.photo_file_name
            # the cached report keeps owning its preview
            self.preview_ref = initial.photo_preview_ref if initial.photo_preview_ref in self.previews else None
        self.is_open = True

    def set_field(self, name: str, value: str) -> None:
        if name not in _EDITABLE_FIELDS:
            raise KeyError(f"Unknown form field: {name}")
        self.values = replace(self.values, **{name: value})
        if name in self.errors:
            self._validate_field(name)

    def _validate_field(self, name: str) -> None:
        for err in validate_draft(self.values):
            if err.field == name:
                self.errors[name] = err.message
                return
        self.errors.pop(name, None)

    async def capture_location(self, locator: Optional[Locator]) -> bool:
        """Fill latitude/longitude from a geolocation source."""
        if locator is None:
            self.notifier.error("Location Not Supported", "Geolocation is not supported by this browser.")
            return False
        try:
            latitude, longitude = await locator()
        except Exception as exc:
            LOGGER.error("Error getting location: %s", exc)
            self.notifier.error("Location Error", "Could not retrieve current location.")
            return False

        self.set_field("latitude", str(latitude))
        self.set_field("longitude", str(longitude))
        self.notifier.toast("Location Captured", f"Lat: {latitude:.4f}, Lon: {longitude:.4f}")
        return True

    async def select_photo(self, file_name: str, content_type: Optional[str], data: bytes) -> bool:
        """Attach a photo, replacing (and releasing) any previous selection."""
        problems = validate_photo(file_name, content_type, data)
        if problems:
            self.errors["photo"] = problems[0].message
            return False
        try:
            ref = await self.previews.acquire(file_name, data)
        except ValueError as exc:
            self.errors["photo"] = str(exc)
            return False

        self._release_owned()
        self._owned_preview = ref
        self.preview_ref = ref
        self.file_name = file_name
        self.errors.pop("photo", None)
        return True

    def submit(self) -> Optional[asyncio.Task]:
        """Validate and hand the draft to the dashboard controller.

        Returns the controller's sync task, or None when the draft is invalid
        (errors are left in `self.errors` and the form stays open).
        """
        draft = replace(
            self.values,
            photo_file_name=self.file_name if self._owned_preview else None,
            photo_preview_ref=self._owned_preview,
        )
        try:
            task = self.controller.submit(draft, self.editing.id if self.editing else None)
        except ValidationFailed as exc:
            self.errors = exc.by_field()
            return None

        # the submitted preview now belongs to the cached report
        self._owned_preview = None
        self.close()
        return task

    def close(self) -> None:
        self._release_owned()
        self.is_open = False
        self.editing = None
        self.preview_ref = None

    def _release_owned(self) -> None:
        if self._owned_preview:
            self.previews.release(self._owned_preview)
            self._owned_preview = None
