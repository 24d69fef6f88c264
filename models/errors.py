"""Exceptions raised across the report store, cache and controller layers."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from models.report import FieldError


class CableEyeError(Exception):
    """Base class for all domain errors."""


class ValidationFailed(CableEyeError):
    """A draft failed client-side validation; carries field-level errors."""

    def __init__(self, errors: List["FieldError"]) -> None:
        self.errors = list(errors)
        summary = "; ".join(f"{err.field}: {err.message}" for err in self.errors)
        super().__init__(summary or "Validation failed")

    def by_field(self) -> dict:
        """Return the first error message for every failing field."""
        messages: dict = {}
        for err in self.errors:
            messages.setdefault(err.field, err.message)
        return messages


class ValidationRejected(CableEyeError):
    """The store refused a write because required fields were missing."""


class StoreUnavailable(CableEyeError):
    """The backing report store could not be reached."""


class NotFound(CableEyeError):
    """No report exists for the requested id."""

    def __init__(self, report_id: str) -> None:
        self.report_id = report_id
        super().__init__(f"Report {report_id} not found")


class LocalCacheCorrupted(CableEyeError):
    """The persisted local snapshot could not be decoded."""
