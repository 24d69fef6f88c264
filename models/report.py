"""Report domain model, draft schema and validation."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from config import DESCRIPTION_MAX_LENGTH


class ReportStatus(str, Enum):
    IDENTIFIED = "identified"
    DOUBTFUL = "doubtful"
    NOT_YET_IDENTIFIED = "not_yet_identified"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS = {
    ReportStatus.IDENTIFIED: "Identified",
    ReportStatus.DOUBTFUL: "Doubtful",
    ReportStatus.NOT_YET_IDENTIFIED: "Not Yet Identified",
}

DEFAULT_STATUS = ReportStatus.NOT_YET_IDENTIFIED


_last_now: Optional[datetime] = None


def utcnow() -> datetime:
    """Current UTC time, strictly increasing within this process.

    Coarse system clocks can return the same instant twice; consecutive
    writes still need distinct timestamps to order newest first.
    """
    global _last_now
    now = datetime.now(timezone.utc)
    if _last_now is not None and now <= _last_now:
        now = _last_now + timedelta(microseconds=1)
    _last_now = now
    return now


def parse_timestamp(value: Union[str, int, float, datetime]) -> datetime:
    """Parse an ISO-8601 string or unix seconds into an aware UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass
class Report:
    """A logged cable anomaly.

    Attributes:
        id: Opaque identifier (server-assigned, or provisional until reconciled).
        latitude: Decimal-degree latitude string.
        longitude: Decimal-degree longitude string.
        status: One of the three ReportStatus variants.
        description: Free text, 1-500 characters.
        timestamp: Creation/update instant in UTC.
        photo_file_name: Name of the attached photo; the binary is never stored.
        photo_preview_ref: Process-local preview handle; never serialized.
    """

    id: str
    latitude: str
    longitude: str
    status: ReportStatus
    description: str
    timestamp: datetime
    photo_file_name: Optional[str] = None
    photo_preview_ref: Optional[str] = field(default=None, compare=False)

    def to_document(self) -> Dict[str, Any]:
        """Return the JSON-compatible document stored for this report."""
        return {
            "id": self.id,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "status": self.status.value,
            "description": self.description,
            "photo_file_name": self.photo_file_name,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Report":
        """Build a Report from a stored document.

        Raises:
            ValueError: If a field is missing or holds an invalid value.
        """
        try:
            return cls(
                id=str(doc["id"]),
                latitude=str(doc["latitude"]),
                longitude=str(doc["longitude"]),
                status=ReportStatus(doc["status"]),
                description=str(doc["description"]),
                photo_file_name=doc.get("photo_file_name"),
                timestamp=parse_timestamp(doc["timestamp"]),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed report document: {exc}") from exc

    def user_fields(self) -> Dict[str, Any]:
        """Fields supplied by the reporter (everything but id and timestamp)."""
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "status": self.status,
            "description": self.description,
            "photo_file_name": self.photo_file_name,
        }


@dataclass
class ReportDraft:
    """Fixed-shape payload collected by the report form."""

    latitude: str = ""
    longitude: str = ""
    status: Union[ReportStatus, str, None] = DEFAULT_STATUS
    description: str = ""
    photo_file_name: Optional[str] = None
    photo_preview_ref: Optional[str] = None

    def normalized(self) -> "ReportDraft":
        """Return a copy with the status coerced to ReportStatus.

        Only valid for drafts that passed `validate_draft`.
        """
        return replace(self, status=ReportStatus(self.status))

    def to_patch(self) -> "ReportPatch":
        return ReportPatch(
            latitude=self.latitude,
            longitude=self.longitude,
            status=ReportStatus(self.status),
            description=self.description,
            photo_file_name=self.photo_file_name,
        )


@dataclass
class ReportPatch:
    """Partial update; fields left as None keep their stored value."""

    latitude: Optional[str] = None
    longitude: Optional[str] = None
    status: Optional[ReportStatus] = None
    description: Optional[str] = None
    photo_file_name: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        return {key: value for key, value in self.__dict__.items() if value is not None}

    def apply(self, report: Report, timestamp: Optional[datetime] = None) -> Report:
        """Return `report` with this patch applied and the timestamp refreshed."""
        return replace(report, **self.changes(), timestamp=timestamp or utcnow())


class DraftErrorKind(str, Enum):
    REQUIRED = "required"
    TOO_LONG = "too_long"
    INVALID_CHOICE = "invalid_choice"
    INVALID_FILE = "invalid_file"


@dataclass(frozen=True)
class FieldError:
    field: str
    kind: DraftErrorKind
    message: str


def _is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def validate_draft(draft: ReportDraft) -> List[FieldError]:
    """Check a draft against the report schema.

    Returns:
        A list of field errors, empty when the draft is valid.
    """
    errors: List[FieldError] = []

    if _is_blank(draft.latitude):
        errors.append(FieldError("latitude", DraftErrorKind.REQUIRED, "Latitude is required."))
    if _is_blank(draft.longitude):
        errors.append(FieldError("longitude", DraftErrorKind.REQUIRED, "Longitude is required."))

    if _is_blank(draft.status):
        errors.append(FieldError("status", DraftErrorKind.REQUIRED, "Status is required."))
    else:
        try:
            ReportStatus(draft.status)
        except ValueError:
            errors.append(FieldError("status", DraftErrorKind.INVALID_CHOICE, "Invalid status."))

    description = draft.description or ""
    if not description:
        errors.append(FieldError("description", DraftErrorKind.REQUIRED, "Description is required."))
    elif len(description) > DESCRIPTION_MAX_LENGTH:
        errors.append(FieldError("description", DraftErrorKind.TOO_LONG, "Description too long."))

    return errors
