"""Validation helpers for photos selected in the report form."""

from typing import List, Optional

from models.report import DraftErrorKind, FieldError

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".gif", ".heic", ".heif")

PHOTO_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB


def validate_photo(file_name: Optional[str], content_type: Optional[str], data: bytes) -> List[FieldError]:
    """Check that a selected file looks like a usable photo.

    The form accepts any `image/*` type the camera or file picker produces;
    when the content type is missing, the extension is checked instead.
    """
    errors: List[FieldError] = []
    if not file_name:
        errors.append(FieldError("photo", DraftErrorKind.REQUIRED, "Photo must have a filename."))
        return errors

    if content_type:
        normalized = content_type.lower().split(";", 1)[0].strip()
        if not normalized.startswith("image/"):
            errors.append(FieldError("photo", DraftErrorKind.INVALID_FILE, f"Unsupported photo type: {content_type}"))
    elif not file_name.lower().endswith(IMAGE_EXTENSIONS):
        errors.append(FieldError("photo", DraftErrorKind.INVALID_FILE, "Unsupported or missing photo type."))

    if not data:
        errors.append(FieldError("photo", DraftErrorKind.REQUIRED, "Selected photo is empty."))
    elif len(data) > PHOTO_MAX_FILE_SIZE:
        errors.append(FieldError("photo", DraftErrorKind.TOO_LONG, "Photo is larger than 10 MB."))

    return errors
