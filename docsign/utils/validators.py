"""Validation utilities for signature input and document references."""

import re

from docsign.core.errors import ValidationError

UNSUPPORTED_FILE_TYPE = "unsupported file type"
FILE_TOO_LARGE = "file too large"
IMAGE_TOO_LARGE = "image dimensions too large"

_DOCUMENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def validate_signature_upload(content_type: str | None, size: int, max_size: int) -> None:
    """Validate an uploaded signature image.

    Raises ValidationError("unsupported file type") for non-image MIME types and
    ValidationError("file too large") when the file exceeds max_size bytes.
    """
    if not content_type or not content_type.lower().startswith("image/"):
        raise ValidationError(UNSUPPORTED_FILE_TYPE)
    if size > max_size:
        raise ValidationError(FILE_TOO_LARGE)


def file_extension_for(content_type: str) -> str:
    """Return the file extension the backend expects for a MIME type."""
    parts = content_type.lower().split("/")
    return parts[1] if len(parts) > 1 and parts[1] else "png"


def validate_document_id(document_id: str) -> bool:
    """Validate a document identifier."""
    if not document_id or not isinstance(document_id, str):
        return False
    return bool(_DOCUMENT_ID_PATTERN.match(document_id))
