"""
Validation helpers for staged-upload flows.
"""

from __future__ import annotations

from pathlib import Path

from db.repositories.errors import UploadValidationError
from db.repositories.types import UploadFileInput

ALLOWED_EXTENSIONS = {".csv"}
ALLOWED_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
    "text/plain",
    "application/octet-stream",
}
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


def validate_upload_payload(
    payload: UploadFileInput,
    *,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> None:
    """
    Validate an upload before it is written to the staged-file area.

    Empty content is accepted: a header-less or row-less file decodes to an
    empty sequence.
    """

    if not payload.file_name or not payload.file_name.strip():
        raise UploadValidationError("file_name is required.", column="file_name")

    extension = Path(payload.file_name).suffix.lower()
    if extension not in ALLOWED_EXTENSIONS:
        raise UploadValidationError(
            f"Unsupported file type '{extension}'. Allowed: {sorted(ALLOWED_EXTENSIONS)}.",
            column="file_name",
            value=payload.file_name,
        )

    if payload.content_type and payload.content_type.lower() not in ALLOWED_CONTENT_TYPES:
        raise UploadValidationError(
            f"Unsupported content_type '{payload.content_type}'.",
            column="content_type",
            value=payload.content_type,
        )

    if len(payload.content) > max_bytes:
        raise UploadValidationError("Uploaded file exceeds configured size limit.")
