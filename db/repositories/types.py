"""
Typed DTOs used by repository upload/storage flows.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UploadFileInput:
    """
    Input payload for staging one uploaded tabular file.
    """

    owner_id: uuid.UUID
    file_name: str
    content: bytes
    content_type: str | None = None


@dataclass(frozen=True)
class StoredFileMetadata:
    """
    Metadata produced by the storage backend after staging a file.
    """

    file_name: str
    storage_path: str
    mime_type: str | None
    file_size_bytes: int
    checksum: str
    stored_at: datetime
