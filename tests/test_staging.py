"""
tests/test_staging.py

Pytest tests for the staged-file area and upload validation.
"""

from __future__ import annotations

import uuid
from pathlib import Path

import pytest

from app.domain.errors import StorageError, ValidationError
from db.repositories.errors import FileStorageError, UploadValidationError
from db.repositories.storage import LocalFileStorage
from db.repositories.types import UploadFileInput
from db.repositories.validators import validate_upload_payload


def _upload(file_name: str = "data.csv", content: bytes = b"a\n1\n", content_type: str | None = None) -> UploadFileInput:
    return UploadFileInput(
        owner_id=uuid.uuid4(),
        file_name=file_name,
        content=content,
        content_type=content_type,
    )


class TestLocalFileStorage:
    def test_save_open_delete(
        self, storage: LocalFileStorage, upload_root: Path, owner_id: uuid.UUID
    ) -> None:
        stored = storage.save(owner_id=owner_id, file_name="../../data.csv", content=b"a\n1\n")

        assert stored.file_name == "data.csv"
        assert stored.storage_path.startswith(str(owner_id))
        assert stored.file_size_bytes == 4
        assert (upload_root / stored.storage_path).is_file()
        with storage.open(storage_path=stored.storage_path) as handle:
            assert handle.read() == b"a\n1\n"

        storage.delete(storage_path=stored.storage_path)

        assert not (upload_root / stored.storage_path).exists()

    def test_delete_missing_file_is_a_no_op(self, storage: LocalFileStorage) -> None:
        storage.delete(storage_path="nobody/2026/01/missing.csv")

    def test_open_missing_file_raises_storage_error(self, storage: LocalFileStorage) -> None:
        with pytest.raises(StorageError):
            storage.open(storage_path="nobody/2026/01/missing.csv")

    def test_paths_outside_root_are_refused(self, storage: LocalFileStorage) -> None:
        with pytest.raises(FileStorageError):
            storage.open(storage_path="../../etc/passwd")
        with pytest.raises(FileStorageError):
            storage.delete(storage_path="../../etc/passwd")


class TestUploadValidation:
    def test_accepts_csv(self) -> None:
        validate_upload_payload(_upload(content_type="text/csv"))

    def test_accepts_empty_content(self) -> None:
        validate_upload_payload(_upload(content=b""))

    @pytest.mark.parametrize("file_name", ["data.xlsx", "data", "  "])
    def test_rejects_other_file_names(self, file_name: str) -> None:
        with pytest.raises(UploadValidationError):
            validate_upload_payload(_upload(file_name=file_name))

    def test_rejects_unknown_content_type(self) -> None:
        with pytest.raises(ValidationError):
            validate_upload_payload(_upload(content_type="image/png"))

    def test_rejects_oversized_upload(self) -> None:
        with pytest.raises(UploadValidationError):
            validate_upload_payload(_upload(content=b"x" * 11), max_bytes=10)
