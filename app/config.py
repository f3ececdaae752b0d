"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class StagingSettings:
    """
    Staged-upload area settings shared by both importers.
    """

    upload_dir: str = "data/uploads"
    max_upload_bytes: int = 5 * 1024 * 1024


@dataclass(frozen=True)
class CampaignImportSettings:
    """
    Runtime settings for bulk campaign import.
    """

    max_records: int = 100_000


@dataclass(frozen=True)
class InvoiceImportSettings:
    """
    Runtime settings for per-record invoice import.
    """

    max_error_details: int = 500
    log_row_errors: bool = True
    default_due_days: int = 30


@dataclass(frozen=True)
class InvoiceSettings:
    """
    Invoice lifecycle settings.
    """

    number_max_attempts: int = 5


@dataclass(frozen=True)
class ListingSettings:
    """
    Pagination bounds for listing reads.
    """

    page_size_max: int = 100


@lru_cache(maxsize=1)
def get_staging_settings() -> StagingSettings:
    """
    Return cached staged-upload settings from environment variables.
    """

    return StagingSettings(
        upload_dir=_get_str_env("UPLOAD_STORAGE_DIR", "data/uploads"),
        max_upload_bytes=max(1, _get_int_env("UPLOAD_MAX_BYTES", 5 * 1024 * 1024)),
    )


@lru_cache(maxsize=1)
def get_campaign_import_settings() -> CampaignImportSettings:
    """
    Return cached campaign import settings from environment variables.
    """

    return CampaignImportSettings(
        max_records=max(1, _get_int_env("CAMPAIGN_IMPORT_MAX_RECORDS", 100_000)),
    )


@lru_cache(maxsize=1)
def get_invoice_import_settings() -> InvoiceImportSettings:
    """
    Return cached invoice import settings from environment variables.
    """

    return InvoiceImportSettings(
        max_error_details=max(1, _get_int_env("INVOICE_IMPORT_MAX_ERROR_DETAILS", 500)),
        log_row_errors=_get_bool_env("INVOICE_IMPORT_LOG_ROW_ERRORS", True),
        default_due_days=max(0, _get_int_env("INVOICE_IMPORT_DEFAULT_DUE_DAYS", 30)),
    )


@lru_cache(maxsize=1)
def get_invoice_settings() -> InvoiceSettings:
    """
    Return cached invoice lifecycle settings from environment variables.
    """

    return InvoiceSettings(
        number_max_attempts=max(1, _get_int_env("INVOICE_NUMBER_MAX_ATTEMPTS", 5)),
    )


@lru_cache(maxsize=1)
def get_listing_settings() -> ListingSettings:
    """
    Return cached pagination settings from environment variables.
    """

    return ListingSettings(
        page_size_max=max(1, _get_int_env("LIST_PAGE_SIZE_MAX", 100)),
    )
