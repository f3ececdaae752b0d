"""
app/validators/invoice_row_validator.py

Row-level validation for per-record invoice import.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import ValidationError as PydanticValidationError

from app.domain.errors import ValidationError
from app.domain.ingestion import RawRecord
from app.mappers.invoice_row_mapper import InvoiceRowMapper
from app.schemas.invoice import InvoiceCreate

_REQUIRED_ROW_FIELDS: tuple[str, ...] = ("description", "quantity", "price")


def format_validation_errors(exc: PydanticValidationError) -> str:
    """
    Flatten pydantic errors into one operator-readable message.
    """

    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if not isinstance(part, int))
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid payload."


class InvoiceRowValidator:
    """
    Validates one decoded row into an ``InvoiceCreate`` payload.
    """

    def __init__(
        self,
        *,
        default_due_days: int = 30,
        mapper: InvoiceRowMapper | None = None,
    ) -> None:
        self._default_due = timedelta(days=max(0, default_due_days))
        self._mapper = mapper or InvoiceRowMapper()

    def validate(self, record: RawRecord, *, now: datetime) -> InvoiceCreate:
        mapped = self._mapper.map_row(record.values)

        for field in _REQUIRED_ROW_FIELDS:
            value = mapped.get(field)
            if value is None or value.strip() == "":
                raise ValidationError(
                    f"{field}: Required value is missing.",
                    row_number=record.row_number,
                    column=field,
                    value=value,
                )

        if not (mapped.get("due_date") or "").strip():
            mapped["due_date"] = (now + self._default_due).isoformat()

        try:
            return InvoiceCreate.model_validate(self._mapper.to_payload(mapped))
        except PydanticValidationError as exc:
            raise ValidationError(
                format_validation_errors(exc),
                row_number=record.row_number,
            ) from exc
