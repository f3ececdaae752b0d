"""
app/mappers/invoice_row_mapper.py

Alias-based mapping from decoded tabular rows to invoice payload fields.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

INVOICE_ROW_FIELDS: tuple[str, ...] = (
    "description",
    "quantity",
    "price",
    "due_date",
    "notes",
)

DEFAULT_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "description": ("description", "desc", "item", "item_description", "product"),
    "quantity": ("quantity", "qty", "units", "count"),
    "price": ("price", "unit_price", "unit_cost", "rate"),
    "due_date": ("due_date", "due", "due_on", "payment_due"),
    "notes": ("notes", "note", "memo", "comment"),
}


def normalize_header(header: str) -> str:
    """
    Normalize a column name for flexible matching.
    """

    return "".join(ch for ch in header.strip().lower() if ch.isalnum())


class InvoiceRowMapper:
    """
    Maps one row's cells onto invoice fields by header alias.
    """

    def __init__(self, *, aliases: Mapping[str, Sequence[str]] | None = None) -> None:
        self._aliases: dict[str, tuple[str, ...]] = {
            field: tuple(normalize_header(alias) for alias in values)
            for field, values in (aliases or DEFAULT_COLUMN_ALIASES).items()
        }

    def map_row(self, values: Mapping[str, str]) -> dict[str, str | None]:
        """
        Return ``{field: cell}`` for every known field; absent columns map to None.
        """

        lookup: dict[str, str] = {}
        for header, cell in values.items():
            key = normalize_header(header)
            if key and key not in lookup:
                lookup[key] = cell

        mapped: dict[str, str | None] = {}
        for field in INVOICE_ROW_FIELDS:
            mapped[field] = next(
                (lookup[alias] for alias in self._aliases.get(field, ()) if alias in lookup),
                None,
            )
        return mapped

    @staticmethod
    def to_payload(mapped: Mapping[str, str | None]) -> dict[str, Any]:
        """
        Shape a mapped row as an ``InvoiceCreate`` payload with a single item.
        """

        return {
            "items": [
                {
                    "description": mapped.get("description"),
                    "quantity": mapped.get("quantity"),
                    "price": mapped.get("price"),
                }
            ],
            "due_date": mapped.get("due_date"),
            "notes": mapped.get("notes"),
        }
