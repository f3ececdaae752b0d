"""
app/mappers package marker.
"""

from app.mappers.invoice_row_mapper import InvoiceRowMapper, normalize_header

__all__ = ["InvoiceRowMapper", "normalize_header"]
