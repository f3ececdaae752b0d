"""
Import one invoice per row of a CSV file from the CLI.
"""

from __future__ import annotations

import argparse
import uuid
from pathlib import Path

from app.logging_utils import configure_logging
from app.schemas.invoice import InvoiceImportReportResponse
from app.services.invoice_import_service import get_invoice_import_service
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Import invoices from a CSV file.")
    parser.add_argument("path", type=Path, help="CSV file to import.")
    parser.add_argument(
        "--owner-id",
        dest="owner_id",
        type=uuid.UUID,
        required=True,
        help="Owner of every created invoice.",
    )
    args = parser.parse_args()

    configure_logging()
    service = get_invoice_import_service()
    with SessionLocal() as db:
        report = service.import_invoices(
            db=db,
            owner_id=args.owner_id,
            file_name=args.path.name,
            content=args.path.read_bytes(),
        )

    response = InvoiceImportReportResponse.model_validate(report, from_attributes=True)
    print(response.model_dump_json(indent=2))
    return 0 if report.error_count == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
