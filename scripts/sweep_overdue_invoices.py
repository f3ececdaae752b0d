"""
Mark pending invoices past their due date as overdue.

Reads already sweep on demand; this is for cron-style runs that want the
stored statuses current without waiting for a read.
"""

from __future__ import annotations

import argparse

from app.logging_utils import configure_logging
from app.services.invoice_service import get_invoice_service
from app.validators.timestamps import parse_timestamp
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the overdue invoice sweep once.")
    parser.add_argument(
        "--as-of",
        dest="as_of",
        default=None,
        help="Optional clock override (ISO-8601); defaults to now.",
    )
    args = parser.parse_args()

    configure_logging()
    now = parse_timestamp(args.as_of) if args.as_of else None
    with SessionLocal() as db:
        get_invoice_service().sweep_overdue(db=db, now=now)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
