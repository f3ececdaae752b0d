"""
Import a CSV file as one campaign from the CLI.
"""

from __future__ import annotations

import argparse
import uuid
from pathlib import Path

from app.logging_utils import configure_logging
from app.schemas.campaign import CampaignSummaryResponse
from app.services.campaign_import_service import get_campaign_import_service
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Import a CSV file as a campaign.")
    parser.add_argument("path", type=Path, help="CSV file to import.")
    parser.add_argument("--owner-id", dest="owner_id", type=uuid.UUID, required=True)
    parser.add_argument("--name", dest="name", required=True, help="Campaign name.")
    parser.add_argument("--description", dest="description", default=None)
    args = parser.parse_args()

    configure_logging()
    service = get_campaign_import_service()
    with SessionLocal() as db:
        summary = service.import_campaign(
            db=db,
            owner_id=args.owner_id,
            name=args.name,
            description=args.description,
            file_name=args.path.name,
            content=args.path.read_bytes(),
        )

    response = CampaignSummaryResponse.model_validate(summary, from_attributes=True)
    print(response.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
