#!/usr/bin/env python3
"""
Recompute cached rule-based matches (campaigns/{id}/matches/{creatorId}).

Run after changing scoring weights or bulk-importing creators.

Usage:
    cd backend && source ../venv/bin/activate
    python scripts/rescore_matches.py                       # every active campaign
    python scripts/rescore_matches.py --campaign-id abc123  # one campaign (repeatable)
"""

import argparse
import asyncio
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from relacollab.core.database import dispose_engine, get_session_maker
from relacollab.core.exceptions import NotFoundError
from relacollab.services.document_store import SqlDocumentStore
from relacollab.services.matching_service import MatchingService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def main(campaign_ids: list[str]) -> int:
    session_maker = get_session_maker()
    try:
        async with session_maker() as db:
            service = MatchingService(SqlDocumentStore(db))
            counts = await service.rescore_campaigns(campaign_ids or None)
    except NotFoundError as e:
        logger.error(e.message)
        return 1
    finally:
        await dispose_engine()

    logger.info(f"Rescored {len(counts)} campaigns, {sum(counts.values())} matches")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Recompute cached match scores")
    parser.add_argument(
        "--campaign-id",
        action="append",
        default=[],
        help="Campaign to rescore (repeatable; default: all active campaigns)",
    )
    args = parser.parse_args()

    sys.exit(asyncio.run(main(args.campaign_id)))
