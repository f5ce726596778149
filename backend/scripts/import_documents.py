#!/usr/bin/env python3
"""
Import campaigns, creators and applications from a JSON export.

Usage:
    cd backend && source ../venv/bin/activate
    python scripts/import_documents.py export.json

    # Validate only, write nothing
    python scripts/import_documents.py export.json --dry-run
"""

import argparse
import asyncio
import json
import logging
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from relacollab.core.database import dispose_engine, get_session_maker, init_db
from relacollab.services.document_import_service import DocumentImportService
from relacollab.services.document_store import SqlDocumentStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def main(path: str, dry_run: bool) -> None:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    print("=" * 60)
    print(f"Document import{' (dry run)' if dry_run else ''}: {path}")
    print("=" * 60)

    if not dry_run:
        await init_db()

    session_maker = get_session_maker()
    try:
        async with session_maker() as db:
            service = DocumentImportService(SqlDocumentStore(db))
            stats = await service.import_export(data, dry_run=dry_run)
    finally:
        await dispose_engine()

    for collection, counts in stats.items():
        line = f"   - {collection}: {counts['imported']} imported, {counts['invalid']} invalid"
        if counts.get("malformed"):
            line += f" ({counts['malformed']} with malformed fields)"
        print(line)

    print("=" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Import marketplace documents from a JSON export")
    parser.add_argument("path", help="Path to the JSON export")
    parser.add_argument("--dry-run", action="store_true", help="Validate without writing")
    args = parser.parse_args()

    asyncio.run(main(args.path, args.dry_run))
