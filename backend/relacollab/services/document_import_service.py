"""
Import campaign, creator and application documents from a JSON export.

Expected shape (as produced by the web app's export tool):

    {
      "campaigns":    [{"id": "...", "name": "...", "vibes": [...], ...}],
      "creators":     [{"id": "...", "location": "...", "instagramMetrics": {...}, ...}],
      "applications": [{"id": "...", "campaignId": "...", "creatorId": "...", "status": "pending"}]
    }

Only structurally broken documents (not an object, no id) are skipped.
Everything else is stored as-is: the matcher reads raw documents and copes
with odd field values, so a document that does not fit the typed schema is
still imported and counted as "malformed".
"""
from typing import Any, Dict, List
import logging

from pydantic import BaseModel, ValidationError

from relacollab.schemas.campaign import Campaign
from relacollab.schemas.creator import CreatorProfile
from relacollab.services.document_store import DocumentStore

logger = logging.getLogger(__name__)


class DocumentImportService:
    """Checks exported documents and writes them to a DocumentStore."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def import_export(self, data: Dict[str, Any], dry_run: bool = False) -> Dict[str, Dict[str, int]]:
        """
        Import every collection of an export.

        Returns:
            Per-collection counts:
            {"campaigns": {"imported": n, "invalid": m, "malformed": k}, ...}
            `malformed` documents are part of `imported`.
        """
        stats = {
            "campaigns": await self._import_collection(
                data.get("campaigns") or [], Campaign, self.store.upsert_campaign, dry_run
            ),
            "creators": await self._import_collection(
                data.get("creators") or [], CreatorProfile, self.store.upsert_creator, dry_run
            ),
            "applications": await self._import_applications(data.get("applications") or [], dry_run),
        }
        logger.info(
            f"📊 IMPORT RESULT: "
            + ", ".join(f"{name} {s['imported']} imported / {s['invalid']} invalid" for name, s in stats.items())
        )
        return stats

    async def _import_collection(
        self,
        docs: List[Any],
        schema: type[BaseModel],
        upsert,
        dry_run: bool,
    ) -> Dict[str, int]:
        imported = invalid = malformed = 0
        for doc in docs:
            if not isinstance(doc, dict) or not doc.get("id"):
                invalid += 1
                logger.warning(f"   ⚠ Skipping {schema.__name__} without id")
                continue
            try:
                schema.model_validate(doc)
            except ValidationError as e:
                malformed += 1
                fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
                logger.warning(f"   ⚠ {schema.__name__} {doc['id']} has malformed fields ({fields}), importing as-is")
            if not dry_run:
                await upsert(doc)
            imported += 1
        return {"imported": imported, "invalid": invalid, "malformed": malformed}

    async def _import_applications(self, docs: List[Any], dry_run: bool) -> Dict[str, int]:
        imported = invalid = 0
        for doc in docs:
            if not isinstance(doc, dict) or not doc.get("campaignId") or not doc.get("creatorId"):
                invalid += 1
                logger.warning("   ⚠ Skipping application without campaignId/creatorId")
                continue
            if not dry_run:
                await self.store.upsert_application(doc)
            imported += 1
        return {"imported": imported, "invalid": invalid}
