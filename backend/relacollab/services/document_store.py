"""
Data access for campaign, creator, application and match documents.

List-building code talks to the DocumentStore interface only, so the scoring
and matching logic never touches a database session directly.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from relacollab.core.exceptions import DocumentStoreError
from relacollab.models import Campaign, CampaignApplication, Creator, CampaignMatch
from relacollab.schemas.match import MatchResult, AiAnalysis

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


class DocumentStore(ABC):
    """Read/write access to the marketplace documents the matcher needs."""

    @abstractmethod
    async def get_campaign(self, campaign_id: str) -> Optional[Document]:
        ...

    @abstractmethod
    async def list_campaigns(self, status: Optional[str] = None) -> List[Document]:
        ...

    @abstractmethod
    async def get_creator(self, creator_id: str) -> Optional[Document]:
        ...

    @abstractmethod
    async def list_creators(self, status: Optional[str] = None) -> List[Document]:
        ...

    @abstractmethod
    async def list_applications(self, campaign_id: str) -> List[Document]:
        ...

    @abstractmethod
    async def get_match(self, campaign_id: str, creator_id: str) -> Optional[Document]:
        ...

    @abstractmethod
    async def list_matches(self, campaign_id: str) -> List[Document]:
        ...

    @abstractmethod
    async def save_match(self, campaign_id: str, creator_id: str, result: MatchResult) -> None:
        """Cache a rule-based result; AI fields on the same document are kept."""

    @abstractmethod
    async def save_ai_analysis(self, campaign_id: str, creator_id: str, analysis: AiAnalysis) -> None:
        ...

    @abstractmethod
    async def mark_ai_status(
        self,
        campaign_id: str,
        creator_id: str,
        status: str,
        error: Optional[str] = None,
    ) -> None:
        ...

    @abstractmethod
    async def upsert_campaign(self, doc: Document) -> str:
        ...

    @abstractmethod
    async def upsert_creator(self, doc: Document) -> str:
        ...

    @abstractmethod
    async def upsert_application(self, doc: Document) -> str:
        ...

    async def get_matches_by_creator(self, campaign_id: str) -> Dict[str, Document]:
        """Cached match documents of a campaign keyed by creator id."""
        return {m["creatorId"]: m for m in await self.list_matches(campaign_id)}


def _split_document(doc: Document) -> tuple[str, Document]:
    """Separate the id from the stored body; generate one for new documents."""
    body = dict(doc)
    doc_id = body.pop("id", None) or uuid.uuid4().hex
    return str(doc_id), body


class SqlDocumentStore(DocumentStore):
    """DocumentStore backed by PostgreSQL JSONB tables."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_campaign(self, campaign_id: str) -> Optional[Document]:
        campaign = await self.db.get(Campaign, campaign_id)
        return campaign.to_document() if campaign else None

    async def list_campaigns(self, status: Optional[str] = None) -> List[Document]:
        query = select(Campaign).order_by(Campaign.id)
        if status:
            query = query.where(Campaign.status == status)
        result = await self.db.execute(query)
        return [c.to_document() for c in result.scalars().all()]

    async def get_creator(self, creator_id: str) -> Optional[Document]:
        creator = await self.db.get(Creator, creator_id)
        return creator.to_document() if creator else None

    async def list_creators(self, status: Optional[str] = None) -> List[Document]:
        query = select(Creator).order_by(Creator.id)
        if status:
            query = query.where(Creator.status == status)
        result = await self.db.execute(query)
        return [c.to_document() for c in result.scalars().all()]

    async def list_applications(self, campaign_id: str) -> List[Document]:
        query = (
            select(CampaignApplication)
            .where(CampaignApplication.campaign_id == campaign_id)
            .order_by(CampaignApplication.created_at)
        )
        result = await self.db.execute(query)
        return [a.to_document() for a in result.scalars().all()]

    async def get_match(self, campaign_id: str, creator_id: str) -> Optional[Document]:
        match = await self.db.get(CampaignMatch, (campaign_id, creator_id))
        return match.to_document() if match else None

    async def list_matches(self, campaign_id: str) -> List[Document]:
        query = select(CampaignMatch).where(CampaignMatch.campaign_id == campaign_id)
        result = await self.db.execute(query)
        return [m.to_document() for m in result.scalars().all()]

    async def save_match(self, campaign_id: str, creator_id: str, result: MatchResult) -> None:
        await self._upsert_match(
            campaign_id,
            creator_id,
            score=result.score,
            reasons=list(result.reasons),
            breakdown=dict(result.breakdown),
        )

    async def save_ai_analysis(self, campaign_id: str, creator_id: str, analysis: AiAnalysis) -> None:
        await self._upsert_match(
            campaign_id,
            creator_id,
            ai_status="completed",
            ai_analysis=analysis.model_dump(mode="json", by_alias=True),
            ai_error=None,
        )

    async def mark_ai_status(
        self,
        campaign_id: str,
        creator_id: str,
        status: str,
        error: Optional[str] = None,
    ) -> None:
        await self._upsert_match(campaign_id, creator_id, ai_status=status, ai_error=error)

    async def upsert_campaign(self, doc: Document) -> str:
        campaign_id, body = _split_document(doc)
        values = {
            "id": campaign_id,
            "brand_id": body.get("brandId"),
            "status": body.get("status"),
            "data": body,
        }
        stmt = insert(Campaign).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={
                "brand_id": stmt.excluded.brand_id,
                "status": stmt.excluded.status,
                "data": stmt.excluded.data,
                "updated_at": datetime.now(timezone.utc),
            },
        )
        await self._execute_and_commit(stmt, f"campaign {campaign_id}")
        return campaign_id

    async def upsert_creator(self, doc: Document) -> str:
        creator_id, body = _split_document(doc)
        stmt = insert(Creator).values(id=creator_id, status=body.get("status"), data=body)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={
                "status": stmt.excluded.status,
                "data": stmt.excluded.data,
                "updated_at": datetime.now(timezone.utc),
            },
        )
        await self._execute_and_commit(stmt, f"creator {creator_id}")
        return creator_id

    async def upsert_application(self, doc: Document) -> str:
        application_id, body = _split_document(doc)
        stmt = insert(CampaignApplication).values(
            id=application_id,
            campaign_id=body.get("campaignId"),
            creator_id=body.get("creatorId"),
            status=body.get("status") or "pending",
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["campaign_id", "creator_id"],
            set_={
                "status": stmt.excluded.status,
                "updated_at": datetime.now(timezone.utc),
            },
        )
        await self._execute_and_commit(stmt, f"application {application_id}")
        return application_id

    async def _upsert_match(self, campaign_id: str, creator_id: str, **fields: Any) -> None:
        """Insert or update only the given columns of a match document."""
        stmt = insert(CampaignMatch).values(campaign_id=campaign_id, creator_id=creator_id, **fields)
        update_dict = {name: getattr(stmt.excluded, name) for name in fields}
        update_dict["updated_at"] = datetime.now(timezone.utc)
        stmt = stmt.on_conflict_do_update(
            index_elements=["campaign_id", "creator_id"],
            set_=update_dict,
        )
        await self._execute_and_commit(stmt, f"match {campaign_id}/{creator_id}")

    async def _execute_and_commit(self, stmt, label: str) -> None:
        try:
            await self.db.execute(stmt)
            await self.db.commit()
            # Core upserts bypass the identity map; drop cached rows so reads see them
            self.db.expire_all()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to write {label}: {e}")
            raise DocumentStoreError(f"Failed to write {label}", str(e))
