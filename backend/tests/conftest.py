"""
Pytest fixtures for backend testing.

Provides an in-memory document store, service instances and test data factories.
"""
import copy
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

import pytest

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from relacollab.config import Settings
from relacollab.schemas.match import MatchResult, AiAnalysis
from relacollab.services.document_store import DocumentStore, Document
from relacollab.services.match_scoring import MatchScorer
from relacollab.services.matching_service import MatchingService


# ============================================================
# In-memory DocumentStore
# ============================================================

class InMemoryDocumentStore(DocumentStore):
    """DocumentStore keeping everything in dicts; documents are copied on the way in and out."""

    def __init__(self):
        self.campaigns: Dict[str, Document] = {}
        self.creators: Dict[str, Document] = {}
        self.applications: Dict[str, Document] = {}
        self.matches: Dict[tuple, Document] = {}
        self.match_writes: List[tuple] = []

    async def get_campaign(self, campaign_id: str) -> Optional[Document]:
        doc = self.campaigns.get(campaign_id)
        return copy.deepcopy(doc) if doc else None

    async def list_campaigns(self, status: Optional[str] = None) -> List[Document]:
        return [
            copy.deepcopy(doc) for _, doc in sorted(self.campaigns.items())
            if status is None or doc.get("status") == status
        ]

    async def get_creator(self, creator_id: str) -> Optional[Document]:
        doc = self.creators.get(creator_id)
        return copy.deepcopy(doc) if doc else None

    async def list_creators(self, status: Optional[str] = None) -> List[Document]:
        return [
            copy.deepcopy(doc) for _, doc in sorted(self.creators.items())
            if status is None or doc.get("status") == status
        ]

    async def list_applications(self, campaign_id: str) -> List[Document]:
        return [
            copy.deepcopy(doc) for doc in self.applications.values()
            if doc.get("campaignId") == campaign_id
        ]

    async def get_match(self, campaign_id: str, creator_id: str) -> Optional[Document]:
        doc = self.matches.get((campaign_id, creator_id))
        return copy.deepcopy(doc) if doc else None

    async def list_matches(self, campaign_id: str) -> List[Document]:
        return [copy.deepcopy(doc) for (cid, _), doc in self.matches.items() if cid == campaign_id]

    def _match_doc(self, campaign_id: str, creator_id: str) -> Document:
        return self.matches.setdefault(
            (campaign_id, creator_id),
            {"campaignId": campaign_id, "creatorId": creator_id},
        )

    async def save_match(self, campaign_id: str, creator_id: str, result: MatchResult) -> None:
        doc = self._match_doc(campaign_id, creator_id)
        doc.update({
            "score": result.score,
            "reasons": list(result.reasons),
            "breakdown": dict(result.breakdown),
            "updatedAt": datetime.now(timezone.utc),
        })
        self.match_writes.append((campaign_id, creator_id))

    async def save_ai_analysis(self, campaign_id: str, creator_id: str, analysis: AiAnalysis) -> None:
        doc = self._match_doc(campaign_id, creator_id)
        doc.update({
            "aiStatus": "completed",
            "aiAnalysis": analysis.model_dump(mode="json", by_alias=True),
            "aiError": None,
        })

    async def mark_ai_status(
        self,
        campaign_id: str,
        creator_id: str,
        status: str,
        error: Optional[str] = None,
    ) -> None:
        doc = self._match_doc(campaign_id, creator_id)
        doc.update({"aiStatus": status, "aiError": error})

    async def upsert_campaign(self, doc: Document) -> str:
        doc = copy.deepcopy(doc)
        self.campaigns[doc["id"]] = doc
        return doc["id"]

    async def upsert_creator(self, doc: Document) -> str:
        doc = copy.deepcopy(doc)
        self.creators[doc["id"]] = doc
        return doc["id"]

    async def upsert_application(self, doc: Document) -> str:
        doc = copy.deepcopy(doc)
        doc.setdefault("id", uuid4().hex)
        doc.setdefault("status", "pending")
        self.applications[doc["id"]] = doc
        return doc["id"]

    # Synchronous helpers for arranging tests
    def add_campaign(self, doc: Document) -> Document:
        self.campaigns[doc["id"]] = copy.deepcopy(doc)
        return doc

    def add_creator(self, doc: Document) -> Document:
        self.creators[doc["id"]] = copy.deepcopy(doc)
        return doc

    def add_application(self, campaign_id: str, creator_id: str, status: str = "pending") -> Document:
        doc = {"id": uuid4().hex, "campaignId": campaign_id, "creatorId": creator_id, "status": status}
        self.applications[doc["id"]] = doc
        return doc


# ============================================================
# Test Data Factories
# ============================================================

class CampaignFactory:
    """Factory for campaign documents (camelCase, as the web app stores them)."""

    @staticmethod
    def create(**kwargs) -> Dict[str, Any]:
        defaults = {
            "id": f"campaign_{uuid4().hex[:8]}",
            "brandId": "brand_1",
            "name": "Summer Launch",
            "description": "New rooftop menu in Santo Domingo",
            "status": "active",
            "location": "Santo Domingo",
            "ageRange": "25-34",
            "vibes": ["premium", "romantic"],
            "contentTypes": ["video"],
            "compensationType": "monetary",
            "goal": "awareness",
        }
        defaults.update(kwargs)
        return defaults


class CreatorFactory:
    """Factory for creator profile documents."""

    @staticmethod
    def create(**kwargs) -> Dict[str, Any]:
        defaults = {
            "id": f"creator_{uuid4().hex[:8]}",
            "displayName": "Test Creator",
            "status": "active",
            "location": "Santo Domingo",
            "categories": ["premium", "lifestyle"],
            "instagramConnected": True,
            "instagramMetrics": {"followers": 50000, "engagementRate": 4.2},
            "collaborationPreference": "Ambos",
        }
        defaults.update(kwargs)
        return defaults


@pytest.fixture
def campaign_factory() -> CampaignFactory:
    return CampaignFactory()


@pytest.fixture
def creator_factory() -> CreatorFactory:
    return CreatorFactory()


# ============================================================
# Service Fixtures
# ============================================================

@pytest.fixture
def test_settings() -> Settings:
    """Settings with default thresholds and AI analysis disabled."""
    return Settings(
        DATABASE_URL="postgresql://localhost:5432/relacollab_test",
        OPENAI_API_KEY="",
        BRAND_MATCH_MIN_SCORE=40,
        OPPORTUNITY_MIN_SCORE=50,
        DEFAULT_RESULT_LIMIT=50,
    )


@pytest.fixture
def scorer() -> MatchScorer:
    return MatchScorer()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def matching_service(store, test_settings) -> MatchingService:
    return MatchingService(store, settings=test_settings)
