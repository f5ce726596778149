"""
Unit tests for SqlDocumentStore write paths.

The AsyncSession is mocked; statements are compiled with the PostgreSQL
dialect to check which columns an upsert touches.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from relacollab.core.exceptions import DocumentStoreError
from relacollab.schemas.match import AiAnalysis, MatchResult
from relacollab.services.document_store import SqlDocumentStore, _split_document


def make_session() -> MagicMock:
    session = MagicMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


def executed_sql(session: MagicMock) -> str:
    stmt = session.execute.call_args.args[0]
    return str(stmt.compile(dialect=postgresql.dialect()))


def on_conflict_clause(sql: str) -> str:
    return sql.split("ON CONFLICT", 1)[1]


class TestSplitDocument:

    def test_keeps_id_out_of_body(self):
        doc_id, body = _split_document({"id": "c1", "name": "Rooftop"})
        assert doc_id == "c1"
        assert body == {"name": "Rooftop"}

    def test_generates_missing_id(self):
        doc_id, body = _split_document({"name": "Rooftop"})
        assert len(doc_id) == 32
        assert body == {"name": "Rooftop"}


@pytest.mark.asyncio
class TestMatchWrites:

    async def test_save_match_leaves_ai_columns_alone(self):
        session = make_session()
        store = SqlDocumentStore(session)

        await store.save_match("c1", "cr1", MatchResult(score=62, reasons=["Active creator"]))

        update = on_conflict_clause(executed_sql(session))
        assert "score = excluded.score" in update
        assert "breakdown = excluded.breakdown" in update
        assert "ai_status" not in update
        assert "ai_analysis" not in update
        session.commit.assert_awaited_once()
        session.expire_all.assert_called_once()

    async def test_save_ai_analysis_leaves_score_alone(self):
        session = make_session()
        store = SqlDocumentStore(session)

        await store.save_ai_analysis("c1", "cr1", AiAnalysis(match_percentage=80))

        update = on_conflict_clause(executed_sql(session))
        assert "ai_analysis = excluded.ai_analysis" in update
        assert "ai_status = excluded.ai_status" in update
        assert "score" not in update.replace("ai_", "")

    async def test_write_failure_rolls_back(self):
        session = make_session()
        session.execute.side_effect = OperationalError("INSERT", {}, Exception("connection lost"))
        store = SqlDocumentStore(session)

        with pytest.raises(DocumentStoreError) as exc_info:
            await store.mark_ai_status("c1", "cr1", "pending")

        assert exc_info.value.message == "Failed to write match c1/cr1"
        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()


@pytest.mark.asyncio
class TestDocumentUpserts:

    async def test_campaign_indexed_fields_lifted(self):
        session = make_session()
        store = SqlDocumentStore(session)

        campaign_id = await store.upsert_campaign({"id": "c1", "brandId": "b1", "status": "active"})

        assert campaign_id == "c1"
        stmt = session.execute.call_args.args[0]
        params = stmt.compile(dialect=postgresql.dialect()).params
        assert params["brand_id"] == "b1"
        assert params["status"] == "active"
        assert params["data"] == {"brandId": "b1", "status": "active"}

    async def test_application_conflicts_on_pair(self):
        session = make_session()
        store = SqlDocumentStore(session)

        await store.upsert_application({"id": "a1", "campaignId": "c1", "creatorId": "cr1"})

        sql = executed_sql(session)
        assert "ON CONFLICT (campaign_id, creator_id)" in sql
