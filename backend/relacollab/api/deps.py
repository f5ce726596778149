from typing import Awaitable, Callable

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from relacollab.core.database import get_db, get_session_maker
from relacollab.schemas.match import MatchResult
from relacollab.services.document_store import DocumentStore, SqlDocumentStore, Document
from relacollab.services.match_analysis_service import MatchAnalysisService

AnalysisRunner = Callable[[Document, Document, MatchResult], Awaitable[None]]


async def get_document_store(db: AsyncSession = Depends(get_db)) -> DocumentStore:
    """Request-scoped document store over the request's database session."""
    return SqlDocumentStore(db)


async def run_match_analysis(campaign: Document, creator: Document, result: MatchResult) -> None:
    """Background task: the request session is closed by now, so open a new one."""
    session_maker = get_session_maker()
    async with session_maker() as db:
        service = MatchAnalysisService(SqlDocumentStore(db))
        await service.analyze(campaign, creator, result)


def get_analysis_runner() -> AnalysisRunner:
    return run_match_analysis
