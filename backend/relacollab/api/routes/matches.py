from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from typing import List, Optional
import logging

from relacollab.api.deps import get_document_store, get_analysis_runner, AnalysisRunner
from relacollab.config import get_settings, Settings
from relacollab.core.exceptions import NotFoundError
from relacollab.schemas.match import (
    ScoreRequest,
    ScoreResponse,
    CreatorMatch,
    OpportunityMatch,
    AnalysisStatusResponse,
)
from relacollab.services.document_store import DocumentStore
from relacollab.services.match_analysis_service import needs_analysis, summarize_status
from relacollab.services.matching_service import MatchingService, get_score_label
from relacollab.services.score_providers import get_score_provider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["matches"])


@router.post("/match/score", response_model=ScoreResponse)
async def score_match(
    request: ScoreRequest,
    settings: Settings = Depends(get_settings),
):
    """
    Score a campaign document against a creator document.

    Documents may be partial; missing fields simply don't count towards the
    score. Nothing is persisted.
    """
    service = MatchingService(store=None, provider=get_score_provider(request.use_ai), settings=settings)
    scored = service.score_pair(request.campaign, request.creator, request.match)
    return ScoreResponse(
        result=scored.result,
        display_score=scored.display_score,
        source=scored.source,
        label=get_score_label(scored.display_score),
    )


@router.get("/campaigns/{campaign_id}/matches", response_model=List[CreatorMatch])
async def get_campaign_matches(
    campaign_id: str,
    min_score: Optional[int] = Query(default=None, ge=0, le=100),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    use_ai: bool = False,
    store: DocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_settings),
):
    """Creators ranked for a campaign (brand "Matches" view, default threshold 40)."""
    service = MatchingService(store, get_score_provider(use_ai), settings)
    try:
        return await service.get_brand_matches(
            campaign_id,
            min_score=min_score,
            limit=limit or settings.default_result_limit,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.get("/campaigns/{campaign_id}/applicants", response_model=List[CreatorMatch])
async def get_campaign_applicants(
    campaign_id: str,
    use_ai: bool = False,
    store: DocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_settings),
):
    """Applicants of a campaign enriched with their match score."""
    service = MatchingService(store, get_score_provider(use_ai), settings)
    try:
        return await service.get_applicants(campaign_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.get("/creators/{creator_id}/opportunities", response_model=List[OpportunityMatch])
async def get_creator_opportunities(
    creator_id: str,
    min_score: Optional[int] = Query(default=None, ge=0, le=100),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    use_ai: bool = False,
    store: DocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_settings),
):
    """Active campaigns for a creator (creator "Opportunities" view, default threshold 50)."""
    service = MatchingService(store, get_score_provider(use_ai), settings)
    try:
        return await service.get_opportunities(
            creator_id,
            min_score=min_score,
            limit=limit or settings.default_result_limit,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.post(
    "/campaigns/{campaign_id}/matches/{creator_id}/analysis",
    response_model=AnalysisStatusResponse,
)
async def request_match_analysis(
    campaign_id: str,
    creator_id: str,
    background_tasks: BackgroundTasks,
    force: bool = False,
    store: DocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_settings),
    runner: AnalysisRunner = Depends(get_analysis_runner),
):
    """
    Queue an AI analysis for a campaign/creator pair.

    Only queued when the match has no usable analysis yet (or `force=true`);
    otherwise the current status is returned.
    """
    if not settings.ai_analysis_enabled:
        raise HTTPException(status_code=503, detail="AI analysis is not configured")

    campaign = await store.get_campaign(campaign_id)
    if campaign is None:
        raise HTTPException(status_code=404, detail=f"Campaign {campaign_id} not found")
    creator = await store.get_creator(creator_id)
    if creator is None:
        raise HTTPException(status_code=404, detail=f"Creator {creator_id} not found")

    record = await store.get_match(campaign_id, creator_id)
    queued = False
    if force or needs_analysis(record):
        service = MatchingService(store, settings=settings)
        result = service.score_pair(campaign, creator).result
        await store.save_match(campaign_id, creator_id, result)
        await store.mark_ai_status(campaign_id, creator_id, "pending")
        background_tasks.add_task(runner, campaign, creator, result)
        queued = True
        logger.info(f"🤖 Queued AI analysis for {campaign_id}/{creator_id}")
        record = await store.get_match(campaign_id, creator_id)

    return AnalysisStatusResponse(
        campaign_id=campaign_id,
        creator_id=creator_id,
        queued=queued,
        **summarize_status(record),
    )
