from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
import logging
import os

from relacollab.config import get_settings, Settings
from relacollab.core.database import get_session_maker
from relacollab.models import Campaign, CampaignMatch, Creator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Liveness probe; never touches the database."""
    return {"status": "healthy"}


@router.get("/health/ready")
async def readiness_check(settings: Settings = Depends(get_settings)):
    """
    Readiness probe: database reachable, plus document counts so an empty
    import is visible at a glance.
    """
    counts = {}
    try:
        async with get_session_maker()() as db:
            await db.execute(text("SELECT 1"))
            for name, model in (("campaigns", Campaign), ("creators", Creator), ("matches", CampaignMatch)):
                counts[name] = (await db.execute(select(func.count()).select_from(model))).scalar_one()
        db_status = "connected"
    except (SQLAlchemyError, OSError) as e:
        db_status = f"error: {e}"
        logger.error("❌ Readiness check failed to reach the database", exc_info=True)

    return JSONResponse(
        status_code=200 if db_status == "connected" else 503,
        content={
            "status": "ready" if db_status == "connected" else "not_ready",
            "database": db_status,
            "documents": counts,
            "ai_analysis": settings.ai_analysis_enabled,
            "thresholds": {
                "brand_matches": settings.brand_match_min_score,
                "opportunities": settings.opportunity_min_score,
            },
            "vercel": bool(os.environ.get("VERCEL")),
        },
    )
