import logging
import sys
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


def setup_logging():
    """Configure logging so matching progress shows up in the terminal."""
    formatter = logging.Formatter(
        fmt="%(message)s",
        datefmt="%H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    # Configure the package logger (covers all relacollab.* modules)
    app_logger = logging.getLogger("relacollab")
    app_logger.setLevel(logging.INFO)
    app_logger.handlers = []
    app_logger.addHandler(console_handler)
    app_logger.propagate = False

    uvicorn_logger = logging.getLogger("uvicorn.access")
    uvicorn_logger.setLevel(logging.INFO)


# Initialize logging on module load
setup_logging()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    # Import here to avoid circular imports and module-level execution issues
    from relacollab.config import get_settings
    from relacollab.core.database import dispose_engine, init_db
    from relacollab.api.routes import health_router, matches_router

    settings = get_settings()
    is_vercel = os.environ.get("VERCEL", False)

    # Vercel doesn't support lifespan events
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create tables on startup and release the pool on shutdown (local dev only)."""
        await init_db()
        if not settings.ai_analysis_enabled:
            logging.getLogger("relacollab").info("ℹ️  OPENAI_API_KEY not set, AI match analysis disabled")
        yield
        await dispose_engine()

    app = FastAPI(
        title="RelaCollab Match Engine",
        description="""
        Creator–campaign matching for the RelaCollab marketplace.

        ## Features
        - Rule-based match score (0-100) with reasons and per-criterion breakdown
        - Brand "Matches" view (creators scoring >= 40)
        - Creator "Opportunities" view (active campaigns scoring >= 50)
        - Applicant enrichment
        - Optional AI match analysis that overrides the displayed score

        ## Quick Start
        1. POST to `/api/match/score` with `{campaign, creator}` documents
        2. GET `/api/campaigns/{id}/matches` for ranked creators
        3. GET `/api/creators/{id}/opportunities` for matching campaigns
        """,
        version="1.0.0",
        lifespan=None if is_vercel else lifespan,
        docs_url="/api/docs" if is_vercel else "/docs",
        redoc_url="/api/redoc" if is_vercel else "/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if is_vercel else settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # All routers under /api prefix for Vercel routing
    app.include_router(health_router, prefix="/api")
    app.include_router(matches_router, prefix="/api")

    return app


# Vercel's api/index.py calls create_app() itself
if not os.environ.get("VERCEL"):
    app = create_app()


if __name__ == "__main__":
    import uvicorn
    if "app" not in dir():
        app = create_app()
    uvicorn.run(
        "relacollab.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
