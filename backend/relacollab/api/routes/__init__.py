# API route modules
from relacollab.api.routes.health import router as health_router
from relacollab.api.routes.matches import router as matches_router

__all__ = [
    "health_router",
    "matches_router",
]
