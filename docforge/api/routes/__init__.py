"""API routes for DocForge."""

from fastapi import APIRouter

from docforge.api.routes.exports import router as exports_router
from docforge.api.routes.health import router as health_router
from docforge.api.routes.patterns import router as patterns_router
from docforge.api.routes.presets import router as presets_router
from docforge.api.routes.recommendations import router as recommendations_router

# Main API router
api_router = APIRouter()

api_router.include_router(health_router, tags=["Health"])
api_router.include_router(patterns_router, prefix="/patterns", tags=["Patterns"])
api_router.include_router(recommendations_router, prefix="/recommendations", tags=["Recommendations"])
api_router.include_router(exports_router, prefix="/exports", tags=["Exports"])
api_router.include_router(presets_router, prefix="/presets", tags=["Presets"])

__all__ = ["api_router"]
