"""Per-user pattern recommendations."""

from fastapi import APIRouter, Depends

from docforge.api.dependencies import get_registry
from docforge.templates.registry import PatternRegistry, RecommendationContext
from docforge.templates.schema import PatternRecommendation

router = APIRouter()


@router.get("/{user_id}", response_model=list[PatternRecommendation])
async def get_recommendations(
    user_id: str,
    industry: str | None = None,
    project_type: str | None = None,
    registry: PatternRegistry = Depends(get_registry),
):
    """Recommendations for ``user_id``; unknown users get usage-based results only."""
    context = RecommendationContext(industry=industry, project_type=project_type)
    return registry.get_recommended_patterns(user_id, context)
