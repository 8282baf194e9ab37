"""Pattern catalog routes."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from docforge.api.dependencies import get_registry
from docforge.errors import PatternNotFoundError, ValidationError
from docforge.templates.registry import PatternRegistry, SearchFilters
from docforge.templates.schema import PatternRecommendation, PatternUsage, TemplatePattern

router = APIRouter()


class PatternListResponse(BaseModel):
    """Search results."""
    patterns: list[TemplatePattern]
    total: int


class FeedbackRequest(BaseModel):
    """Rating and optional free-text feedback for a pattern."""
    rating: float
    feedback: str | None = None


def _not_found(exc: PatternNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)


@router.get("", response_model=PatternListResponse)
async def search_patterns(
    q: str = "",
    category: str | None = None,
    complexity: str | None = None,
    use_case: str | None = None,
    tags: list[str] = Query(default=[]),
    registry: PatternRegistry = Depends(get_registry),
):
    """Search the catalog; filters combine with AND."""
    filters = SearchFilters(category=category, complexity=complexity, use_case=use_case, tags=tags)
    patterns = registry.search_patterns(q, filters)
    return PatternListResponse(patterns=patterns, total=len(patterns))


@router.get("/categories")
async def list_categories(registry: PatternRegistry = Depends(get_registry)):
    """Categories and complexity levels present in the catalog."""
    return {
        "categories": registry.library.get_pattern_categories(),
        "complexity_levels": registry.library.get_complexity_levels(),
    }


@router.get("/{pattern_id}", response_model=TemplatePattern)
async def get_pattern(pattern_id: str, registry: PatternRegistry = Depends(get_registry)):
    """Get a catalog pattern by id."""
    try:
        return registry.get_pattern(pattern_id)
    except PatternNotFoundError as exc:
        raise _not_found(exc)


@router.get("/{pattern_id}/similar", response_model=list[PatternRecommendation])
async def get_similar_patterns(
    pattern_id: str,
    limit: int = Query(default=5, ge=1, le=20),
    registry: PatternRegistry = Depends(get_registry),
):
    """Patterns ranked by similarity to ``pattern_id``."""
    try:
        return registry.get_similar_patterns(pattern_id, limit=limit)
    except PatternNotFoundError as exc:
        raise _not_found(exc)


@router.post("/{pattern_id}/feedback", response_model=PatternUsage)
async def record_feedback(
    pattern_id: str,
    request: FeedbackRequest,
    registry: PatternRegistry = Depends(get_registry),
):
    """Record a rating; returns the updated usage statistics."""
    try:
        return registry.record_pattern_feedback(pattern_id, request.rating, request.feedback)
    except PatternNotFoundError as exc:
        raise _not_found(exc)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[error.to_dict() for error in exc.errors],
        )
