"""Liveness and readiness probes."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from docforge.api.config import get_settings
from docforge.api.dependencies import get_registry
from docforge.templates.registry import PatternRegistry

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    ready: bool
    checks: dict[str, bool]
    catalog: dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness with the running API version."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow().isoformat(),
        version=get_settings().app_version,
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(registry: PatternRegistry = Depends(get_registry)):
    """Ready once the pattern catalog is loaded."""
    catalog = registry.library.describe()
    checks = {"catalog": catalog["patterns"] > 0}
    return ReadinessResponse(ready=all(checks.values()), checks=checks, catalog=catalog)
