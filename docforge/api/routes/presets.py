"""Customization preset routes."""

from fastapi import APIRouter

from docforge.engine.customization import CustomizationPreset, list_presets

router = APIRouter()


@router.get("", response_model=list[CustomizationPreset])
async def get_presets():
    """List the built-in customization presets."""
    return list_presets()
