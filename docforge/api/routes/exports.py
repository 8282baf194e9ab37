"""Document export routes."""

import base64
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from docforge.api.dependencies import get_export_manager, get_registry
from docforge.errors import PatternNotFoundError, ValidationError
from docforge.export.manager import ExportManager
from docforge.export.models import ExportMetadata, ExportOptions, ExportResult
from docforge.templates.registry import PatternRegistry
from docforge.templates.schema import CustomizationOptions

router = APIRouter()


class ExportRequest(BaseModel):
    """Instantiate a pattern, fill it with ``data`` and export it."""
    pattern_id: str
    data: dict[str, Any] = Field(default_factory=dict)
    customizations: CustomizationOptions | None = None
    options: ExportOptions | None = None


class PDFPayload(BaseModel):
    """PDF output, base64-encoded."""
    content_base64: str
    size: int
    page_count: int
    compressed: bool


class ExportResponse(BaseModel):
    """Export outcome; HTML inline, PDF as base64."""
    success: bool
    format: str
    html: str | None = None
    css: str | None = None
    pdf: PDFPayload | None = None
    total_size: int
    errors: list[str]
    warnings: list[str]
    metadata: ExportMetadata


def to_response(result: ExportResult) -> ExportResponse:
    pdf = None
    if result.pdf is not None:
        pdf = PDFPayload(
            content_base64=base64.b64encode(result.pdf.content).decode("ascii"),
            size=result.pdf.size,
            page_count=result.pdf.page_count,
            compressed=result.pdf.compressed,
        )
    return ExportResponse(
        success=result.success,
        format=result.format,
        html=result.html.content if result.html else None,
        css=result.html.css if result.html else None,
        pdf=pdf,
        total_size=result.total_size,
        errors=result.errors,
        warnings=result.warnings,
        metadata=result.metadata,
    )


@router.post("", response_model=ExportResponse)
async def create_export(
    request: ExportRequest,
    registry: PatternRegistry = Depends(get_registry),
    manager: ExportManager = Depends(get_export_manager),
):
    """Export a catalog or custom pattern.

    Data problems (missing variables, renderer failures) come back as a
    200 response with ``success=false`` and ``errors``; only an unknown
    pattern or invalid customizations fail the request itself.
    """
    try:
        template = registry.get_template_from_pattern(request.pattern_id, request.customizations)
    except PatternNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[error.to_dict() for error in exc.errors],
        )

    registry.track_pattern_usage(request.pattern_id)
    result = await manager.export_document(template, request.data, request.options)
    return to_response(result)
