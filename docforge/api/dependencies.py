"""FastAPI dependencies: process-wide registry and export manager."""

import logging
from functools import lru_cache

from docforge.api.config import get_settings
from docforge.engine.composer import TemplateComposer
from docforge.export.manager import ExportManager
from docforge.export.renderers import HttpPDFRenderer, PypdfCompressor, ReportLabPDFRenderer
from docforge.templates.pattern_library import PatternLibrary
from docforge.templates.registry import PatternRegistry, RegistryState
from docforge.templates.store import CustomPatternStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_composer() -> TemplateComposer:
    return TemplateComposer(cache_ttl=get_settings().compose_cache_ttl_seconds)


@lru_cache()
def get_registry() -> PatternRegistry:
    """Shared pattern registry; custom patterns persist under PATTERN_STORE_DIR when set."""
    settings = get_settings()
    store = CustomPatternStore(settings.pattern_store_dir)
    return PatternRegistry(
        library=PatternLibrary(),
        composer=get_composer(),
        state=RegistryState(custom_patterns=store),
    )


@lru_cache()
def get_export_manager() -> ExportManager:
    settings = get_settings()
    if settings.uses_external_renderer:
        logger.info("Using external PDF renderer at %s", settings.pdf_renderer_url)
        renderer = HttpPDFRenderer(settings.pdf_renderer_url, timeout=settings.render_timeout_seconds)
    else:
        renderer = ReportLabPDFRenderer()
    return ExportManager(
        composer=get_composer(),
        renderer=renderer,
        compressor=PypdfCompressor(),
        render_timeout=settings.render_timeout_seconds,
        lookup_timeout=settings.lookup_timeout_seconds,
        default_quality=settings.default_quality,
    )
