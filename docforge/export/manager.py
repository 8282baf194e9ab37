"""
manager.py — Orchestrates composition and the HTML/PDF sub-pipelines.

The manager never raises for data or rendering problems: every failure
ends up in ``ExportResult.errors`` (or ``warnings`` for optimization
steps). Requested formats run independently, and batch items are
isolated from each other.
"""

import asyncio
import logging
import re
import time
from typing import Any, Mapping, Optional, Sequence

from docforge.engine.composer import TemplateComposer
from docforge.errors import CompositionError, ExportError
from docforge.export.html_export import HTMLExportService
from docforge.export.models import (
    BatchExportItem,
    BatchExportSummary,
    ClientCustomizationProfile,
    ExportMetadata,
    ExportOptions,
    ExportResult,
)
from docforge.export.pdf_export import PDFExportService
from docforge.export.profiles import (
    OptionsLike,
    ProfileStore,
    coerce_export_options,
    merge_export_options,
    options_from_profile,
)
from docforge.export.renderers import BrandingProvider, PDFCompressor, PDFRenderer, ReportLabPDFRenderer
from docforge.templates.schema import ClientBranding, Template

logger = logging.getLogger(__name__)

FILE_EXTENSIONS = {"pdf": "pdf", "html": "html", "both": "zip"}


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "document"


class ExportManager:
    """Entry point for single, batch and profile-driven exports."""

    def __init__(
        self,
        composer: Optional[TemplateComposer] = None,
        renderer: Optional[PDFRenderer] = None,
        compressor: Optional[PDFCompressor] = None,
        branding_provider: Optional[BrandingProvider] = None,
        profiles: Optional[ProfileStore] = None,
        render_timeout: float = 30.0,
        lookup_timeout: float = 5.0,
        default_quality: str = "standard",
    ):
        self.composer = composer or TemplateComposer()
        self.html_service = HTMLExportService()
        self.pdf_service = PDFExportService(
            renderer or ReportLabPDFRenderer(),
            compressor=compressor,
            render_timeout=render_timeout,
        )
        self.branding_provider = branding_provider
        self.profiles = profiles or ProfileStore()
        self.lookup_timeout = lookup_timeout
        self.default_quality = default_quality

    # ------------------------------------------------------------- branding

    async def _lookup_branding(self, branding_id: str, warnings: list[str]) -> Optional[ClientBranding]:
        """Absent or slow branding is reported as a warning, never an error."""
        if self.branding_provider is None:
            warnings.append(f"No branding provider configured; branding '{branding_id}' skipped")
            return None
        try:
            branding = await asyncio.wait_for(
                self.branding_provider.get_branding(branding_id),
                timeout=self.lookup_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Branding lookup for %s timed out after %ss", branding_id, self.lookup_timeout)
            warnings.append(f"Branding lookup for '{branding_id}' timed out; exported without branding")
            return None
        except Exception as exc:
            logger.exception("Branding lookup for %s failed", branding_id)
            warnings.append(f"Branding lookup for '{branding_id}' failed: {exc}; exported without branding")
            return None
        if branding is None:
            warnings.append(f"Branding '{branding_id}' not found; exported without branding")
        return branding

    # --------------------------------------------------------------- export

    async def export_document(
        self,
        template: Template,
        data: Optional[Mapping[str, Any]] = None,
        options: Optional[OptionsLike] = None,
    ) -> ExportResult:
        started = time.perf_counter()
        options = coerce_export_options(options) if options is not None else ExportOptions(quality=self.default_quality)
        errors: list[str] = []
        warnings: list[str] = []
        metadata = ExportMetadata(template_id=template.id)

        branding = None
        branding_id = options.client_customization.branding_id
        if branding_id:
            branding = await self._lookup_branding(branding_id, warnings)

        try:
            composed = self.composer.compose(template, data or {}, branding)
        except CompositionError as exc:
            logger.warning("Composition failed for %s: %s", template.id, exc)
            metadata.total_time_ms = (time.perf_counter() - started) * 1000
            return ExportResult(
                success=False,
                format=options.format,
                errors=[str(exc)],
                warnings=warnings,
                metadata=metadata,
            )
        warnings.extend(composed.metadata.warnings)
        metadata.cache_key = composed.metadata.cache_key

        html_result = None
        pdf_result = None
        if options.format in ("html", "both"):
            try:
                html_result = self.html_service.export_to_html(composed, options)
            except Exception as exc:
                logger.exception("HTML export failed for %s", template.id)
                errors.append(f"html: {exc}")

        if options.format in ("pdf", "both"):
            try:
                pdf_result = await self.pdf_service.export_to_pdf(composed, options)
                warnings.extend(pdf_result.warnings)
            except ExportError as exc:
                logger.error("PDF export failed for %s: %s", template.id, exc)
                errors.append(str(exc))
            except Exception as exc:
                logger.exception("PDF export failed for %s", template.id)
                errors.append(f"pdf: {exc}")

        metadata.delivery = {
            "method": options.delivery.method,
            "filename": options.delivery.filename or f"{slugify(template.name)}.{FILE_EXTENSIONS[options.format]}",
            "recipients": list(options.delivery.recipients),
        }
        metadata.total_time_ms = (time.perf_counter() - started) * 1000

        result = ExportResult(
            success=html_result is not None or pdf_result is not None,
            format=options.format,
            html=html_result,
            pdf=pdf_result,
            errors=errors,
            warnings=warnings,
            metadata=metadata,
        )
        logger.info(
            "Export %s (%s) for %s: success=%s size=%d errors=%d",
            metadata.export_id, options.format, template.id, result.success, result.total_size, len(errors),
        )
        return result

    async def batch_export(
        self,
        items: Sequence[BatchExportItem],
        options: Optional[OptionsLike] = None,
        concurrency: int = 1,
    ) -> BatchExportSummary:
        """
        Export many documents.

        Items without their own options use ``options``. With
        ``concurrency > 1`` items run in parallel under a semaphore;
        ``results`` always follow input order.
        """
        started = time.perf_counter()
        default_options = coerce_export_options(options) if options is not None else ExportOptions(quality=self.default_quality)
        summary = BatchExportSummary(total=len(items))
        results: list[Optional[ExportResult]] = [None] * len(items)
        semaphore = asyncio.Semaphore(max(1, concurrency))
        lock = asyncio.Lock()

        async def run(index: int, item: BatchExportItem) -> None:
            item_options = item.options or default_options
            async with semaphore:
                try:
                    result = await self.export_document(item.template, item.data, item_options)
                except Exception as exc:
                    logger.exception("Batch item %s failed", item.id)
                    result = ExportResult(success=False, format=item_options.format, errors=[str(exc)])

            async with lock:
                results[index] = result
                if result.success:
                    summary.successful += 1
                    summary.total_size += result.total_size
                else:
                    summary.failed += 1
                    summary.errors.append(f"{item.id}: {'; '.join(result.errors) or 'export failed'}")

        if concurrency <= 1:
            for index, item in enumerate(items):
                await run(index, item)
        else:
            await asyncio.gather(*(run(index, item) for index, item in enumerate(items)))

        summary.results = list(results)
        summary.total_time_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "Batch export finished: %d ok, %d failed, %d bytes",
            summary.successful, summary.failed, summary.total_size,
        )
        return summary

    # ------------------------------------------------------------- profiles

    def save_profile(self, profile: ClientCustomizationProfile) -> str:
        return self.profiles.save(profile)

    def build_profile_options(
        self,
        profile: ClientCustomizationProfile,
        override_options: Optional[OptionsLike] = None,
    ) -> ExportOptions:
        options = options_from_profile(profile, default_quality=self.default_quality)
        if override_options is not None:
            options = merge_export_options(options, override_options)
        return options

    async def export_with_profile(
        self,
        template: Template,
        data: Optional[Mapping[str, Any]],
        profile_id: str,
        override_options: Optional[OptionsLike] = None,
    ) -> ExportResult:
        profile = self.profiles.get(profile_id)
        if profile is None:
            requested = coerce_export_options(override_options).format if override_options else "pdf"
            return ExportResult(
                success=False,
                format=requested,
                errors=[f"Customization profile not found: {profile_id}"],
                metadata=ExportMetadata(template_id=template.id),
            )
        return await self.export_document(template, data, self.build_profile_options(profile, override_options))
