"""
pdf_export.py — PDF sub-pipeline.

Page geometry comes from fixed per-format tables. The page count is an
estimate, ``ceil(len(plain text) / AVG_CHARS_PER_PAGE[format])`` with a
minimum of one page; it is never measured from the rendered PDF.
"""

import asyncio
import html
import logging
import math
from datetime import datetime
from typing import Optional

from bs4 import BeautifulSoup

from docforge.errors import ExportError, OptimizationWarning, RendererTimeoutError
from docforge.export.models import ExportOptions, PDFExportResult, PDFMargins, PDFMetadata, Watermark
from docforge.export.renderers import PDFCompressor, PDFRenderer, RenderOptions
from docforge.templates.schema import ComposedTemplate

logger = logging.getLogger(__name__)


# Portrait (width, height)
PAGE_SIZES_MM = {
    "A4": (210.0, 297.0),
    "A3": (297.0, 420.0),
    "Letter": (215.9, 279.4),
    "Legal": (215.9, 355.6),
}

PAGE_SIZES_PX = {
    "A4": (794, 1123),
    "A3": (1123, 1587),
    "Letter": (816, 1056),
    "Legal": (816, 1344),
}

AVG_CHARS_PER_PAGE = {
    "A4": 3000,
    "A3": 4500,
    "Letter": 2800,
    "Legal": 3600,
}

QUALITY_SETTINGS = {
    "draft": {"dpi": 72, "compression": "high"},
    "standard": {"dpi": 150, "compression": "medium"},
    "high": {"dpi": 300, "compression": None},
}

MM_PER_UNIT = {
    "mm": 1.0,
    "cm": 10.0,
    "in": 25.4,
    "px": 25.4 / 96,
}


def page_dimensions(page_format: str, orientation: str = "portrait", unit: str = "mm") -> tuple[float, float]:
    """Page width and height; landscape swaps them."""
    table = PAGE_SIZES_PX if unit == "px" else PAGE_SIZES_MM
    width, height = table[page_format]
    if orientation == "landscape":
        width, height = height, width
    return width, height


def convert_length(value: float, from_unit: str, to_unit: str) -> float:
    if from_unit == to_unit:
        return value
    return round(value * MM_PER_UNIT[from_unit] / MM_PER_UNIT[to_unit], 4)


def margins_in(margins: PDFMargins, unit: str = "mm") -> dict[str, float]:
    return {
        side: convert_length(getattr(margins, side), margins.unit, unit)
        for side in ("top", "right", "bottom", "left")
    }


def _fmt(value: float) -> str:
    return f"{value:g}"


def generate_page_css(options: ExportOptions) -> str:
    pdf = options.pdf
    width, height = page_dimensions(pdf.format, pdf.orientation)
    m = margins_in(pdf.margins, "mm")
    rules = [
        "@page {",
        f"    size: {_fmt(width)}mm {_fmt(height)}mm;",
        f"    margin: {_fmt(m['top'])}mm {_fmt(m['right'])}mm {_fmt(m['bottom'])}mm {_fmt(m['left'])}mm;",
        "}",
    ]
    if pdf.print_background:
        rules += [
            "body {",
            "    -webkit-print-color-adjust: exact;",
            "    print-color-adjust: exact;",
            "}",
        ]
    return "\n".join(rules)


def generate_watermark_css(watermark: Watermark) -> str:
    return (
        ".docforge-watermark {\n"
        "    position: fixed;\n"
        "    top: 50%;\n"
        "    left: 50%;\n"
        f"    transform: translate(-50%, -50%) rotate({_fmt(watermark.rotation)}deg);\n"
        f"    opacity: {_fmt(watermark.opacity)};\n"
        f"    font-size: {watermark.font_size}px;\n"
        f"    color: {watermark.color};\n"
        "    z-index: -1;\n"
        "    pointer-events: none;\n"
        "    white-space: nowrap;\n"
        "}"
    )


def inject_watermark(markup: str, watermark: Watermark) -> str:
    layer = f'<div class="docforge-watermark">{html.escape(watermark.text)}</div>'
    if "<body>" in markup:
        return markup.replace("<body>", f"<body>\n{layer}", 1)
    return f"{layer}\n{markup}"


def plain_text(markup: str) -> str:
    soup = BeautifulSoup(markup, "html.parser")
    for node in soup(["script", "style", "title"]):
        node.decompose()
    return soup.get_text(" ", strip=True)


def estimate_page_count(markup: str, page_format: str) -> int:
    """Heuristic page count from plain-text length; at least 1."""
    return max(1, math.ceil(len(plain_text(markup)) / AVG_CHARS_PER_PAGE[page_format]))


class PDFExportService:
    """Turns a composed document into PDF bytes through a renderer collaborator."""

    def __init__(
        self,
        renderer: PDFRenderer,
        compressor: Optional[PDFCompressor] = None,
        render_timeout: float = 30.0,
    ):
        self.renderer = renderer
        self.compressor = compressor
        self.render_timeout = render_timeout

    def resolve_watermark(self, composed: ComposedTemplate, options: ExportOptions) -> Optional[Watermark]:
        """PDF options win over client customization, which wins over the template's branding text."""
        if options.pdf.watermark is not None:
            return options.pdf.watermark
        if options.client_customization.watermark is not None:
            return options.client_customization.watermark
        text = composed.template.customization.branding.watermark
        return Watermark(text=text) if text else None

    def build_metadata(self, composed: ComposedTemplate, options: ExportOptions) -> PDFMetadata:
        template = composed.template
        title = composed.data.get("document_title") or template.name
        now = datetime.utcnow()
        return PDFMetadata(
            title=str(title),
            author=options.pdf.author or template.customization.branding.company_name,
            subject=options.pdf.subject or template.metadata.description or None,
            keywords=options.pdf.keywords or list(template.metadata.tags),
            creation_date=now,
            modification_date=now,
        )

    async def export_to_pdf(self, composed: ComposedTemplate, options: ExportOptions) -> PDFExportResult:
        """
        Render and optionally compress.

        Raises:
            RendererTimeoutError: The renderer exceeded ``render_timeout``.
            ExportError: The renderer failed or produced no bytes.
        """
        pdf = options.pdf
        quality = QUALITY_SETTINGS[options.quality]
        watermark = self.resolve_watermark(composed, options)

        markup = composed.compiled_content.html
        css_parts = [composed.compiled_content.css, generate_page_css(options)]
        if watermark is not None:
            markup = inject_watermark(markup, watermark)
            css_parts.append(generate_watermark_css(watermark))
        if options.client_customization.custom_css:
            css_parts.append(options.client_customization.custom_css)
        css = "\n\n".join(part for part in css_parts if part)

        width, height = page_dimensions(pdf.format, pdf.orientation)
        metadata = self.build_metadata(composed, options)
        render_options = RenderOptions(
            width_mm=width,
            height_mm=height,
            margins_mm=margins_in(pdf.margins, "mm"),
            metadata=metadata,
            print_background=pdf.print_background,
            scale=pdf.scale,
            dpi=quality["dpi"],
            watermark=watermark,
            display_header_footer=pdf.display_header_footer,
            header_template=pdf.header_template,
            footer_template=pdf.footer_template,
        )

        try:
            content = await asyncio.wait_for(
                self.renderer.render(markup, css, render_options),
                timeout=self.render_timeout,
            )
        except asyncio.TimeoutError:
            raise RendererTimeoutError("pdf", f"PDF renderer timed out after {self.render_timeout:g}s")
        if not content:
            raise ExportError("pdf", "PDF renderer returned no content")

        warnings: list[str] = []
        compressed = False
        if options.optimization.compress and quality["compression"] and self.compressor is not None:
            try:
                smaller = await asyncio.wait_for(
                    self.compressor.compress(content, options.quality),
                    timeout=self.render_timeout,
                )
                compressed = len(smaller) < len(content)
                content = smaller if compressed else content
            except Exception as exc:
                warning = OptimizationWarning(f"PDF compression failed, returning uncompressed output: {exc}")
                logger.warning(str(warning))
                warnings.append(str(warning))

        return PDFExportResult(
            content=content,
            size=len(content),
            page_count=estimate_page_count(composed.compiled_content.html, pdf.format),
            metadata=metadata,
            compressed=compressed,
            warnings=warnings,
        )
