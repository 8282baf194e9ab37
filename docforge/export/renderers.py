"""
renderers.py — External collaborators of the export pipeline.

The pipeline only relies on three async contracts:

    PDFRenderer.render(html, css, options) -> bytes
    PDFCompressor.compress(content, quality) -> bytes
    BrandingProvider.get_branding(branding_id) -> ClientBranding | None

Callers bound every call with ``asyncio.wait_for``; implementations that
block run their work in a thread so the wait can be cancelled.
"""

import asyncio
import io
import logging
import re
from dataclasses import dataclass
from typing import Optional, Protocol
from xml.sax.saxutils import escape

import httpx
from bs4 import BeautifulSoup
from pypdf import PdfReader, PdfWriter
from reportlab.lib import colors
from reportlab.lib.enums import TA_LEFT
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from docforge.engine.brand_engine import normalize_color
from docforge.errors import ExportError
from docforge.export.models import PDFMetadata, Watermark
from docforge.templates.schema import ClientBranding

logger = logging.getLogger(__name__)


@dataclass
class RenderOptions:
    """Page geometry and hints handed to a PDF renderer (lengths in mm)."""

    width_mm: float
    height_mm: float
    margins_mm: dict[str, float]
    metadata: PDFMetadata
    print_background: bool = True
    scale: float = 1.0
    dpi: int = 150
    watermark: Optional[Watermark] = None
    display_header_footer: bool = False
    header_template: str = ""
    footer_template: str = ""


class PDFRenderer(Protocol):
    async def render(self, html: str, css: str, options: RenderOptions) -> bytes:
        ...


class PDFCompressor(Protocol):
    async def compress(self, content: bytes, quality: str) -> bytes:
        ...


class BrandingProvider(Protocol):
    async def get_branding(self, branding_id: str) -> Optional[ClientBranding]:
        ...


# =============================================================================
# REPORTLAB RENDERER
# =============================================================================

BLOCK_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6", "p", "li", "tr"]
CSS_COLOR_RE = re.compile(r"--color-(primary|secondary|text):\s*(#[0-9a-fA-F]{6}|#[0-9a-fA-F]{3})\s*;")


def _hex(value: str, fallback: str = "#000000") -> colors.Color:
    normalized = normalize_color(value)
    return colors.HexColor(normalized if len(normalized) == 7 and normalized.startswith("#") else fallback)


def _css_colors(css: str) -> dict[str, str]:
    """Last declared value of each color custom property."""
    found = {}
    for name, value in CSS_COLOR_RE.findall(css):
        found[name] = value
    return found


class ReportLabPDFRenderer:
    """Built-in renderer: lays out headings, paragraphs, list items and
    table rows of the document as ReportLab flowables.

    It is not a CSS engine. Only page geometry, the brand color custom
    properties and the watermark are honoured.
    """

    async def render(self, html: str, css: str, options: RenderOptions) -> bytes:
        return await asyncio.to_thread(self._render_sync, html, css, options)

    def _styles(self, css: str) -> dict[str, ParagraphStyle]:
        palette = _css_colors(css)
        primary = _hex(palette.get("primary", "#2563eb"))
        secondary = _hex(palette.get("secondary", "#64748b"))
        text = _hex(palette.get("text", "#333333"))
        base = getSampleStyleSheet()
        body = ParagraphStyle("Body", parent=base["Normal"], fontSize=11, leading=16,
                              spaceAfter=8, alignment=TA_LEFT, textColor=text)
        return {
            "h1": ParagraphStyle("H1", parent=base["Title"], fontSize=24, spaceAfter=16, textColor=primary),
            "h2": ParagraphStyle("H2", parent=base["Heading2"], fontSize=16, spaceBefore=14,
                                 spaceAfter=8, textColor=primary),
            "h3": ParagraphStyle("H3", parent=base["Heading3"], fontSize=13, spaceAfter=6, textColor=secondary),
            "h4": ParagraphStyle("H4", parent=base["Heading4"], textColor=secondary),
            "h5": ParagraphStyle("H5", parent=base["Heading5"], textColor=secondary),
            "h6": ParagraphStyle("H6", parent=base["Heading6"], textColor=secondary),
            "p": body,
            "li": ParagraphStyle("Item", parent=body, leftIndent=12),
            "tr": ParagraphStyle("Row", parent=body, fontSize=10),
        }

    def _flowables(self, html: str, styles: dict[str, ParagraphStyle]) -> list:
        soup = BeautifulSoup(html, "html.parser")
        root = soup.find(class_="document-container") or soup.body or soup
        elements = []
        for node in root.find_all(BLOCK_TAGS):
            if node.name == "tr":
                cells = [c.get_text(" ", strip=True) for c in node.find_all(["th", "td"])]
                text = " | ".join(c for c in cells if c)
            else:
                if node.name == "p" and node.find_parent("li"):
                    continue
                text = node.get_text(" ", strip=True)
            if not text:
                continue
            if node.name == "li":
                text = f"• {text}"
            elements.append(Paragraph(escape(text), styles[node.name]))
        if not elements:
            elements.append(Spacer(1, 1))
        return elements

    def _render_sync(self, html: str, css: str, options: RenderOptions) -> bytes:
        buffer = io.BytesIO()
        margins = options.margins_mm
        meta = options.metadata
        doc = SimpleDocTemplate(
            buffer,
            pagesize=(options.width_mm * mm, options.height_mm * mm),
            topMargin=margins["top"] * mm,
            rightMargin=margins["right"] * mm,
            bottomMargin=margins["bottom"] * mm,
            leftMargin=margins["left"] * mm,
            title=meta.title,
            author=meta.author or "",
            subject=meta.subject or "",
            keywords=", ".join(meta.keywords),
            creator=meta.creator,
        )

        def decorate(canvas, document):
            canvas.saveState()
            if options.watermark is not None:
                mark = options.watermark
                canvas.setFillColor(_hex(mark.color))
                canvas.setFillAlpha(mark.opacity)
                canvas.setFont("Helvetica-Bold", mark.font_size)
                canvas.translate(document.pagesize[0] / 2, document.pagesize[1] / 2)
                # CSS rotates clockwise for positive angles, ReportLab counter-clockwise
                canvas.rotate(-mark.rotation)
                canvas.drawCentredString(0, 0, mark.text)
                canvas.restoreState()
                canvas.saveState()
            if options.display_header_footer:
                canvas.setFont("Helvetica", 9)
                canvas.drawCentredString(document.pagesize[0] / 2, 10 * mm, f"Page {document.page}")
            canvas.restoreState()

        doc.build(self._flowables(html, self._styles(css)), onFirstPage=decorate, onLaterPages=decorate)
        return buffer.getvalue()


# =============================================================================
# HTTP RENDERER
# =============================================================================

class HttpPDFRenderer:
    """Delegates rendering to an HTML-to-PDF service over HTTP."""

    def __init__(self, base_url: str, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def render(self, html: str, css: str, options: RenderOptions) -> bytes:
        payload = {
            "html": html,
            "css": css,
            "page": {
                "width_mm": options.width_mm,
                "height_mm": options.height_mm,
                "margins_mm": options.margins_mm,
                "scale": options.scale,
                "print_background": options.print_background,
                "dpi": options.dpi,
            },
            "header_template": options.header_template if options.display_header_footer else "",
            "footer_template": options.footer_template if options.display_header_footer else "",
            "metadata": options.metadata.model_dump(mode="json"),
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(f"{self.base_url}/render", json=payload)

        if response.status_code >= 400:
            raise ExportError("pdf", f"Renderer returned HTTP {response.status_code}: {response.text[:200]}")
        return response.content


# =============================================================================
# COMPRESSION
# =============================================================================

# zlib level per export quality; high quality is never recompressed
COMPRESSION_LEVELS = {
    "draft": 9,
    "standard": 6,
}


class PypdfCompressor:
    """Recompresses page content streams with pypdf."""

    async def compress(self, content: bytes, quality: str) -> bytes:
        level = COMPRESSION_LEVELS.get(quality)
        if level is None:
            return content
        return await asyncio.to_thread(self._compress_sync, content, level)

    @staticmethod
    def _compress_sync(content: bytes, level: int) -> bytes:
        writer = PdfWriter(clone_from=PdfReader(io.BytesIO(content)))
        for page in writer.pages:
            page.compress_content_streams(level=level)
        out = io.BytesIO()
        writer.write(out)
        compressed = out.getvalue()
        return compressed if len(compressed) < len(content) else content


# =============================================================================
# BRANDING
# =============================================================================

class InMemoryBrandingProvider:
    """Branding lookup backed by a dict; unknown ids resolve to None."""

    def __init__(self, brandings: Optional[dict[str, ClientBranding]] = None):
        self._brandings = dict(brandings or {})

    def add(self, branding: ClientBranding) -> None:
        self._brandings[branding.id] = branding

    async def get_branding(self, branding_id: str) -> Optional[ClientBranding]:
        return self._brandings.get(branding_id)
