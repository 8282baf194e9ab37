"""Tests for the built-in renderer, compressor and branding provider."""

import asyncio
import io

from pypdf import PdfReader

from docforge.export.models import PDFMetadata, Watermark
from docforge.export.renderers import (
    InMemoryBrandingProvider,
    PypdfCompressor,
    RenderOptions,
    ReportLabPDFRenderer,
)

HTML = """<html><body><div class="document-container">
<h1>Annual Report</h1>
<p>Revenue grew in every region.</p>
<ul><li>North</li><li>South</li></ul>
<table><tr><th>Region</th><th>Total</th></tr><tr><td>North</td><td>10</td></tr></table>
</div></body></html>"""

CSS = ":root {\n    --color-primary: #ff6600;\n}"


def render_options(**overrides) -> RenderOptions:
    values = dict(
        width_mm=210.0,
        height_mm=297.0,
        margins_mm={"top": 20, "right": 20, "bottom": 20, "left": 20},
        metadata=PDFMetadata(title="Annual Report", author="Acme", keywords=["report"]),
    )
    values.update(overrides)
    return RenderOptions(**values)


def render(html=HTML, **overrides) -> bytes:
    return asyncio.run(ReportLabPDFRenderer().render(html, CSS, render_options(**overrides)))


class TestReportLabRenderer:
    """ReportLabPDFRenderer lays the document out as PDF."""

    def test_produces_pdf(self):
        content = render()
        assert content.startswith(b"%PDF")
        reader = PdfReader(io.BytesIO(content))
        assert len(reader.pages) == 1
        assert reader.metadata.title == "Annual Report"

    def test_text_extracted(self):
        reader = PdfReader(io.BytesIO(render()))
        text = reader.pages[0].extract_text()
        assert "Annual Report" in text
        assert "North" in text

    def test_page_size(self):
        reader = PdfReader(io.BytesIO(render(width_mm=297.0, height_mm=210.0)))
        box = reader.pages[0].mediabox
        assert float(box.width) > float(box.height)

    def test_watermark_and_footer(self):
        content = render(watermark=Watermark(text="DRAFT", rotation=0), display_header_footer=True)
        text = PdfReader(io.BytesIO(content)).pages[0].extract_text()
        assert "DRAFT" in text
        assert "Page 1" in text

    def test_empty_document(self):
        """A document without block content still renders one page."""
        assert render(html="<div></div>").startswith(b"%PDF")


class TestPypdfCompressor:
    def test_never_grows(self):
        original = render()
        compressed = asyncio.run(PypdfCompressor().compress(original, "draft"))
        assert compressed.startswith(b"%PDF")
        assert len(compressed) <= len(original)

    def test_high_quality_untouched(self):
        original = render()
        assert asyncio.run(PypdfCompressor().compress(original, "high")) is original


class TestInMemoryBrandingProvider:
    def test_lookup(self, acme_branding):
        provider = InMemoryBrandingProvider()
        assert asyncio.run(provider.get_branding("acme")) is None
        provider.add(acme_branding)
        assert asyncio.run(provider.get_branding("acme")) is acme_branding
