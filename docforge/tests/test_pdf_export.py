"""Tests for the PDF export sub-pipeline."""

import asyncio

import pytest

from docforge.errors import ExportError, RendererTimeoutError
from docforge.export.models import ExportOptions, PDFMargins, Watermark
from docforge.export.pdf_export import (
    PDFExportService,
    convert_length,
    estimate_page_count,
    generate_page_css,
    inject_watermark,
    margins_in,
    page_dimensions,
)


@pytest.fixture
def composed(composer, simple_template):
    return composer.compose(simple_template, {"title": "Quarterly", "items": ["a", "b"]})


class SlowRenderer:
    async def render(self, html, css, options):
        await asyncio.sleep(5)
        return b"%PDF-late"


class FailingCompressor:
    async def compress(self, content, quality):
        raise RuntimeError("codec exploded")


class HalvingCompressor:
    def __init__(self):
        self.qualities = []

    async def compress(self, content, quality):
        self.qualities.append(quality)
        return content[: len(content) // 2]


def options(**values) -> ExportOptions:
    return ExportOptions.model_validate(values)


class TestGeometry:
    """Page tables and unit conversion."""

    def test_page_dimensions(self):
        assert page_dimensions("A4") == (210.0, 297.0)
        assert page_dimensions("Letter", unit="px") == (816, 1056)

    def test_landscape_swaps(self):
        assert page_dimensions("A3", "landscape") == (420.0, 297.0)

    def test_convert_length(self):
        assert convert_length(1, "in", "mm") == 25.4
        assert convert_length(96, "px", "in") == 1.0
        assert convert_length(2, "cm", "mm") == 20.0

    def test_margins_in_mm(self):
        margins = margins_in(PDFMargins(top=1, right=1, bottom=0.5, left=0.5, unit="in"))
        assert margins == {"top": 25.4, "right": 25.4, "bottom": 12.7, "left": 12.7}

    def test_page_css(self):
        css = generate_page_css(options(pdf={"format": "Letter", "orientation": "landscape"}))
        assert "size: 279.4mm 215.9mm;" in css
        assert "margin: 20mm 20mm 20mm 20mm;" in css
        assert "print-color-adjust: exact;" in css


class TestPageCount:
    """Heuristic page count."""

    def test_minimum_one_page(self):
        assert estimate_page_count("<p></p>", "A4") == 1

    def test_scales_with_text(self):
        markup = "<p>" + "x" * 6001 + "</p>"
        assert estimate_page_count(markup, "A4") == 3
        assert estimate_page_count(markup, "A3") == 2

    def test_ignores_markup_and_styles(self):
        markup = "<style>" + "x" * 10000 + "</style><p>short</p>"
        assert estimate_page_count(markup, "A4") == 1


class TestExport:
    """PDFExportService.export_to_pdf."""

    def test_render_result(self, composed, fake_renderer):
        result = asyncio.run(PDFExportService(fake_renderer).export_to_pdf(composed, options()))
        assert result.content.startswith(b"%PDF")
        assert result.size == len(result.content)
        assert result.page_count == 1
        assert result.metadata.title == "Simple Report"
        assert result.compressed is False

    def test_render_options(self, composed, fake_renderer):
        """Geometry and quality reach the renderer."""
        asyncio.run(PDFExportService(fake_renderer).export_to_pdf(
            composed, options(quality="high", pdf={"format": "A4", "orientation": "landscape"}),
        ))
        _, css, render_options = fake_renderer.calls[0]
        assert (render_options.width_mm, render_options.height_mm) == (297.0, 210.0)
        assert render_options.dpi == 300
        assert "@page" in css

    def test_watermark_precedence(self, composed, fake_renderer):
        """PDF options win over client customization."""
        asyncio.run(PDFExportService(fake_renderer).export_to_pdf(composed, options(
            pdf={"watermark": {"text": "DRAFT"}},
            client_customization={"watermark": {"text": "CLIENT"}},
        )))
        html, css, render_options = fake_renderer.calls[0]
        assert render_options.watermark.text == "DRAFT"
        assert '<div class="docforge-watermark">DRAFT</div>' in html
        assert "rotate(-45deg)" in css
        assert "opacity: 0.1;" in css

    def test_branding_watermark_fallback(self, composed, fake_renderer):
        """The template's branding watermark is used when nothing else is set."""
        composed.template.customization.branding.watermark = "CONFIDENTIAL"
        service = PDFExportService(fake_renderer)
        assert service.resolve_watermark(composed, options()).text == "CONFIDENTIAL"

    def test_timeout(self, composed):
        service = PDFExportService(SlowRenderer(), render_timeout=0.05)
        with pytest.raises(RendererTimeoutError):
            asyncio.run(service.export_to_pdf(composed, options()))

    def test_empty_output(self, composed, make_renderer):
        with pytest.raises(ExportError) as exc_info:
            asyncio.run(PDFExportService(make_renderer(content=b"")).export_to_pdf(composed, options()))
        assert str(exc_info.value).startswith("pdf:")

    def test_compression_applied(self, composed, fake_renderer):
        compressor = HalvingCompressor()
        service = PDFExportService(fake_renderer, compressor=compressor)
        result = asyncio.run(service.export_to_pdf(composed, options(quality="draft", optimization={"compress": True})))
        assert result.compressed is True
        assert compressor.qualities == ["draft"]

    def test_high_quality_skips_compression(self, composed, fake_renderer):
        compressor = HalvingCompressor()
        service = PDFExportService(fake_renderer, compressor=compressor)
        result = asyncio.run(service.export_to_pdf(composed, options(quality="high", optimization={"compress": True})))
        assert result.compressed is False
        assert compressor.qualities == []

    def test_compression_failure_is_a_warning(self, composed, fake_renderer):
        """A failing compressor downgrades to a warning and keeps the output."""
        service = PDFExportService(fake_renderer, compressor=FailingCompressor())
        result = asyncio.run(service.export_to_pdf(composed, options(optimization={"compress": True})))
        assert result.content == fake_renderer.content
        assert any("codec exploded" in w for w in result.warnings)


def test_inject_watermark_without_body():
    """Fragments get the watermark layer prepended."""
    marked = inject_watermark("<p>x</p>", Watermark(text="A & B"))
    assert marked.startswith('<div class="docforge-watermark">A &amp; B</div>')
