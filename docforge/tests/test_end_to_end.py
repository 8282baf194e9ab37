"""Pattern to PDF, end to end, with the built-in renderer."""

import asyncio

from docforge.export.manager import ExportManager
from docforge.export.renderers import PypdfCompressor


def test_business_proposal_composes(registry, proposal_data):
    composed = registry.generate_template_from_pattern("business-proposal", proposal_data)
    html = composed.compiled_content.html
    assert "Acme" in html
    assert "Website Revamp" in html
    assert "$5000" in html
    assert "<li>Design</li>" in html
    assert "<li>Build</li>" in html
    assert registry.get_pattern_usage("business-proposal").usage_count == 1


def test_business_proposal_exports_pdf(registry, proposal_data):
    template = registry.get_template_from_pattern("business-proposal")
    manager = ExportManager(composer=registry.composer, compressor=PypdfCompressor())
    result = asyncio.run(manager.export_document(
        template, proposal_data, {"format": "pdf", "quality": "standard"},
    ))
    assert result.success is True
    assert result.errors == []
    assert result.pdf.page_count >= 1
    assert result.pdf.content.startswith(b"%PDF")
    assert result.pdf.size == len(result.pdf.content) > 0
    assert result.metadata.delivery["filename"] == "business-proposal.pdf"


def test_customized_proposal_exports_html(registry, proposal_data):
    template = registry.get_template_from_pattern("business-proposal", {"colors": {"primary": "#123456"}})
    result = asyncio.run(ExportManager(composer=registry.composer).export_document(
        template, proposal_data, {"format": "html", "client_customization": {"theme": "auto"}},
    ))
    assert result.success is True
    assert "#123456" in result.html.css
    assert "prefers-color-scheme: dark" in result.html.css
    assert "Website Revamp" in result.html.content
