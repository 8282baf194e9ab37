"""Pytest configuration and fixtures."""

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from docforge.engine.composer import TemplateComposer
from docforge.export.renderers import RenderOptions
from docforge.templates.pattern_library import PatternLibrary
from docforge.templates.registry import PatternRegistry
from docforge.templates.schema import (
    ClientBranding,
    Template,
    TemplateSchema,
    TemplateSection,
    TemplateVariable,
)

FAKE_PDF = b"%PDF-1.4\n% fake renderer output\n%%EOF\n"


class FakeRenderer:
    """Records each render call and returns fixed bytes."""

    def __init__(self, content: bytes = FAKE_PDF, error: Optional[Exception] = None):
        self.content = content
        self.error = error
        self.calls: list[tuple[str, str, RenderOptions]] = []

    async def render(self, html: str, css: str, options: RenderOptions) -> bytes:
        self.calls.append((html, css, options))
        if self.error is not None:
            raise self.error
        return self.content


@pytest.fixture
def client() -> TestClient:
    """Create a test client for the FastAPI app."""
    from docforge.api.main import create_app

    return TestClient(create_app())


@pytest.fixture
def library() -> PatternLibrary:
    return PatternLibrary()


@pytest.fixture
def registry(library) -> PatternRegistry:
    """A registry with fresh, empty state."""
    return PatternRegistry(library=library, composer=TemplateComposer())


@pytest.fixture
def composer() -> TemplateComposer:
    return TemplateComposer()


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def simple_template() -> Template:
    """A two-section template with one required and one optional variable."""
    return Template(
        id="template_simple",
        name="Simple Report",
        schema=TemplateSchema(
            variables=[
                TemplateVariable(name="title", required=True),
                TemplateVariable(name="items", type="array", default_value=[]),
                TemplateVariable(name="note"),
            ],
            sections=[
                TemplateSection(
                    id="heading",
                    name="Heading",
                    content="<h1>{{title}}</h1>",
                    variables=["title"],
                ),
                TemplateSection(
                    id="list",
                    name="List",
                    content="<ul>{{#each items}}<li>{{this}}</li>{{/each}}</ul>{{#if note}}<p>{{note}}</p>{{/if}}",
                    variables=["items", "note"],
                ),
            ],
        ),
    )


@pytest.fixture
def acme_branding() -> ClientBranding:
    return ClientBranding.model_validate({
        "id": "acme",
        "name": "Acme Corp",
        "color_palette": {"primary": "#ff6600", "text": "#222222"},
        "typography": {"heading_font": "Georgia, serif"},
    })


@pytest.fixture
def proposal_data() -> dict:
    return {
        "client_name": "Acme",
        "project_title": "Website Revamp",
        "total_cost": 5000,
        "deliverables": ["Design", "Build"],
    }


@pytest.fixture
def make_renderer():
    """Factory for renderers with custom output or a raised error."""
    return FakeRenderer
