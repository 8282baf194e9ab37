"""Tests for template composition."""

import pytest

from docforge.engine.composer import TemplateComposer, compute_cache_key, ordered_sections
from docforge.errors import CompositionError, CompositionErrorKind
from docforge.templates.schema import Template, TemplateSchema, TemplateSection, TemplateVariable


class TestCompose:
    """Variable substitution and document assembly."""

    def test_substitutes_data(self, composer, simple_template):
        """Caller data lands in the compiled HTML."""
        composed = composer.compose(simple_template, {"title": "Quarterly", "items": ["a", "b"]})
        html = composed.compiled_content.html
        assert "<h1>Quarterly</h1>" in html
        assert html.count("<li>") == 2
        assert html.index("<li>a</li>") < html.index("<li>b</li>")

    def test_document_shell(self, composer, simple_template):
        """Sections are wrapped in the document container."""
        composed = composer.compose(simple_template, {"title": "T"})
        html = composed.compiled_content.html
        assert html.startswith("<!DOCTYPE html>")
        assert '<div class="document-container">' in html
        assert "<title>Simple Report</title>" in html

    def test_document_title_from_data(self, composer, simple_template):
        """document_title overrides the template name in <title>."""
        composed = composer.compose(simple_template, {"title": "T", "document_title": "Q3 <Draft>"})
        assert "<title>Q3 &lt;Draft&gt;</title>" in composed.compiled_content.html

    def test_default_applies(self, composer, simple_template):
        """Declared defaults fill absent variables."""
        composed = composer.compose(simple_template, {"title": "T"})
        assert "<ul></ul>" in composed.compiled_content.html

    def test_optional_missing_variable_does_not_raise(self, composer, simple_template):
        """An optional variable without a default simply drops its #if block."""
        composed = composer.compose(simple_template, {"title": "T"})
        assert "<p>" not in composed.compiled_content.html

    def test_blank_string_counts_as_missing(self, composer, simple_template):
        """A whitespace-only value does not satisfy a required variable."""
        with pytest.raises(CompositionError) as exc_info:
            composer.compose(simple_template, {"title": "   "})
        assert exc_info.value.missing_variables == ["title"]

    def test_sections_in_order(self, composer):
        """Explicit ``order`` wins over list position."""
        template = Template(
            name="Ordered",
            schema=TemplateSchema(sections=[
                TemplateSection(id="b", name="B", content="<p>second</p>", order=2),
                TemplateSection(id="a", name="A", content="<p>first</p>", order=1),
            ]),
        )
        html = composer.compose(template).compiled_content.html
        assert html.index("first") < html.index("second")


class TestRequiredVariables:
    """Missing required variables are reported together."""

    def test_lists_every_missing_name(self, composer):
        """Two missing required variables are both named."""
        template = Template(
            name="Needs two",
            schema=TemplateSchema(
                variables=[
                    TemplateVariable(name="client", required=True),
                    TemplateVariable(name="amount", type="number", required=True),
                ],
                sections=[TemplateSection(
                    id="s", name="S", content="{{client}} {{amount}}", variables=["client", "amount"],
                )],
            ),
        )
        with pytest.raises(CompositionError) as exc_info:
            composer.compose(template, {})
        error = exc_info.value
        assert error.kind == CompositionErrorKind.MISSING_REQUIRED_VARIABLE
        assert error.missing_variables == ["client", "amount"]
        assert "client" in str(error) and "amount" in str(error)

    def test_empty_default_does_not_satisfy_required(self, composer):
        """An empty default leaves a required variable missing."""
        template = Template(
            name="Defaulted",
            schema=TemplateSchema(
                variables=[
                    TemplateVariable(name="client", required=True, default_value=""),
                    TemplateVariable(name="items", type="array", required=True, default_value=[]),
                    TemplateVariable(name="count", type="number", required=True, default_value=0),
                ],
                sections=[TemplateSection(
                    id="s", name="S", content="[{{client}}] {{count}}", variables=["client", "count"],
                )],
            ),
        )
        with pytest.raises(CompositionError) as exc_info:
            composer.compose(template, {})
        assert exc_info.value.missing_variables == ["client", "items"]

    def test_catalog_proposal_reports_core_fields(self, composer, library, proposal_data):
        """The proposal pattern needs its four core fields and nothing else."""
        template = library.create_template_from_pattern("business-proposal")
        with pytest.raises(CompositionError) as exc_info:
            composer.compose(template, {})
        assert exc_info.value.missing_variables == ["client_name", "project_title", "total_cost", "deliverables"]
        assert composer.compose(template, proposal_data).compiled_content.html


class TestDeterminismAndCache:
    """Identical inputs produce identical output."""

    def test_deterministic_output(self, simple_template):
        """Two independent composers agree byte for byte."""
        data = {"title": "T", "items": ["x"]}
        first = TemplateComposer().compose(simple_template, data)
        second = TemplateComposer().compose(simple_template, data)
        assert first.compiled_content.html == second.compiled_content.html
        assert first.compiled_content.css == second.compiled_content.css
        assert first.metadata.cache_key == second.metadata.cache_key

    def test_second_compose_hits_cache(self, composer, simple_template):
        """Recomposing the same inputs is served from cache."""
        data = {"title": "T"}
        assert composer.compose(simple_template, data).metadata.cache_hit is False
        assert composer.compose(simple_template, data).metadata.cache_hit is True

    def test_cache_key_depends_on_inputs(self, simple_template, acme_branding):
        """Data, branding and version all change the key."""
        base = compute_cache_key(simple_template, {"title": "a"}, None)
        assert compute_cache_key(simple_template, {"title": "b"}, None) != base
        assert compute_cache_key(simple_template, {"title": "a"}, acme_branding) != base
        bumped = simple_template.model_copy(update={"version": "1.0.1"})
        assert compute_cache_key(bumped, {"title": "a"}, None) != base

    def test_cache_key_ignores_key_order(self, simple_template):
        """Data hashing is canonical."""
        a = compute_cache_key(simple_template, {"title": "t", "note": "n"}, None)
        b = compute_cache_key(simple_template, {"note": "n", "title": "t"}, None)
        assert a == b


class TestBranding:
    """Branding overlay at composition time."""

    def test_branding_css_appended(self, composer, simple_template, acme_branding):
        """Branded colors become custom properties."""
        composed = composer.compose(simple_template, {"title": "T"}, acme_branding)
        css = composed.compiled_content.css
        assert "/* Branding: acme */" in css
        assert "--color-primary: #ff6600;" in css
        assert composed.branding_id == "acme"
        assert "branding:acme" in composed.metadata.dependencies

    def test_unbranded_tokens_retained(self, composer, simple_template, acme_branding):
        """Tokens the branding does not name keep template values."""
        composed = composer.compose(simple_template, {"title": "T"}, acme_branding)
        secondary = simple_template.styling.colors["secondary"]
        assert f"--color-secondary: {secondary};" in composed.compiled_content.css

    def test_template_not_mutated(self, composer, simple_template, acme_branding):
        """Composition never edits the input template."""
        before = simple_template.model_dump()
        composer.compose(simple_template, {"title": "T"}, acme_branding)
        assert simple_template.model_dump() == before

class TestTemplateShell:
    """A template's own base HTML frames the composed sections."""

    def test_custom_shell_kept(self, composer, simple_template):
        """Header markup outside the container survives and is rendered."""
        template = simple_template.model_copy(deep=True)
        template.content.html = (
            "<!DOCTYPE html><html><head><title>x</title></head><body>"
            '<header class="brand">{{title}} by Acme</header>'
            '<div class="document-container"><p>stale</p></div>'
            "</body></html>"
        )
        html = composer.compose(template, {"title": "Report"}).compiled_content.html
        assert '<header class="brand">Report by Acme</header>' in html
        assert "stale" not in html
        assert "<title>Simple Report</title>" in html
        container = html.index('<div class="document-container">')
        assert container < html.index("<h1>Report</h1>") < html.index("</body>")

    def test_generated_css_without_template_css(self, composer, simple_template):
        """A template with no stylesheet still gets styling rules."""
        css = composer.compose(simple_template, {"title": "T"}).compiled_content.css
        assert "Styling" in css
        assert "color: var(--color-primary" in css

    def test_branding_recolors_rules(self, composer, library, acme_branding, proposal_data):
        """Branded custom properties are declared after the rules that read them."""
        template = library.create_template_from_pattern("business-proposal")
        css = composer.compose(template, proposal_data, acme_branding).compiled_content.css
        assert "var(--color-primary" in css
        assert css.rindex("--color-primary: #ff6600") > css.index("var(--color-primary")
        assert "#2563eb" not in css[css.rindex("--color-primary"):]



class TestWarnings:
    """Undeclared references are reported but do not fail composition."""

    def test_undeclared_reference_warns(self, composer):
        """Content naming an undeclared variable yields a warning."""
        template = Template(
            name="Loose",
            schema=TemplateSchema(sections=[
                TemplateSection(id="s", name="S", content="{{ghost}}", variables=[]),
            ]),
        )
        composed = composer.compose(template, {"ghost": "boo"})
        assert "boo" in composed.compiled_content.html
        assert any("ghost" in w for w in composed.metadata.warnings)


def test_ordered_sections_keeps_position_without_order():
    """Sections without ``order`` keep list position."""
    sections = [
        TemplateSection(id="x", name="X", content=""),
        TemplateSection(id="y", name="Y", content=""),
    ]
    assert [s.id for s in ordered_sections(sections)] == ["x", "y"]
