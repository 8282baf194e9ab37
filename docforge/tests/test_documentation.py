"""Tests for generated pattern documentation."""

import pytest

from docforge.errors import PatternNotFoundError
from docforge.templates.documentation import PatternDocumentationGenerator, basic_sample_data


@pytest.fixture
def generator(library) -> PatternDocumentationGenerator:
    return PatternDocumentationGenerator(library)


class TestGenerate:
    """PatternDocumentationGenerator.generate."""

    def test_examples_by_complexity(self, generator):
        """Simple patterns get one example, others also an advanced one."""
        assert len(generator.generate("meeting-minutes").examples) == 1
        assert len(generator.generate("service-agreement").examples) == 2

    def test_category_best_practices(self, generator):
        """Legal patterns carry the legal review advice."""
        practices = generator.generate("service-agreement").best_practices
        assert any("legal" in p.lower() for p in practices)

    def test_complex_tips(self, generator):
        tips = generator.generate("technical-documentation").tips
        assert any("smaller" in t for t in tips)

    def test_presets_listed(self, generator):
        assert [p.id for p in generator.generate("case-study").presets][:1] == ["professional"]

    def test_unknown_pattern(self, generator):
        with pytest.raises(PatternNotFoundError):
            generator.generate("missing")

    def test_generate_all(self, generator, library):
        assert len(generator.generate_all()) == len(library.get_all_patterns())


class TestSampleData:
    """Sample data composes for every catalog pattern."""

    @pytest.mark.parametrize("pattern_id", [
        "business-proposal",
        "meeting-minutes",
        "service-agreement",
        "case-study",
        "technical-documentation",
        "course-outline",
    ])
    def test_sample_data_composes(self, registry, library, pattern_id):
        data = basic_sample_data(library.get_pattern(pattern_id))
        composed = registry.generate_template_from_pattern(pattern_id, data)
        assert "Sample text" in composed.compiled_content.html


class TestMarkdown:
    """export_markdown."""

    def test_sections_and_variables(self, generator):
        markdown = generator.export_markdown("business-proposal")
        assert markdown.startswith("# Business Proposal")
        assert "| client_name | text | Yes |" in markdown
        assert "### Investment & Pricing" in markdown
        assert "```python" in markdown
        assert "generate_template_from_pattern" in markdown
