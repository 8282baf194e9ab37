"""Generated reference documentation for catalog patterns."""

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from docforge.engine.customization import CustomizationPreset, list_presets
from docforge.errors import PatternNotFoundError
from docforge.templates.pattern_library import PatternLibrary
from docforge.templates.schema import TemplatePattern


CUSTOMIZATION_OPTIONS = [
    "Colors (primary, secondary, accent, background, text)",
    "Typography (font family, heading font, size, line height)",
    "Spacing (section spacing, compact mode)",
    "Layout (page size, orientation, margins, columns)",
    "Content (header, footer, page numbers)",
    "Branding (logo, company name, watermark)",
]

SAMPLE_VALUES = {
    "text": "Sample text",
    "number": 100,
    "date": "2024-01-01",
    "boolean": True,
    "array": ["Item 1", "Item 2"],
    "object": {"key": "value"},
}


@dataclass
class DocumentationExample:
    title: str
    description: str
    use_case: str
    sample_data: dict[str, Any]
    difficulty: str  # beginner | intermediate | advanced


@dataclass
class CustomizationExample:
    title: str
    description: str
    options: dict[str, Any]
    before: str
    after: str


@dataclass
class PatternDocumentation:
    pattern: TemplatePattern
    examples: list[DocumentationExample] = field(default_factory=list)
    best_practices: list[str] = field(default_factory=list)
    common_mistakes: list[str] = field(default_factory=list)
    tips: list[str] = field(default_factory=list)
    available_options: list[str] = field(default_factory=list)
    presets: list[CustomizationPreset] = field(default_factory=list)
    customization_examples: list[CustomizationExample] = field(default_factory=list)
    api_usage: str = ""


def basic_sample_data(pattern: TemplatePattern) -> dict[str, Any]:
    """One value per variable: its default when set, otherwise a typed sample."""
    return {
        v.name: v.default_value if v.default_value else SAMPLE_VALUES.get(v.type, "Sample value")
        for v in pattern.variables
    }


def advanced_sample_data(pattern: TemplatePattern) -> dict[str, Any]:
    data = basic_sample_data(pattern)
    for key, value in data.items():
        if isinstance(value, list):
            data[key] = [*value, "Additional item 1", "Additional item 2"]
    return data


class PatternDocumentationGenerator:
    """Builds usage guides for catalog patterns."""

    def __init__(self, library: Optional[PatternLibrary] = None):
        self.library = library or PatternLibrary()

    def generate(self, pattern_id: str) -> PatternDocumentation:
        pattern = self.library.get_pattern(pattern_id)
        if pattern is None:
            raise PatternNotFoundError(pattern_id)

        return PatternDocumentation(
            pattern=pattern,
            examples=self._examples(pattern),
            best_practices=self._best_practices(pattern),
            common_mistakes=[
                "Missing required variables leading to incomplete documents",
                "Inconsistent formatting across sections",
                "Not testing with edge case data (empty arrays, long text)",
                "Forgetting to apply client branding before generation",
                "Not validating generated output before delivery",
            ],
            tips=self._tips(pattern),
            available_options=list(CUSTOMIZATION_OPTIONS),
            presets=list_presets(),
            customization_examples=[
                CustomizationExample(
                    title="Professional Theme",
                    description="Apply professional styling with blue color scheme",
                    options={"colors": {"primary": "#2563eb", "secondary": "#64748b"},
                             "typography": {"font_size": "medium"}},
                    before="Default template styling",
                    after="Professional blue theme with clean typography",
                ),
                CustomizationExample(
                    title="Compact Layout",
                    description="Reduce spacing for more content per page",
                    options={"spacing": {"compact": True, "section_spacing": "tight"},
                             "layout": {"margins": "narrow"}},
                    before="Standard spacing and margins",
                    after="Compact layout with reduced whitespace",
                ),
            ],
            api_usage=self._api_usage(pattern),
        )

    def generate_all(self) -> list[PatternDocumentation]:
        return [self.generate(p.id) for p in self.library.get_all_patterns()]

    def export_markdown(self, pattern_id: str) -> str:
        doc = self.generate(pattern_id)
        pattern = doc.pattern
        lines = [
            f"# {pattern.name}",
            "",
            "## Overview",
            "",
            f"**Category:** {pattern.category}",
            f"**Complexity:** {pattern.complexity}",
            f"**Estimated Time:** {pattern.estimated_time}",
            "",
            pattern.description,
            "",
            "## Use Cases",
            "",
            pattern.use_case,
            "",
            "## Variables",
            "",
            "| Name | Type | Required | Default | Description |",
            "|------|------|----------|---------|-------------|",
        ]
        for v in pattern.variables:
            default = json.dumps(v.default_value) if v.default_value else "-"
            lines.append(
                f"| {v.name} | {v.type} | {'Yes' if v.required else 'No'} | {default} | {v.description or '-'} |"
            )

        lines += ["", "## Sections", ""]
        for s in pattern.sections:
            lines += [
                f"### {s.name}",
                "",
                s.description,
                "",
                f"**Required:** {'Yes' if s.required else 'No'}",
                f"**Variables:** {', '.join(s.variables)}",
                "",
                "```html",
                s.content,
                "```",
                "",
            ]

        lines += ["## Usage Examples", ""]
        for ex in doc.examples:
            lines += [
                f"### {ex.title}",
                "",
                f"**Difficulty:** {ex.difficulty}",
                f"**Use Case:** {ex.use_case}",
                "",
                ex.description,
                "",
                "```json",
                json.dumps(ex.sample_data, indent=2),
                "```",
                "",
            ]

        for heading, items in (
            ("Best Practices", doc.best_practices),
            ("Common Mistakes", doc.common_mistakes),
            ("Tips", doc.tips),
            ("Available Customization Options", doc.available_options),
        ):
            lines += [f"## {heading}", ""] + [f"- {item}" for item in items] + [""]

        lines += ["## Presets", ""]
        for preset in doc.presets:
            lines += [f"### {preset.name}", "", preset.description, "", f"**Category:** {preset.category}", ""]

        lines += ["## API Usage", "", "```python", doc.api_usage, "```", ""]
        return "\n".join(lines)

    # ------------------------------------------------------------------

    def _examples(self, pattern: TemplatePattern) -> list[DocumentationExample]:
        examples = [
            DocumentationExample(
                title="Basic Usage",
                description=f"Simple example of using the {pattern.name} pattern with minimal data",
                use_case="Quick document generation with default styling",
                sample_data=basic_sample_data(pattern),
                difficulty="beginner",
            )
        ]
        if pattern.complexity in ("moderate", "complex"):
            examples.append(DocumentationExample(
                title="Advanced Customization",
                description="Advanced usage with custom styling and all optional features",
                use_case="Professional document with full customization",
                sample_data=advanced_sample_data(pattern),
                difficulty="advanced",
            ))
        return examples

    def _best_practices(self, pattern: TemplatePattern) -> list[str]:
        practices = [
            "Always validate input data before generating documents",
            "Use consistent naming conventions for variables",
            "Test with various data scenarios including edge cases",
            "Apply client branding consistently across all sections",
        ]
        if pattern.category == "business":
            practices.append("Include clear call-to-action sections where appropriate")
            practices.append("Ensure all financial information is accurate and clearly presented")
        if pattern.category == "legal":
            practices.append("Have legal documents reviewed by qualified professionals")
            practices.append("Ensure all required legal clauses are included")
        return practices

    def _tips(self, pattern: TemplatePattern) -> list[str]:
        tips = [
            "Use preview mode to test changes before final generation",
            "Save frequently used customizations as custom patterns",
            "Batch process multiple similar documents for efficiency",
        ]
        if pattern.complexity == "complex":
            tips.append("Break down complex documents into smaller, manageable sections")
            tips.append("Use version control for document templates in production")
        return tips

    def _api_usage(self, pattern: TemplatePattern) -> str:
        sample = basic_sample_data(pattern)
        data_lines = ",\n".join(
            f"        {name!r}: {value!r}" for name, value in list(sample.items())[:3]
        )
        return (
            "from docforge.templates.registry import PatternRegistry\n"
            "\n"
            "registry = PatternRegistry()\n"
            "composed = registry.generate_template_from_pattern(\n"
            f"    {pattern.id!r},\n"
            "    {\n"
            f"{data_lines},\n"
            "    },\n"
            "    customizations={\"colors\": {\"primary\": \"#2563eb\"}},\n"
            ")\n"
            "print(composed.compiled_content.html)"
        )
