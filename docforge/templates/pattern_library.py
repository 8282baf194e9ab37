"""
pattern_library.py — Read-only catalog of template patterns.

Templates created from a pattern get their ``content.html`` from the
shared document shell and their ``content.css`` from
``build_template_css``; creation-time customizations go through the
CustomizationService so both paths produce identical output.
"""

import logging
from typing import Any, Optional

from docforge.engine.customization import CustomizationService, OptionsInput, synthesize_source_html
from docforge.engine.stylesheet import build_template_css
from docforge.errors import PatternNotFoundError
from docforge.templates.library import load_builtin_deliverables, load_builtin_patterns
from docforge.templates.schema import (
    ClientDeliverable,
    CustomizationOptions,
    FontSettings,
    PageSettings,
    Template,
    TemplateContent,
    TemplateMetadata,
    TemplatePattern,
    TemplateSchema,
    TemplateStyling,
    new_id,
)

logger = logging.getLogger(__name__)

COMPLEXITY_LEVELS = ("simple", "moderate", "complex")

# Tokens every template carries even when a pattern does not publish them
BASE_COLORS = {
    "background": "#ffffff",
    "text": "#333333",
    "border": "#cccccc",
}


def styling_from_pattern(pattern: TemplatePattern) -> TemplateStyling:
    """Expand a pattern's published tokens into full template styling."""
    colors = dict(BASE_COLORS)
    colors.update(pattern.styling.colors)
    defaults = FontSettings()
    fonts = FontSettings(
        heading=pattern.styling.fonts.get("heading", defaults.heading),
        body=pattern.styling.fonts.get("body", defaults.body),
    )
    spacing = {"section": "2rem", "paragraph": "1rem"}
    spacing.update(pattern.styling.spacing)
    return TemplateStyling(colors=colors, fonts=fonts, spacing=spacing)


class PatternLibrary:
    """Catalog of patterns and client deliverables.

    Patterns are immutable; lookups return the shared instances.
    """

    def __init__(
        self,
        patterns: Optional[dict[str, TemplatePattern]] = None,
        deliverables: Optional[dict[str, ClientDeliverable]] = None,
        customization_service: Optional[CustomizationService] = None,
    ):
        self._patterns = dict(patterns) if patterns is not None else load_builtin_patterns()
        self._deliverables = dict(deliverables) if deliverables is not None else load_builtin_deliverables()
        self.customization = customization_service or CustomizationService()

    def get_pattern(self, pattern_id: str) -> Optional[TemplatePattern]:
        return self._patterns.get(pattern_id)

    def has_pattern(self, pattern_id: str) -> bool:
        return pattern_id in self._patterns

    def get_all_patterns(self) -> list[TemplatePattern]:
        return list(self._patterns.values())

    def get_patterns_by_category(self, category: str) -> list[TemplatePattern]:
        return [p for p in self._patterns.values() if p.category == category]

    def search_patterns(self, query: str) -> list[TemplatePattern]:
        """Case-insensitive substring match over name, description and use case.

        An empty query matches every pattern. Results keep catalog order.
        """
        needle = query.lower()
        return [
            p for p in self._patterns.values()
            if needle in p.name.lower()
            or needle in p.description.lower()
            or needle in p.use_case.lower()
        ]

    def get_pattern_categories(self) -> list[str]:
        """Categories present in the catalog, in first-seen order."""
        seen: dict[str, None] = {}
        for pattern in self._patterns.values():
            seen.setdefault(pattern.category, None)
        return list(seen)

    def get_complexity_levels(self) -> list[str]:
        return list(COMPLEXITY_LEVELS)

    # ------------------------------------------------------------ deliverables

    def get_deliverable(self, deliverable_id: str) -> Optional[ClientDeliverable]:
        return self._deliverables.get(deliverable_id)

    def get_deliverable_patterns(self, deliverable_type: str, industry: Optional[str] = None) -> list[TemplatePattern]:
        """Patterns of the first deliverable matching type (and industry, if given)."""
        for deliverable in self._deliverables.values():
            if deliverable.type.value != deliverable_type:
                continue
            if industry and deliverable.industry != industry:
                continue
            return [self._patterns[pid] for pid in deliverable.pattern_ids if pid in self._patterns]
        return []

    # ---------------------------------------------------------------- creation

    def create_template_from_pattern(
        self,
        pattern_id: str,
        customizations: Optional[OptionsInput] = None,
    ) -> Template:
        """
        Instantiate a fresh Template from a catalog pattern.

        Raises:
            PatternNotFoundError: If ``pattern_id`` is not in the catalog.
            ValidationError: If ``customizations`` are invalid.
        """
        pattern = self.get_pattern(pattern_id)
        if pattern is None:
            raise PatternNotFoundError(pattern_id)

        styling = styling_from_pattern(pattern)
        template = Template(
            id=new_id("template"),
            name=pattern.name,
            template_schema=TemplateSchema(
                variables=[v.model_copy(deep=True) for v in pattern.variables],
                sections=[s.model_copy(deep=True) for s in pattern.sections],
                styling=styling,
            ),
            page_settings=PageSettings(),
            metadata=TemplateMetadata(
                description=pattern.description,
                tags=[pattern.category, pattern.complexity, *pattern.tags],
                category=pattern.category,
                pattern_id=pattern.id,
            ),
        )
        template.content = TemplateContent(
            html=synthesize_source_html(template),
            css=build_template_css(styling, CustomizationOptions(), pattern.name),
        )
        logger.debug("Created template %s from pattern %s", template.id, pattern.id)

        if customizations is not None:
            template = self.customization.customize_template(template, customizations)
        return template

    def describe(self) -> dict[str, Any]:
        """Summary counts for health and listing endpoints."""
        return {
            "patterns": len(self._patterns),
            "deliverables": len(self._deliverables),
            "categories": self.get_pattern_categories(),
        }
