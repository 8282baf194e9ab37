"""Template system module - schema, pattern catalog, registry and storage."""

from docforge.templates.schema import (
    ClientBranding,
    ComposedTemplate,
    CustomizationOptions,
    CustomPattern,
    Template,
    TemplatePattern,
    TemplateSection,
    TemplateVariable,
)

__all__ = [
    "ClientBranding",
    "ComposedTemplate",
    "CustomizationOptions",
    "CustomPattern",
    "Template",
    "TemplatePattern",
    "TemplateSection",
    "TemplateVariable",
]
