"""
customization.py — Presets and ad-hoc option overlays for templates.

Customization is overlay based: a field that an option set leaves as
None keeps its prior value, at every nesting level. Option sets are
merged with explicit per-type merge functions; lists are never
concatenated.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from docforge.engine.brand_engine import validate_color_map, validate_palette_contrast
from docforge.engine.composer import ordered_sections, wrap_document
from docforge.engine.stylesheet import (
    FONT_SIZES,
    MARGIN_SCALE,
    PAGE_SIZE_KEYWORDS,
    SPACING_SCALE,
    build_template_css,
    generate_custom_css,
)
from docforge.errors import FieldError, ValidationError
from docforge.templates.schema import (
    BrandingOptions,
    ColorOptions,
    ContentOptions,
    CustomizationOptions,
    LayoutOptions,
    Margins,
    PageSettings,
    PageSize,
    SpacingOptions,
    Template,
    TemplateVariable,
    TypographyOptions,
    VariableValidation,
    bump_version,
)

logger = logging.getLogger(__name__)

OptionsInput = Union[CustomizationOptions, Dict[str, Any]]

ORIENTATIONS = ("portrait", "landscape")

# Physical page sizes used when a customization names a page format
PAGE_DIMENSIONS = {
    "A4": PageSize(width=210, height=297, unit="mm"),
    "A3": PageSize(width=297, height=420, unit="mm"),
    "Letter": PageSize(width=8.5, height=11, unit="in"),
    "Legal": PageSize(width=8.5, height=14, unit="in"),
}

MARGIN_VALUES = {
    "narrow": {"in": 0.5, "mm": 12.7},
    "normal": {"in": 1.0, "mm": 25.4},
    "wide": {"in": 1.5, "mm": 38.1},
}


# =============================================================================
# PRESETS
# =============================================================================

class CustomizationPreset(BaseModel):
    """A named, immutable bundle of options."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    category: str
    options: CustomizationOptions


PRESETS: Dict[str, CustomizationPreset] = {
    "professional": CustomizationPreset(
        id="professional",
        name="Professional",
        description="Clean blue palette with balanced spacing for client-facing documents",
        category="business",
        options=CustomizationOptions(
            colors=ColorOptions(primary="#2563eb", secondary="#64748b", accent="#0ea5e9"),
            typography=TypographyOptions(font_family="Inter, sans-serif", heading_font="Inter, sans-serif",
                                         font_size="medium"),
            spacing=SpacingOptions(section_spacing="normal"),
            layout=LayoutOptions(margins="normal"),
            content=ContentOptions(show_header=True, show_footer=True, show_page_numbers=True),
        ),
    ),
    "creative": CustomizationPreset(
        id="creative",
        name="Creative",
        description="Vibrant purple and pink accents with generous whitespace",
        category="marketing",
        options=CustomizationOptions(
            colors=ColorOptions(primary="#7c3aed", secondary="#ec4899", accent="#f59e0b"),
            typography=TypographyOptions(font_family="Poppins, sans-serif", heading_font="Poppins, sans-serif",
                                         font_size="large"),
            spacing=SpacingOptions(section_spacing="loose"),
            layout=LayoutOptions(margins="narrow"),
            content=ContentOptions(show_header=True, show_footer=False, show_page_numbers=False),
        ),
    ),
    "minimal": CustomizationPreset(
        id="minimal",
        name="Minimal",
        description="Monochrome typography-first layout with tight spacing",
        category="general",
        options=CustomizationOptions(
            colors=ColorOptions(primary="#111827", secondary="#6b7280", accent="#9ca3af"),
            typography=TypographyOptions(font_family="Helvetica, Arial, sans-serif",
                                         heading_font="Helvetica, Arial, sans-serif", font_size="small"),
            spacing=SpacingOptions(section_spacing="tight"),
            layout=LayoutOptions(margins="wide"),
            content=ContentOptions(show_header=False, show_footer=False, show_page_numbers=False),
        ),
    ),
    "corporate": CustomizationPreset(
        id="corporate",
        name="Corporate",
        description="Conservative navy palette with serif headings for formal documents",
        category="business",
        options=CustomizationOptions(
            colors=ColorOptions(primary="#1e3a8a", secondary="#475569", accent="#0369a1"),
            typography=TypographyOptions(font_family="Georgia, serif", heading_font="Georgia, serif",
                                         font_size="medium"),
            spacing=SpacingOptions(section_spacing="normal"),
            layout=LayoutOptions(margins="normal"),
            content=ContentOptions(show_header=True, show_footer=True, show_page_numbers=True),
        ),
    ),
}


def get_preset(preset_id: str) -> Optional[CustomizationPreset]:
    """Look up a preset by id (case-insensitive)."""
    return PRESETS.get(preset_id.lower())


def list_presets() -> List[CustomizationPreset]:
    return list(PRESETS.values())


# =============================================================================
# MERGE FUNCTIONS
# =============================================================================

def _pick(new, old):
    return new if new is not None else old


def merge_color_options(base: ColorOptions, overlay: ColorOptions) -> ColorOptions:
    return ColorOptions(
        primary=_pick(overlay.primary, base.primary),
        secondary=_pick(overlay.secondary, base.secondary),
        accent=_pick(overlay.accent, base.accent),
        background=_pick(overlay.background, base.background),
        text=_pick(overlay.text, base.text),
    )


def merge_typography_options(base: TypographyOptions, overlay: TypographyOptions) -> TypographyOptions:
    return TypographyOptions(
        font_family=_pick(overlay.font_family, base.font_family),
        heading_font=_pick(overlay.heading_font, base.heading_font),
        font_size=_pick(overlay.font_size, base.font_size),
        line_height=_pick(overlay.line_height, base.line_height),
    )


def merge_spacing_options(base: SpacingOptions, overlay: SpacingOptions) -> SpacingOptions:
    return SpacingOptions(
        section_spacing=_pick(overlay.section_spacing, base.section_spacing),
        compact=_pick(overlay.compact, base.compact),
    )


def merge_layout_options(base: LayoutOptions, overlay: LayoutOptions) -> LayoutOptions:
    return LayoutOptions(
        page_size=_pick(overlay.page_size, base.page_size),
        orientation=_pick(overlay.orientation, base.orientation),
        margins=_pick(overlay.margins, base.margins),
        columns=_pick(overlay.columns, base.columns),
    )


def merge_content_options(base: ContentOptions, overlay: ContentOptions) -> ContentOptions:
    return ContentOptions(
        show_header=_pick(overlay.show_header, base.show_header),
        show_footer=_pick(overlay.show_footer, base.show_footer),
        show_page_numbers=_pick(overlay.show_page_numbers, base.show_page_numbers),
        header_text=_pick(overlay.header_text, base.header_text),
        footer_text=_pick(overlay.footer_text, base.footer_text),
    )


def merge_branding_options(base: BrandingOptions, overlay: BrandingOptions) -> BrandingOptions:
    return BrandingOptions(
        company_name=_pick(overlay.company_name, base.company_name),
        logo_url=_pick(overlay.logo_url, base.logo_url),
        watermark=_pick(overlay.watermark, base.watermark),
    )


def merge_customization_options(base: CustomizationOptions, overlay: CustomizationOptions) -> CustomizationOptions:
    """Layer ``overlay`` on ``base``; overlay fields win when set."""
    return CustomizationOptions(
        colors=merge_color_options(base.colors, overlay.colors),
        typography=merge_typography_options(base.typography, overlay.typography),
        spacing=merge_spacing_options(base.spacing, overlay.spacing),
        layout=merge_layout_options(base.layout, overlay.layout),
        content=merge_content_options(base.content, overlay.content),
        branding=merge_branding_options(base.branding, overlay.branding),
    )


def coerce_options(options: Optional[OptionsInput]) -> CustomizationOptions:
    if options is None:
        return CustomizationOptions()
    if isinstance(options, CustomizationOptions):
        return options
    return CustomizationOptions.model_validate(options)


# =============================================================================
# SECTION / VARIABLE EDITS
# =============================================================================

class SectionCustomization(BaseModel):
    """Per-section override. None fields are left untouched."""

    section_id: str
    content: Optional[str] = None
    visible: Optional[bool] = None
    order: Optional[int] = None
    styling: Optional[Dict[str, Any]] = None


class VariableCustomization(BaseModel):
    """Per-variable override. None fields are left untouched."""

    name: str
    default_value: Any = None
    required: Optional[bool] = None
    description: Optional[str] = None
    validation: Optional[VariableValidation] = None


class CustomizationValidation(BaseModel):
    valid: bool
    errors: List[FieldError] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


def visibility_variable(section_id: str) -> str:
    return "show_section_" + section_id.replace("-", "_")


def synthesize_source_html(template: Template) -> str:
    """Unrendered document markup: ordered section content in the document shell."""
    body = "\n".join(s.content for s in ordered_sections(template.template_schema.sections))
    return wrap_document(body, "{{document_title}}")


# =============================================================================
# SERVICE
# =============================================================================

class CustomizationService:
    """Applies presets and option overlays to templates."""

    # ---------------------------------------------------------------- options

    def customize_template(self, template: Template, options: OptionsInput) -> Template:
        """
        Apply an option overlay.

        Returns the input unchanged (no version bump) when the overlay
        changes nothing.

        Raises:
            ValidationError: If any option value is invalid.
        """
        options = coerce_options(options)
        report = self.validate_customization(template, options)
        if not report.valid:
            raise ValidationError(report.errors, context={"template_id": template.id})
        for warning in report.warnings:
            logger.warning("Customization warning for %s: %s", template.id, warning)

        accumulated = merge_customization_options(template.customization, options)
        candidate = self._apply_options(template, options, accumulated)
        return self._finalize(template, candidate)

    def customize_from_preset(
        self,
        template: Template,
        preset_id: str,
        overrides: Optional[OptionsInput] = None,
    ) -> Template:
        """Apply a preset, then caller overrides on top (overrides win)."""
        preset = get_preset(preset_id)
        if preset is None:
            raise ValidationError(FieldError(
                "preset",
                f"Unknown preset '{preset_id}'. Available: {', '.join(PRESETS)}",
            ))
        options = preset.options
        if overrides is not None:
            options = merge_customization_options(options, coerce_options(overrides))
        return self.customize_template(template, options)

    def generate_custom_css(self, options: OptionsInput, page_unit: str = "in") -> str:
        return generate_custom_css(coerce_options(options), page_unit=page_unit)

    def validate_customization(self, template: Template, options: OptionsInput) -> CustomizationValidation:
        """Advisory validation; never mutates its inputs."""
        try:
            options = coerce_options(options)
        except ValueError as exc:
            return CustomizationValidation(valid=False, errors=[FieldError("options", str(exc))])

        errors: List[FieldError] = []
        for field_name, message in validate_color_map(options.colors.model_dump()):
            errors.append(FieldError(field_name, message))

        checks = [
            ("typography.font_size", options.typography.font_size, tuple(FONT_SIZES)),
            ("spacing.section_spacing", options.spacing.section_spacing, tuple(SPACING_SCALE)),
            ("layout.page_size", options.layout.page_size, tuple(PAGE_SIZE_KEYWORDS)),
            ("layout.orientation", options.layout.orientation, ORIENTATIONS),
            ("layout.margins", options.layout.margins, tuple(MARGIN_SCALE)),
        ]
        for field_name, value, allowed in checks:
            if value is not None and value not in allowed:
                errors.append(FieldError(
                    field_name,
                    f"'{value}' is not one of: {', '.join(allowed)}",
                ))
        if options.layout.columns is not None and options.layout.columns < 1:
            errors.append(FieldError("layout.columns", "must be at least 1"))
        if options.typography.line_height is not None and options.typography.line_height <= 0:
            errors.append(FieldError("typography.line_height", "must be positive"))

        effective = dict(template.template_schema.styling.colors)
        effective.update({k: v for k, v in options.colors.model_dump().items() if v is not None})
        warnings = validate_palette_contrast(effective)

        return CustomizationValidation(valid=not errors, errors=errors, warnings=warnings)

    # --------------------------------------------------------------- sections

    def customize_sections(self, template: Template, customizations: Sequence[SectionCustomization]) -> Template:
        """
        Override section content, visibility, order or styling.

        Hiding a section wraps it in a synthetic ``{{#if show_section_<id>}}``
        binding whose default is False; showing it flips the default back,
        so toggling is reversible.
        """
        schema = template.template_schema.model_copy(deep=True)
        unknown = [c.section_id for c in customizations if schema.get_section(c.section_id) is None]
        if unknown:
            raise ValidationError([FieldError("section_id", f"Unknown section '{s}'") for s in unknown])

        sections = list(schema.sections)
        variables = list(schema.variables)
        for custom in customizations:
            index = next(i for i, s in enumerate(sections) if s.id == custom.section_id)
            section = sections[index]
            update: Dict[str, Any] = {}
            if custom.content is not None:
                update["content"] = custom.content
            if custom.order is not None:
                update["order"] = custom.order
            if custom.styling is not None:
                update["styling"] = {**section.styling, **custom.styling}
            # showing a section that was never hidden is a no-op
            if custom.visible is False or (custom.visible and section.visibility_binding):
                binding = section.visibility_binding or visibility_variable(section.id)
                update["visibility_binding"] = binding
                variables = self._set_visibility_default(variables, binding, custom.visible)
            section = section.model_copy(update=update)
            if section.visibility_binding:
                section = self._ensure_wrapped(section)
            sections[index] = section

        schema = schema.model_copy(update={"sections": sections, "variables": variables})
        candidate = template.model_copy(update={"template_schema": schema}, deep=True)
        candidate.content.html = synthesize_source_html(candidate)
        return self._finalize(template, candidate)

    def customize_variables(self, template: Template, customizations: Sequence[VariableCustomization]) -> Template:
        """Override variable defaults, requiredness, descriptions or validation."""
        schema = template.template_schema
        unknown = [c.name for c in customizations if schema.get_variable(c.name) is None]
        if unknown:
            raise ValidationError([FieldError("name", f"Unknown variable '{n}'") for n in unknown])

        variables = list(schema.variables)
        for custom in customizations:
            index = next(i for i, v in enumerate(variables) if v.name == custom.name)
            update: Dict[str, Any] = {}
            if custom.default_value is not None:
                update["default_value"] = custom.default_value
            if custom.required is not None:
                update["required"] = custom.required
            if custom.description is not None:
                update["description"] = custom.description
            if custom.validation is not None:
                update["validation"] = custom.validation
            variables[index] = variables[index].model_copy(update=update)

        new_schema = schema.model_copy(update={"variables": variables})
        candidate = template.model_copy(update={"template_schema": new_schema}, deep=True)
        return self._finalize(template, candidate)

    # ---------------------------------------------------------------- helpers

    @staticmethod
    def _set_visibility_default(
        variables: List[TemplateVariable], binding: str, visible: bool
    ) -> List[TemplateVariable]:
        for i, variable in enumerate(variables):
            if variable.name == binding:
                variables[i] = variable.model_copy(update={"default_value": visible})
                return variables
        variables.append(TemplateVariable(
            name=binding,
            type="boolean",
            required=False,
            default_value=visible,
            description="Section visibility toggle",
        ))
        return variables

    @staticmethod
    def _ensure_wrapped(section):
        opener = "{{#if " + section.visibility_binding + "}}"
        if section.content.startswith(opener) and section.content.endswith("{{/if}}"):
            return section
        content = f"{opener}{section.content}{{{{/if}}}}"
        variables = list(section.variables)
        if section.visibility_binding not in variables:
            variables.append(section.visibility_binding)
        return section.model_copy(update={"content": content, "variables": variables})

    def _apply_options(
        self,
        template: Template,
        options: CustomizationOptions,
        accumulated: CustomizationOptions,
    ) -> Template:
        """Write one overlay into styling and page settings."""
        styling = template.template_schema.styling

        colors = dict(styling.colors)
        colors.update({k: v for k, v in options.colors.model_dump().items() if v is not None})

        font_update: Dict[str, Any] = {}
        typography = options.typography
        if typography.font_family is not None:
            font_update["body"] = typography.font_family
        if typography.heading_font is not None:
            font_update["heading"] = typography.heading_font
        if typography.font_size in FONT_SIZES:
            font_update["size_px"] = int(FONT_SIZES[typography.font_size].rstrip("px"))
        if typography.line_height is not None:
            font_update["line_height"] = typography.line_height

        spacing = dict(styling.spacing)
        spacing_key = options.spacing.section_spacing
        if spacing_key is None and options.spacing.compact:
            spacing_key = "tight"
        if spacing_key in SPACING_SCALE:
            spacing.update(SPACING_SCALE[spacing_key])

        layout_update: Dict[str, Any] = {}
        if options.layout.columns is not None:
            layout_update["columns"] = options.layout.columns
        content = options.content
        for name in ("show_header", "show_footer", "show_page_numbers", "header_text", "footer_text"):
            value = getattr(content, name)
            if value is not None:
                layout_update[name] = value

        new_styling = styling.model_copy(update={
            "colors": colors,
            "fonts": styling.fonts.model_copy(update=font_update),
            "spacing": spacing,
            "layout": styling.layout.model_copy(update=layout_update),
        })

        page_settings = template.page_settings
        layout = options.layout
        if page_settings is not None or any(v is not None for v in (layout.page_size, layout.orientation, layout.margins)):
            page_settings = (page_settings.model_copy(deep=True) if page_settings is not None
                             else PageSettings())
            if layout.page_size in PAGE_DIMENSIONS:
                page_settings.format = layout.page_size
                page_settings.size = PAGE_DIMENSIONS[layout.page_size].model_copy()
            if layout.orientation in ORIENTATIONS:
                page_settings.orientation = layout.orientation
            if layout.margins in MARGIN_VALUES:
                unit = "mm" if page_settings.size.unit == "mm" else "in"
                value = MARGIN_VALUES[layout.margins][unit]
                page_settings.margins = Margins(top=value, right=value, bottom=value, left=value, unit=unit)

        new_schema = template.template_schema.model_copy(update={"styling": new_styling})
        candidate = template.model_copy(
            update={
                "template_schema": new_schema,
                "page_settings": page_settings,
                "customization": accumulated,
            },
            deep=True,
        )
        page_unit = candidate.page_settings.size.unit if candidate.page_settings else "in"
        candidate.content.css = build_template_css(new_styling, accumulated, template.name, page_unit=page_unit)
        return candidate

    @staticmethod
    def _finalize(original: Template, candidate: Template) -> Template:
        """Bump version and timestamp only when something actually changed."""
        fields = ("template_schema", "content", "page_settings", "customization")
        before = original.model_dump(include=set(fields))
        after = candidate.model_dump(include=set(fields))
        if before == after:
            return original
        metadata = candidate.metadata.model_copy(update={"updated_at": datetime.utcnow()})
        return candidate.model_copy(update={
            "version": bump_version(original.version),
            "metadata": metadata,
        })
