"""Template schema models: variables, sections, styling, page settings, patterns."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from docforge.engine.brand_engine import is_valid_color


VariableType = Literal["text", "number", "date", "boolean", "array", "object"]
Complexity = Literal["simple", "moderate", "complex"]
PatternCategory = Literal["business", "legal", "marketing", "technical", "educational", "healthcare"]
Orientation = Literal["portrait", "landscape"]


def new_id(prefix: str) -> str:
    """Mint a short random identifier."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def bump_version(version: str) -> str:
    """Increment the patch component of a semver string."""
    parts = version.split(".")
    while len(parts) < 3:
        parts.append("0")
    major, minor, patch = parts[:3]
    try:
        patch_num = int(patch)
    except ValueError:
        patch_num = 0
    return f"{major}.{minor}.{patch_num + 1}"


# =============================================================================
# VARIABLES & SECTIONS
# =============================================================================

class VariableValidation(BaseModel):
    """Optional constraints on a variable value."""

    pattern: str | None = None
    min_length: int | None = None
    max_length: int | None = None
    min_value: float | None = None
    max_value: float | None = None
    allowed_values: list[Any] | None = None


class TemplateVariable(BaseModel):
    """A named placeholder a template consumes."""

    name: str = Field(description="Unique variable name within a template")
    type: VariableType = Field(default="text")
    required: bool = Field(default=False)
    default_value: Any = Field(default=None)
    description: str | None = Field(default=None)
    validation: VariableValidation | None = Field(default=None)


class TemplateSection(BaseModel):
    """A reusable content block with ``{{var}}`` placeholders."""

    id: str
    name: str
    description: str = ""
    content: str = Field(description="Markup with placeholders and block helpers")
    variables: list[str] = Field(default_factory=list)
    required: bool = True
    order: int | None = Field(default=None, description="Assembly order; None keeps position")
    styling: dict[str, Any] = Field(default_factory=dict)
    visibility_binding: str | None = Field(
        default=None,
        description="Boolean variable guarding this section once it has been toggled",
    )


# =============================================================================
# STYLING & PAGE SETTINGS
# =============================================================================

class FontSettings(BaseModel):
    """Typography tokens."""

    heading: str = "Inter, sans-serif"
    body: str = "Inter, sans-serif"
    size_px: int = 16
    line_height: float = 1.6


class LayoutSettings(BaseModel):
    """Document layout and content toggles."""

    type: str = "single-page"
    columns: int = 1
    max_width: str = "800px"
    show_header: bool = False
    show_footer: bool = False
    show_page_numbers: bool = False
    header_text: str | None = None
    footer_text: str | None = None


class TemplateStyling(BaseModel):
    """Colors, fonts, spacing and layout tokens of a template."""

    colors: dict[str, str] = Field(default_factory=lambda: {
        "primary": "#2563eb",
        "secondary": "#64748b",
        "accent": "#0ea5e9",
        "background": "#ffffff",
        "text": "#333333",
        "border": "#cccccc",
    })
    fonts: FontSettings = Field(default_factory=FontSettings)
    spacing: dict[str, str] = Field(default_factory=lambda: {"section": "2rem", "paragraph": "1rem"})
    layout: LayoutSettings = Field(default_factory=LayoutSettings)


class PageSize(BaseModel):
    width: float = 8.5
    height: float = 11
    unit: Literal["in", "mm", "cm", "px"] = "in"


class Margins(BaseModel):
    top: float = 1
    right: float = 1
    bottom: float = 1
    left: float = 1
    unit: Literal["in", "mm", "cm", "px"] = "in"


class PageSettings(BaseModel):
    """Print settings; only consulted by the PDF pipeline."""

    format: str = "Letter"
    size: PageSize = Field(default_factory=PageSize)
    orientation: Orientation = "portrait"
    margins: Margins = Field(default_factory=Margins)


class TemplateSchema(BaseModel):
    variables: list[TemplateVariable] = Field(default_factory=list)
    sections: list[TemplateSection] = Field(default_factory=list)
    styling: TemplateStyling = Field(default_factory=TemplateStyling)

    def get_variable(self, name: str) -> TemplateVariable | None:
        return next((v for v in self.variables if v.name == name), None)

    def get_section(self, section_id: str) -> TemplateSection | None:
        return next((s for s in self.sections if s.id == section_id), None)


class TemplateContent(BaseModel):
    html: str = ""
    css: str = ""
    js: str = ""
    assets: list[str] = Field(default_factory=list)


class TemplateMetadata(BaseModel):
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    category: str | None = None
    pattern_id: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


# =============================================================================
# CUSTOMIZATION OPTIONS
# =============================================================================
# Every leaf is optional: None means "not specified, keep the prior value".
# Enum and color values are checked by CustomizationService.validate_customization
# so that bad input produces field-level messages instead of model errors.

class ColorOptions(BaseModel):
    primary: str | None = None
    secondary: str | None = None
    accent: str | None = None
    background: str | None = None
    text: str | None = None


class TypographyOptions(BaseModel):
    font_family: str | None = None
    heading_font: str | None = None
    font_size: str | None = Field(default=None, description="small | medium | large")
    line_height: float | None = None


class SpacingOptions(BaseModel):
    section_spacing: str | None = Field(default=None, description="tight | normal | loose")
    compact: bool | None = None


class LayoutOptions(BaseModel):
    page_size: str | None = Field(default=None, description="A4 | A3 | Letter | Legal")
    orientation: str | None = Field(default=None, description="portrait | landscape")
    margins: str | None = Field(default=None, description="narrow | normal | wide")
    columns: int | None = None


class ContentOptions(BaseModel):
    show_header: bool | None = None
    show_footer: bool | None = None
    show_page_numbers: bool | None = None
    header_text: str | None = None
    footer_text: str | None = None


class BrandingOptions(BaseModel):
    company_name: str | None = None
    logo_url: str | None = None
    watermark: str | None = None


class CustomizationOptions(BaseModel):
    """An overlay of styling, layout, content and branding choices."""

    colors: ColorOptions = Field(default_factory=ColorOptions)
    typography: TypographyOptions = Field(default_factory=TypographyOptions)
    spacing: SpacingOptions = Field(default_factory=SpacingOptions)
    layout: LayoutOptions = Field(default_factory=LayoutOptions)
    content: ContentOptions = Field(default_factory=ContentOptions)
    branding: BrandingOptions = Field(default_factory=BrandingOptions)


# =============================================================================
# TEMPLATE
# =============================================================================

class Template(BaseModel):
    """A concrete, editable document definition."""

    id: str = Field(default_factory=lambda: new_id("template"))
    name: str
    version: str = "1.0.0"
    template_schema: TemplateSchema = Field(default_factory=TemplateSchema, alias="schema")
    content: TemplateContent = Field(default_factory=TemplateContent)
    page_settings: PageSettings | None = Field(default_factory=PageSettings)
    metadata: TemplateMetadata = Field(default_factory=TemplateMetadata)
    customization: CustomizationOptions = Field(default_factory=CustomizationOptions)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("template_schema")
    @classmethod
    def _unique_names(cls, value: TemplateSchema) -> TemplateSchema:
        variable_names = [v.name for v in value.variables]
        duplicates = {n for n in variable_names if variable_names.count(n) > 1}
        if duplicates:
            raise ValueError(f"Duplicate variable names: {sorted(duplicates)}")
        section_ids = [s.id for s in value.sections]
        duplicates = {s for s in section_ids if section_ids.count(s) > 1}
        if duplicates:
            raise ValueError(f"Duplicate section ids: {sorted(duplicates)}")
        return value

    @property
    def styling(self) -> TemplateStyling:
        return self.template_schema.styling


# =============================================================================
# PATTERNS
# =============================================================================

class PatternStyling(BaseModel):
    """Color, font and spacing tokens published with a pattern."""

    model_config = ConfigDict(frozen=True)

    colors: dict[str, str]
    fonts: dict[str, str]
    spacing: dict[str, str]


class TemplatePattern(BaseModel):
    """A catalog entry that can instantiate a Template. Immutable once published."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: PatternCategory
    description: str = ""
    use_case: str = ""
    complexity: Complexity = "moderate"
    estimated_time: str = ""
    variables: tuple[TemplateVariable, ...] = ()
    sections: tuple[TemplateSection, ...] = ()
    styling: PatternStyling
    tags: tuple[str, ...] = ()
    preview: str | None = None


class CustomPattern(BaseModel):
    """A user-derived variant layered over a catalog pattern."""

    id: str = Field(default_factory=lambda: new_id("custom"))
    base_pattern_id: str
    name: str
    description: str = ""
    customizations: CustomizationOptions = Field(default_factory=CustomizationOptions)
    created_by: str
    is_public: bool = False
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class DeliverableType(str, Enum):
    PROPOSAL = "proposal"
    CONTRACT = "contract"
    INVOICE = "invoice"
    REPORT = "report"
    PRESENTATION = "presentation"
    CERTIFICATE = "certificate"


class ClientDeliverable(BaseModel):
    """Groups catalog patterns by deliverable type and industry."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: DeliverableType
    industry: str
    pattern_ids: tuple[str, ...]
    branding_required: bool = True
    content_variations: tuple[str, ...] = ()
    output_formats: tuple[str, ...] = ("pdf", "html")


# =============================================================================
# BRANDING
# =============================================================================

class BrandColorPalette(BaseModel):
    primary: str | None = None
    secondary: str | None = None
    accent: str | None = None
    neutral: str | None = None
    background: str | None = None
    text: str | None = None
    semantic: dict[str, str] = Field(default_factory=dict)

    @field_validator("primary", "secondary", "accent", "neutral", "background", "text")
    @classmethod
    def _check_color(cls, value: str | None) -> str | None:
        if value is not None and not is_valid_color(value):
            raise ValueError(f"invalid color '{value}'")
        return value

    @field_validator("semantic")
    @classmethod
    def _check_semantic(cls, value: dict[str, str]) -> dict[str, str]:
        bad = [k for k, v in value.items() if not is_valid_color(v)]
        if bad:
            raise ValueError(f"invalid semantic colors: {bad}")
        return value


class BrandTypography(BaseModel):
    heading_font: str | None = None
    body_font: str | None = None
    base_size_px: int | None = None


class BrandAssets(BaseModel):
    logo: str | None = None


class ClientBranding(BaseModel):
    """A tenant's visual identity, applied additively over template styling."""

    id: str
    name: str = ""
    color_palette: BrandColorPalette = Field(default_factory=BrandColorPalette)
    typography: BrandTypography = Field(default_factory=BrandTypography)
    spacing: dict[str, str] = Field(default_factory=dict)
    components: dict[str, Any] = Field(default_factory=dict)
    assets: BrandAssets = Field(default_factory=BrandAssets)


# =============================================================================
# COMPOSITION OUTPUT & USAGE
# =============================================================================

class CompiledContent(BaseModel):
    html: str
    css: str
    js: str = ""
    assets: list[str] = Field(default_factory=list)


class CompositionMetadata(BaseModel):
    composed_at: datetime = Field(default_factory=datetime.utcnow)
    render_time_ms: float = 0.0
    cache_key: str
    cache_hit: bool = False
    dependencies: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ComposedTemplate(BaseModel):
    """The materialized, render-ready document."""

    template: Template
    data: dict[str, Any]
    compiled_content: CompiledContent
    metadata: CompositionMetadata
    branding_id: str | None = None


class PatternUsage(BaseModel):
    """Usage and feedback signals for one pattern."""

    pattern_id: str
    usage_count: int = 0
    last_used: datetime | None = None
    average_rating: float = 0.0
    feedback_count: int = 0
    feedback: list[str] = Field(default_factory=list)


class PatternRecommendation(BaseModel):
    pattern: TemplatePattern
    score: float
    reasons: list[str] = Field(default_factory=list)
    usage: PatternUsage | None = None
