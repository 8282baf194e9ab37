"""
stylesheet.py — CSS generation shared by the pattern library and the
customization service.

Both code paths build ``Template.content.css`` through
``build_template_css`` so that creating a template with customizations
and customizing it afterwards produce identical stylesheets.
"""

from typing import List

from docforge.templates.schema import CustomizationOptions, TemplateStyling


# =============================================================================
# FIXED MAPPING TABLES
# =============================================================================

FONT_SIZES = {
    "small": "14px",
    "medium": "16px",
    "large": "18px",
}

SPACING_SCALE = {
    "tight": {"section": "1rem", "paragraph": "0.5rem"},
    "normal": {"section": "2rem", "paragraph": "1rem"},
    "loose": {"section": "3rem", "paragraph": "1.5rem"},
}

MARGIN_SCALE = {
    "narrow": {"in": "0.5in", "mm": "12.7mm"},
    "normal": {"in": "1in", "mm": "25.4mm"},
    "wide": {"in": "1.5in", "mm": "38.1mm"},
}

# Page names accepted by the CSS @page size descriptor
PAGE_SIZE_KEYWORDS = {"A4": "A4", "A3": "A3", "Letter": "letter", "Legal": "legal"}


# =============================================================================
# TEMPLATE STYLESHEET
# =============================================================================

def color_token(name: str, fallback: str) -> str:
    """Reference to a ``--color-<name>`` custom property with a literal fallback."""
    return f"var(--color-{name}, {fallback})"


def generate_styling_css(styling: TemplateStyling, title: str = "Document") -> str:
    """
    Base stylesheet derived from color, font and spacing tokens.

    Color rules go through custom properties, so a later ``:root`` block
    (customization or branding overlay) recolors the whole document.
    """
    colors = styling.colors
    fonts = styling.fonts
    section = styling.spacing.get("section", "2rem")
    paragraph = styling.spacing.get("paragraph", "1rem")
    primary = color_token("primary", colors.get("primary", "#2563eb"))
    accent = color_token("accent", colors.get("accent", colors.get("primary", "#2563eb")))
    secondary = color_token("secondary", colors.get("secondary", "#64748b"))
    text = color_token("text", colors.get("text", "#333333"))
    background = color_token("background", colors.get("background", "#ffffff"))
    border = color_token("border", colors.get("border", "#dddddd"))

    return f"""/* {title} Styling */
.document-container {{
    max-width: {styling.layout.max_width};
    margin: 0 auto;
    padding: 40px;
    font-family: {fonts.body};
    font-size: {fonts.size_px}px;
    line-height: {fonts.line_height};
    color: {text};
    background-color: {background};
}}

h1, h2, h3, h4, h5, h6 {{
    font-family: {fonts.heading};
    color: {primary};
    margin-bottom: {paragraph};
}}

h1 {{
    font-size: 2.5rem;
    margin-bottom: {section};
    border-bottom: 3px solid {primary};
    padding-bottom: 0.5rem;
}}

h2 {{
    font-size: 2rem;
    margin-top: {section};
    margin-bottom: {paragraph};
}}

h3 {{
    font-size: 1.5rem;
    color: {secondary};
}}

p {{
    margin-bottom: {paragraph};
}}

section, .section {{
    margin-bottom: {section};
}}

table {{
    width: 100%;
    border-collapse: collapse;
    margin: {paragraph} 0;
}}

th, td {{
    padding: 12px;
    text-align: left;
    border-bottom: 1px solid {border};
}}

th {{
    background-color: {primary};
    color: white;
    font-weight: 600;
}}

.signature-line {{
    border-bottom: 1px solid {text};
    width: 200px;
    margin: 10px 0;
}}

.highlight {{
    background-color: color-mix(in srgb, {accent} 12%, transparent);
    padding: 2px 4px;
    border-radius: 3px;
}}
"""


# =============================================================================
# CUSTOM CSS
# =============================================================================

def generate_custom_css(options: CustomizationOptions, page_unit: str = "in") -> str:
    """
    Emit CSS for an option overlay.

    Only blocks for options that are actually set are emitted, in a fixed
    order: color properties, typography, spacing, page rule, content toggles.
    """
    blocks: List[str] = []

    colors = {
        name: value
        for name, value in options.colors.model_dump().items()
        if value is not None
    }
    if colors:
        lines = [f"    --color-{name}: {value};" for name, value in colors.items()]
        blocks.append(":root {\n" + "\n".join(lines) + "\n}")

    typography = options.typography
    rules = []
    if typography.font_family:
        rules.append(f"    font-family: {typography.font_family};")
    if typography.font_size in FONT_SIZES:
        rules.append(f"    font-size: {FONT_SIZES[typography.font_size]};")
    if typography.line_height is not None:
        rules.append(f"    line-height: {typography.line_height};")
    if rules:
        blocks.append("body, .document-container {\n" + "\n".join(rules) + "\n}")
    if typography.heading_font:
        blocks.append(f"h1, h2, h3, h4, h5, h6 {{\n    font-family: {typography.heading_font};\n}}")

    spacing_key = options.spacing.section_spacing
    if spacing_key is None and options.spacing.compact:
        spacing_key = "tight"
    if spacing_key in SPACING_SCALE:
        scale = SPACING_SCALE[spacing_key]
        blocks.append(
            f"section, .section {{\n    margin-bottom: {scale['section']};\n}}\n"
            f"p {{\n    margin-bottom: {scale['paragraph']};\n}}"
        )

    layout = options.layout
    page_rules = []
    if layout.page_size in PAGE_SIZE_KEYWORDS:
        size = PAGE_SIZE_KEYWORDS[layout.page_size]
        if layout.orientation in ("portrait", "landscape"):
            size = f"{size} {layout.orientation}"
        page_rules.append(f"    size: {size};")
    elif layout.orientation in ("portrait", "landscape"):
        page_rules.append(f"    size: {layout.orientation};")
    if layout.margins in MARGIN_SCALE:
        unit = "mm" if page_unit == "mm" else "in"
        page_rules.append(f"    margin: {MARGIN_SCALE[layout.margins][unit]};")
    if page_rules:
        blocks.append("@page {\n" + "\n".join(page_rules) + "\n}")
    if layout.columns and layout.columns > 1:
        blocks.append(f".document-container {{\n    column-count: {layout.columns};\n}}")

    content = options.content
    if content.show_header is False:
        blocks.append(".document-header {\n    display: none;\n}")
    if content.show_footer is False:
        blocks.append(".document-footer {\n    display: none;\n}")

    return "\n\n".join(blocks)


def build_template_css(styling: TemplateStyling, options: CustomizationOptions, title: str, page_unit: str = "in") -> str:
    """Full ``content.css`` for a template: base stylesheet plus overlay CSS."""
    custom = generate_custom_css(options, page_unit=page_unit)
    base = generate_styling_css(styling, title)
    if not custom:
        return base
    return f"{base}\n/* Customizations */\n{custom}\n"


def generate_branding_css(styling: TemplateStyling) -> str:
    """Custom properties and font rules for the effective (branded) styling."""
    lines = [f"    --color-{name}: {value};" for name, value in sorted(styling.colors.items())]
    return (
        ":root {\n" + "\n".join(lines) + "\n}\n"
        f"body {{\n    font-family: {styling.fonts.body};\n}}\n"
        f"h1, h2, h3, h4, h5, h6 {{\n    font-family: {styling.fonts.heading};\n}}"
    )
