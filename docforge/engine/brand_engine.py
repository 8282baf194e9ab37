"""
brand_engine.py — Color management and client branding overlay.

Provides:
- Color syntax validation (hex, rgb(), rgba())
- Color conversion and WCAG contrast helpers
- Additive overlay of a ClientBranding profile onto template styling
"""

from __future__ import annotations

import colorsys
import re
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from docforge.templates.schema import ClientBranding, TemplateStyling


# =============================================================================
# COLOR SYNTAX
# =============================================================================

HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
RGB_COLOR_RE = re.compile(
    r"^rgb\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*\)$"
)
RGBA_COLOR_RE = re.compile(
    r"^rgba\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(0|1|0?\.\d+|1\.0+)\s*\)$"
)

# WCAG AA minimum for normal body text
MIN_CONTRAST_RATIO = 4.5


def is_valid_color(value: str) -> bool:
    """Return True for 3/6-digit hex, rgb() or rgba() colors."""
    if not isinstance(value, str):
        return False
    value = value.strip()
    if HEX_COLOR_RE.match(value):
        return True
    for pattern in (RGB_COLOR_RE, RGBA_COLOR_RE):
        match = pattern.match(value)
        if match:
            return all(0 <= int(c) <= 255 for c in match.groups()[:3])
    return False


def normalize_color(value: str) -> str:
    """Normalize a color to upper-case 6-digit hex where possible.

    rgba() colors keep their alpha and are returned lower-cased unchanged.
    """
    value = value.strip()
    if HEX_COLOR_RE.match(value):
        digits = value[1:]
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        return f"#{digits.upper()}"
    match = RGB_COLOR_RE.match(value)
    if match:
        r, g, b = (int(c) for c in match.groups())
        return rgb_to_hex(r, g, b)
    return value.lower()


# =============================================================================
# COLOR UTILITIES
# =============================================================================

def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color to RGB tuple."""
    hex_color = normalize_color(hex_color).lstrip('#')
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert RGB values to hex color string."""
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_hsl(hex_color: str) -> Tuple[float, float, float]:
    """Convert hex color to HSL (hue, saturation, lightness)."""
    r, g, b = hex_to_rgb(hex_color)
    r, g, b = r / 255.0, g / 255.0, b / 255.0
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    return h * 360, s, l


def get_luminance(color: str) -> float:
    """Calculate relative luminance of a color (0-1)."""
    r, g, b = _to_rgb(color)

    def linearize(c):
        c = c / 255.0
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    return 0.2126 * linearize(r) + 0.7152 * linearize(g) + 0.0722 * linearize(b)


def contrast_ratio(foreground: str, background: str) -> float:
    """WCAG contrast ratio between two colors (1.0 - 21.0)."""
    fg = get_luminance(foreground)
    bg = get_luminance(background)
    return (max(fg, bg) + 0.05) / (min(fg, bg) + 0.05)


def get_contrast_text_color(bg_color: str) -> str:
    """Return black or white text color based on background luminance."""
    luminance = get_luminance(bg_color)
    return "#FFFFFF" if luminance < 0.5 else "#333333"


def _to_rgb(color: str) -> Tuple[int, int, int]:
    color = color.strip()
    for pattern in (RGB_COLOR_RE, RGBA_COLOR_RE):
        match = pattern.match(color)
        if match:
            return tuple(int(c) for c in match.groups()[:3])
    return hex_to_rgb(color)


# =============================================================================
# PALETTE VALIDATION
# =============================================================================

def validate_color_map(colors: Dict[str, Optional[str]], prefix: str = "colors") -> List[Tuple[str, str]]:
    """
    Check color syntax for every non-empty entry.

    Returns (field, message) pairs for invalid values.
    """
    problems = []
    for name, value in colors.items():
        if value is None:
            continue
        if not is_valid_color(value):
            problems.append((
                f"{prefix}.{name}",
                f"'{value}' is not a valid color; use #RRGGBB, #RGB, rgb(r, g, b) or rgba(r, g, b, a)",
            ))
    return problems


def validate_palette_contrast(colors: Dict[str, Optional[str]]) -> List[str]:
    """
    Validate that palette colors have sufficient contrast for accessibility.

    Returns list of warnings for low-contrast combinations.
    """
    warnings = []

    primary = colors.get("primary")
    background = colors.get("background")
    text = colors.get("text")

    if primary and background and is_valid_color(primary) and is_valid_color(background):
        if normalize_color(primary) == normalize_color(background):
            warnings.append(
                "colors.primary is identical to colors.background; headings and accents will be invisible"
            )

    if text and background and is_valid_color(text) and is_valid_color(background):
        ratio = contrast_ratio(text, background)
        if ratio < MIN_CONTRAST_RATIO:
            warnings.append(f"Low contrast between colors.text and colors.background: {ratio:.2f}:1")

    return warnings


# =============================================================================
# BRANDING OVERLAY
# =============================================================================

def branding_color_tokens(branding: ClientBranding) -> Dict[str, str]:
    """Flatten a branding palette into style token names."""
    palette = branding.color_palette
    tokens = {}
    for name in ("primary", "secondary", "accent", "neutral", "background", "text"):
        value = getattr(palette, name)
        if value:
            tokens[name] = value
    for name, value in palette.semantic.items():
        if value:
            tokens[name] = value
    return tokens


def apply_branding(styling: TemplateStyling, branding: Optional[ClientBranding]) -> TemplateStyling:
    """
    Overlay branding on template styling.

    Branding keys overwrite matching tokens; tokens the branding does not
    name are retained from the template.
    """
    if branding is None:
        return styling

    colors = dict(styling.colors)
    colors.update(branding_color_tokens(branding))

    font_update = {}
    typography = branding.typography
    if typography.heading_font:
        font_update["heading"] = typography.heading_font
    if typography.body_font:
        font_update["body"] = typography.body_font
    if typography.base_size_px:
        font_update["size_px"] = typography.base_size_px

    spacing = dict(styling.spacing)
    spacing.update({k: v for k, v in branding.spacing.items() if v})

    return styling.model_copy(update={
        "colors": colors,
        "fonts": styling.fonts.model_copy(update=font_update),
        "spacing": spacing,
    })
