"""
html_export.py — HTML sub-pipeline.

Three output modes share one input, the composed document:

    standalone  full <html> document with meta, SEO and accessibility tags
    embedded    a <div> wrapper carrying a <style> block scoped to it
    fragment    the bare inner markup
"""

import html
import logging
import re
from typing import Optional

from bs4 import BeautifulSoup

from docforge.export.models import ExportOptions, HTMLExportResult
from docforge.templates.schema import ComposedTemplate

logger = logging.getLogger(__name__)


RESPONSIVE_CSS = """@media (max-width: 768px) {
    .document-container {
        max-width: 100%;
        padding: 20px;
    }
    h1 {
        font-size: 2rem;
    }
    h2 {
        font-size: 1.5rem;
    }
    table {
        display: block;
        overflow-x: auto;
    }
}

@media (max-width: 480px) {
    .document-container {
        padding: 12px;
    }
    h1 {
        font-size: 1.6rem;
    }
    h2 {
        font-size: 1.25rem;
    }
    th, td {
        padding: 6px;
    }
}

@media print {
    .document-container {
        max-width: none;
        padding: 0;
    }
    .skip-link, .no-print {
        display: none;
    }
    a {
        color: inherit;
        text-decoration: none;
    }
    section, .section {
        page-break-inside: avoid;
    }
}"""

ACCESSIBILITY_CSS = """.skip-link {
    position: absolute;
    left: -9999px;
}
.skip-link:focus {
    left: 8px;
    top: 8px;
}
a:focus, button:focus {
    outline: 2px solid currentColor;
    outline-offset: 2px;
}"""

LIGHT_THEME = """.document-container {
    background-color: #ffffff;
    color: #1f2937;
}"""

DARK_THEME = """.document-container {
    background-color: #111827;
    color: #f9fafb;
}
th {
    background-color: #374151;
}
td {
    border-bottom-color: #4b5563;
}"""


def theme_css(theme: Optional[str]) -> str:
    if theme == "light":
        return LIGHT_THEME
    if theme == "dark":
        return DARK_THEME
    if theme == "auto":
        indented = "\n".join(f"    {line}" if line else line for line in DARK_THEME.splitlines())
        return f"{LIGHT_THEME}\n\n@media (prefers-color-scheme: dark) {{\n{indented}\n}}"
    return ""


RAW_TEXT_RE = re.compile(r"(<(script|pre|textarea|style)\b[^>]*>)(.*?)(</\2\s*>)", re.IGNORECASE | re.DOTALL)


def minify_html(markup: str) -> str:
    """
    Whitespace collapsing only. Idempotent.

    Runs of whitespace become one space. ``script``, ``pre`` and
    ``textarea`` bodies are kept verbatim; ``style`` bodies go through
    ``minify_css``.
    """
    parts = []
    last = 0
    for match in RAW_TEXT_RE.finditer(markup):
        parts.append(re.sub(r"\s+", " ", markup[last:match.start()]))
        open_tag, tag, inner, close_tag = match.groups()
        if tag.lower() == "style":
            inner = minify_css(inner)
        parts.append(f"{open_tag}{inner}{close_tag}")
        last = match.end()
    parts.append(re.sub(r"\s+", " ", markup[last:]))
    return "".join(parts).strip()


def minify_css(css: str) -> str:
    """Whitespace collapsing only. Idempotent."""
    css = re.sub(r"\s+", " ", css)
    css = re.sub(r"\s*([{};,])\s*", r"\1", css)
    return css.strip()


def scope_css(css: str, scope: str) -> str:
    """Prefix every selector with ``scope``; ``:root``, ``html`` and ``body``
    map onto the scope itself. Nested @media/@supports blocks are scoped
    recursively, other at-rules are kept as they are.
    """
    css = re.sub(r"/\*.*?\*/", "", css, flags=re.DOTALL)
    out = []
    i = 0
    while i < len(css):
        brace = css.find("{", i)
        if brace == -1:
            break
        prelude = css[i:brace].strip()
        depth = 1
        j = brace + 1
        while j < len(css) and depth:
            if css[j] == "{":
                depth += 1
            elif css[j] == "}":
                depth -= 1
            j += 1
        body = css[brace + 1:j - 1]
        if prelude.startswith(("@media", "@supports")):
            out.append(f"{prelude} {{\n{scope_css(body, scope)}\n}}")
        elif prelude.startswith("@"):
            out.append(f"{prelude} {{{body}}}")
        else:
            selectors = []
            for selector in prelude.split(","):
                selector = selector.strip()
                if selector in (":root", "html", "body"):
                    selectors.append(scope)
                else:
                    selectors.append(f"{scope} {selector}")
            out.append(f"{', '.join(selectors)} {{{body}}}")
        i = j
    return "\n".join(out)


class HTMLExportService:
    """Renders a composed document to HTML in one of three modes."""

    def export_to_html(self, composed: ComposedTemplate, options: ExportOptions) -> HTMLExportResult:
        html_options = options.html
        optimization = options.optimization
        customization = options.client_customization

        soup = BeautifulSoup(composed.compiled_content.html, "html.parser")
        container = soup.find(class_="document-container")
        inner = container.decode_contents() if container is not None else (
            soup.body.decode_contents() if soup.body is not None else str(soup)
        )
        title = html_options.title or (soup.title.get_text(strip=True) if soup.title else "") or composed.template.name

        css_parts = [composed.compiled_content.css]
        if optimization.responsive:
            css_parts.append(RESPONSIVE_CSS)
        if optimization.accessibility:
            css_parts.append(ACCESSIBILITY_CSS)
        if customization.theme:
            css_parts.append(theme_css(customization.theme))
        if customization.custom_css:
            css_parts.append(customization.custom_css)
        css = "\n\n".join(part for part in css_parts if part)

        js_parts = [composed.compiled_content.js, customization.custom_js or ""]
        js = "\n".join(part for part in js_parts if part)

        if html_options.format == "fragment":
            content = inner
        elif html_options.format == "embedded":
            content = self._embedded(composed, inner, css, js, options)
        else:
            content = self._standalone(composed, inner, css, js, title, options)

        if optimization.minify:
            content = minify_html(content)
            css = minify_css(css)

        logger.debug("HTML export (%s) for %s: %d bytes", html_options.format, composed.template.id, len(content))
        return HTMLExportResult(
            content=content,
            size=len(content.encode("utf-8")),
            css=css,
            metadata={
                "mode": html_options.format,
                "title": title,
                "language": html_options.language,
                "theme": customization.theme,
                "responsive": optimization.responsive,
                "minified": optimization.minify,
            },
        )

    def _embedded(self, composed: ComposedTemplate, inner: str, css: str, js: str, options: ExportOptions) -> str:
        scope_id = f"docforge-{composed.template.id}"
        parts = [
            f'<div class="docforge-embed" id="{scope_id}">',
            f"<style>\n{scope_css(css, '#' + scope_id)}\n</style>",
            f'<div class="document-container">\n{inner}\n</div>',
        ]
        if options.html.inline_js and js:
            parts.append(f"<script>\n{js}\n</script>")
        parts.append("</div>")
        return "\n".join(parts)

    def _standalone(
        self,
        composed: ComposedTemplate,
        inner: str,
        css: str,
        js: str,
        title: str,
        options: ExportOptions,
    ) -> str:
        html_options = options.html
        optimization = options.optimization
        head = [
            '<meta charset="UTF-8">',
            '<meta name="viewport" content="width=device-width, initial-scale=1.0">',
            f"<title>{html.escape(title)}</title>",
            '<meta name="generator" content="DocForge">',
        ]
        if optimization.seo:
            description = html_options.description or composed.template.metadata.description
            keywords = html_options.keywords or composed.template.metadata.tags
            if description:
                head.append(f'<meta name="description" content="{html.escape(description)}">')
            if keywords:
                head.append(f'<meta name="keywords" content="{html.escape(", ".join(keywords))}">')
            head.append(f'<meta property="og:title" content="{html.escape(title)}">')
            if description:
                head.append(f'<meta property="og:description" content="{html.escape(description)}">')
            head.append('<meta property="og:type" content="article">')

        if html_options.inline_css:
            head.append(f"<style>\n{css}\n</style>")
        else:
            head.append('<link rel="stylesheet" href="styles.css">')

        if html_options.include_analytics and html_options.analytics_id:
            head.append(
                "<script>\n"
                "window.dataLayer = window.dataLayer || [];\n"
                f"window.dataLayer.push({{'event': 'document_view', 'analytics_id': '{html.escape(html_options.analytics_id)}'}});\n"
                "</script>"
            )

        body = []
        if optimization.accessibility:
            body.append('<a class="skip-link" href="#main-content">Skip to content</a>')
            body.append(f'<main id="main-content" class="document-container" role="main">\n{inner}\n</main>')
        else:
            body.append(f'<div class="document-container">\n{inner}\n</div>')
        if html_options.inline_js and js:
            body.append(f"<script>\n{js}\n</script>")

        head_markup = "\n".join(f"    {line}" for line in head)
        return (
            "<!DOCTYPE html>\n"
            f'<html lang="{html.escape(html_options.language)}">\n'
            f"<head>\n{head_markup}\n</head>\n"
            "<body>\n" + "\n".join(body) + "\n</body>\n</html>"
        )
