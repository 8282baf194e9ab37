"""
composer.py — Merges a Template with client data and branding.

Composition is a pure function of (template, data, branding): identical
inputs yield identical compiled HTML/CSS. The output cache is keyed on
(template id, template version, data hash, branding hash).
"""

import hashlib
import html
import json
import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from bs4 import BeautifulSoup, Comment

from docforge.engine import placeholders
from docforge.engine.brand_engine import apply_branding
from docforge.engine.cache import CacheConfig, InMemoryCache
from docforge.engine.stylesheet import generate_branding_css, generate_styling_css
from docforge.errors import CompositionError, CompositionErrorKind
from docforge.templates.schema import (
    ClientBranding,
    CompiledContent,
    ComposedTemplate,
    CompositionMetadata,
    Template,
    TemplateSection,
)

logger = logging.getLogger(__name__)


# =============================================================================
# HELPERS
# =============================================================================

def stable_hash(value: Any) -> str:
    """SHA-256 of the canonical JSON form of ``value``."""
    canonical = json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def compute_cache_key(template: Template, data: Mapping[str, Any], branding: Optional[ClientBranding]) -> str:
    branding_payload = branding.model_dump(mode="json") if branding else None
    parts = "|".join([
        template.id,
        template.version,
        stable_hash(dict(data)),
        stable_hash(branding_payload),
    ])
    return hashlib.sha256(parts.encode("utf-8")).hexdigest()[:32]


def ordered_sections(sections: List[TemplateSection]) -> List[TemplateSection]:
    """Ascending ``order``; sections without one keep their list position."""
    indexed = list(enumerate(sections))
    indexed.sort(key=lambda pair: (pair[1].order if pair[1].order is not None else pair[0], pair[0]))
    return [section for _, section in indexed]


def wrap_document(body: str, title: str, lang: str = "en") -> str:
    """The base HTML document shell shared by the library and the composer."""
    return f"""<!DOCTYPE html>
<html lang="{lang}">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
</head>
<body>
    <div class="document-container">
{body}
    </div>
</body>
</html>"""


BODY_SLOT = "<!-- docforge:body -->"


def template_shell(source: str, title: str) -> Optional[str]:
    """
    A template's own base HTML with its document container emptied.

    The container (or ``<body>``) content is replaced by ``BODY_SLOT`` and
    the ``<title>`` set to ``title``. Returns None when ``source`` has no
    container to fill.
    """
    if not source.strip():
        return None
    soup = BeautifulSoup(source, "html.parser")
    container = soup.find(class_="document-container") or soup.body
    if container is None:
        return None
    container.clear()
    container.append(Comment(" docforge:body "))
    if soup.title is not None:
        soup.title.string = title
    return str(soup)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_empty(value: Any) -> bool:
    """Blank, or an empty collection; never true for numbers or booleans."""
    return _is_blank(value) or (isinstance(value, (list, tuple, dict)) and not value)


# =============================================================================
# COMPOSER
# =============================================================================

class TemplateComposer:
    """
    Composes templates into render-ready documents.

    The composer is stateless apart from its output cache; it may be
    shared between threads.
    """

    def __init__(self, cache: Optional[InMemoryCache] = None, cache_ttl: int = 3600):
        self.cache = cache if cache is not None else InMemoryCache(CacheConfig(default_ttl=cache_ttl))

    def resolve_data(self, template: Template, data: Mapping[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
        """
        Apply declared defaults to caller data.

        Returns:
            (resolved data, names of required variables still missing)
        """
        resolved = dict(data)
        missing = []
        for variable in template.template_schema.variables:
            if _is_blank(data.get(variable.name)) and variable.default_value is not None:
                resolved[variable.name] = variable.default_value
            # an empty default only fills optional slots
            if variable.required and _is_empty(resolved.get(variable.name)):
                missing.append(variable.name)
        return resolved, missing

    def compose(
        self,
        template: Template,
        data: Optional[Mapping[str, Any]] = None,
        branding: Optional[ClientBranding] = None,
    ) -> ComposedTemplate:
        """
        Compose a template with data and optional branding.

        Raises:
            CompositionError: Listing every missing required variable, or
                naming a malformed block tag.
        """
        data = dict(data or {})
        started = time.perf_counter()

        resolved, missing = self.resolve_data(template, data)
        if missing:
            raise CompositionError(
                CompositionErrorKind.MISSING_REQUIRED_VARIABLE,
                missing_variables=missing,
                context={"template_id": template.id},
            )

        cache_key = compute_cache_key(template, data, branding)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug("Composition cache hit for %s (%s)", template.id, cache_key)
            compiled, dependencies, warnings = cached
            return self._build(template, data, branding, compiled, dependencies, warnings,
                               cache_key, started, cache_hit=True)

        sections = ordered_sections(template.template_schema.sections)
        warnings: List[str] = []
        rendered: List[str] = []
        for section in sections:
            undeclared = placeholders.referenced_names(section.content) - set(section.variables)
            if section.visibility_binding:
                undeclared.discard(section.visibility_binding)
            if undeclared:
                message = (
                    f"Section '{section.id}' references undeclared variables: "
                    + ", ".join(sorted(undeclared))
                )
                logger.warning(message)
                warnings.append(message)
            rendered.append(placeholders.render(section.content, resolved))

        title = placeholders.format_value(resolved.get("document_title") or template.name)
        body = "\n".join(rendered)
        shell = template_shell(template.content.html, title)
        if shell is None:
            html_out = wrap_document(body, html.escape(title))
        else:
            html_out = placeholders.render(shell, resolved).replace(BODY_SLOT, body, 1)

        styling = apply_branding(template.template_schema.styling, branding)
        css_parts = [template.content.css or generate_styling_css(styling, template.name)]
        if branding is not None:
            css_parts.append(f"/* Branding: {branding.id} */\n{generate_branding_css(styling)}")
        css_out = "\n".join(css_parts)

        js_out = placeholders.render(template.content.js, resolved) if template.content.js else ""

        compiled = CompiledContent(
            html=html_out,
            css=css_out,
            js=js_out,
            assets=list(template.content.assets),
        )
        dependencies = [f"template:{template.id}@{template.version}"]
        if template.metadata.pattern_id:
            dependencies.append(f"pattern:{template.metadata.pattern_id}")
        dependencies.extend(f"section:{s.id}" for s in sections)
        if branding is not None:
            dependencies.append(f"branding:{branding.id}")

        self.cache.set(cache_key, (compiled, dependencies, warnings))
        return self._build(template, data, branding, compiled, dependencies, warnings,
                           cache_key, started, cache_hit=False)

    def _build(
        self,
        template: Template,
        data: Dict[str, Any],
        branding: Optional[ClientBranding],
        compiled: CompiledContent,
        dependencies: List[str],
        warnings: List[str],
        cache_key: str,
        started: float,
        cache_hit: bool,
    ) -> ComposedTemplate:
        return ComposedTemplate(
            template=template,
            data=data,
            compiled_content=compiled.model_copy(deep=True),
            branding_id=branding.id if branding else None,
            metadata=CompositionMetadata(
                composed_at=datetime.utcnow(),
                render_time_ms=(time.perf_counter() - started) * 1000,
                cache_key=cache_key,
                cache_hit=cache_hit,
                dependencies=list(dependencies),
                warnings=list(warnings),
            ),
        )
