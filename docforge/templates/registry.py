"""
registry.py — Pattern discovery, usage tracking and recommendations.

All mutable registry state lives in a RegistryState object. Writes to
the usage table go through a per-pattern lock so concurrent tracking and
feedback on the same pattern never lose updates; reads used for scoring
may be slightly stale.
"""

import logging
import string
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from docforge.engine.composer import TemplateComposer
from docforge.engine.customization import CustomizationService, OptionsInput, coerce_options
from docforge.errors import FieldError, PatternNotFoundError, ValidationError
from docforge.templates.pattern_library import PatternLibrary
from docforge.templates.schema import (
    ClientBranding,
    ComposedTemplate,
    CustomPattern,
    PatternRecommendation,
    PatternUsage,
    Template,
    TemplatePattern,
)
from docforge.templates.store import CustomPatternStore

logger = logging.getLogger(__name__)

# Recommendation weights
USAGE_WEIGHT_CAP = 0.3
RATING_WEIGHT_CAP = 0.2
CATEGORY_MATCH = 0.3
COMPLEXITY_MATCH = 0.2
INDUSTRY_MATCH = 0.3
PROJECT_TYPE_MATCH = 0.2
MIN_RECOMMENDATION_SCORE = 0.3
MAX_RECOMMENDATIONS = 10

# Similarity weights
SAME_CATEGORY = 0.4
SAME_COMPLEXITY = 0.2
USE_CASE_OVERLAP = 0.4

MAX_RATING = 5.0


@dataclass
class SearchFilters:
    """Filters applied as a logical AND over text search results."""

    category: Optional[str] = None
    complexity: Optional[str] = None
    use_case: Optional[str] = None
    tags: list[str] = field(default_factory=list)


@dataclass
class UserPreferences:
    preferred_categories: list[str] = field(default_factory=list)
    preferred_complexity: Optional[str] = None
    industries: list[str] = field(default_factory=list)


@dataclass
class RecommendationContext:
    industry: Optional[str] = None
    project_type: Optional[str] = None


class KeyedLocks:
    """Hands out one lock per key."""

    def __init__(self):
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def get(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock


class RegistryState:
    """Process-wide mutable registry state. Starts empty."""

    def __init__(self, custom_patterns: Optional[CustomPatternStore] = None):
        self.usage: dict[str, PatternUsage] = {}
        self.preferences: dict[str, UserPreferences] = {}
        self.custom_patterns = custom_patterns or CustomPatternStore()
        self.locks = KeyedLocks()


def use_case_words(text: str) -> set[str]:
    """Lower-cased whitespace tokens with surrounding punctuation removed."""
    words = (w.strip(string.punctuation) for w in text.lower().split())
    return {w for w in words if w}


def similarity_score(a: TemplatePattern, b: TemplatePattern) -> float:
    score = 0.0
    if a.category == b.category:
        score += SAME_CATEGORY
    if a.complexity == b.complexity:
        score += SAME_COMPLEXITY
    words_a = use_case_words(a.use_case)
    words_b = use_case_words(b.use_case)
    union = words_a | words_b
    if union:
        score += USE_CASE_OVERLAP * len(words_a & words_b) / len(union)
    return round(score, 6)


class PatternRegistry:
    """
    Front door for pattern discovery and instantiation.

    Combines the read-only PatternLibrary with custom patterns, usage
    statistics and per-user preferences.
    """

    def __init__(
        self,
        library: Optional[PatternLibrary] = None,
        composer: Optional[TemplateComposer] = None,
        customization: Optional[CustomizationService] = None,
        state: Optional[RegistryState] = None,
    ):
        self.library = library or PatternLibrary()
        self.composer = composer or TemplateComposer()
        self.customization = customization or self.library.customization
        self.state = state or RegistryState()

    # ================================================================ search

    def get_pattern(self, pattern_id: str) -> TemplatePattern:
        pattern = self.library.get_pattern(pattern_id)
        if pattern is None:
            raise PatternNotFoundError(pattern_id)
        return pattern

    def search_patterns(
        self,
        query: str = "",
        filters: Optional[Union[SearchFilters, Mapping[str, Any]]] = None,
    ) -> list[TemplatePattern]:
        """Text search, then filters, then sort by usage count (descending, stable)."""
        if isinstance(filters, Mapping):
            filters = SearchFilters(**filters)
        results = self.library.search_patterns(query or "")

        if filters is not None:
            if filters.category:
                results = [p for p in results if p.category == filters.category]
            if filters.complexity:
                results = [p for p in results if p.complexity == filters.complexity]
            if filters.use_case:
                needle = filters.use_case.lower()
                results = [p for p in results if needle in p.use_case.lower()]
            if filters.tags:
                results = [p for p in results if all(tag in p.tags for tag in filters.tags)]

        usage = self.state.usage
        return sorted(results, key=lambda p: -(usage[p.id].usage_count if p.id in usage else 0))

    def get_similar_patterns(self, pattern_id: str, limit: int = 5) -> list[PatternRecommendation]:
        target = self.get_pattern(pattern_id)
        scored = []
        for candidate in self.library.get_all_patterns():
            if candidate.id == target.id:
                continue
            score = similarity_score(target, candidate)
            if score <= 0:
                continue
            reasons = []
            if candidate.category == target.category:
                reasons.append(f"Same category ({candidate.category})")
            if candidate.complexity == target.complexity:
                reasons.append(f"Same complexity ({candidate.complexity})")
            if use_case_words(candidate.use_case) & use_case_words(target.use_case):
                reasons.append("Overlapping use case")
            scored.append(PatternRecommendation(pattern=candidate, score=score, reasons=reasons))
        scored.sort(key=lambda r: -r.score)
        return scored[:limit]

    # ======================================================= recommendations

    def set_user_preferences(
        self,
        user_id: str,
        preferred_categories: Optional[list[str]] = None,
        preferred_complexity: Optional[str] = None,
        industries: Optional[list[str]] = None,
    ) -> UserPreferences:
        preferences = UserPreferences(
            preferred_categories=list(preferred_categories or []),
            preferred_complexity=preferred_complexity,
            industries=list(industries or []),
        )
        self.state.preferences[user_id] = preferences
        return preferences

    def get_user_preferences(self, user_id: str) -> UserPreferences:
        return self.state.preferences.get(user_id) or UserPreferences()

    def score_pattern(
        self,
        pattern: TemplatePattern,
        preferences: UserPreferences,
        context: Optional[RecommendationContext] = None,
    ) -> tuple[float, list[str]]:
        """Sum of independently capped contributions, clamped to 1.0."""
        score = 0.0
        reasons: list[str] = []
        usage = self.state.usage.get(pattern.id)

        if usage is not None and usage.usage_count:
            score += min(usage.usage_count / 100, USAGE_WEIGHT_CAP)
            reasons.append(f"Used {usage.usage_count} times")
        if usage is not None and usage.average_rating:
            score += min(usage.average_rating / MAX_RATING * RATING_WEIGHT_CAP, RATING_WEIGHT_CAP)
            reasons.append(f"Rated {usage.average_rating:.1f}/5")
        if pattern.category in preferences.preferred_categories:
            score += CATEGORY_MATCH
            reasons.append(f"Matches preferred category ({pattern.category})")
        if preferences.preferred_complexity and pattern.complexity == preferences.preferred_complexity:
            score += COMPLEXITY_MATCH
            reasons.append(f"Matches preferred complexity ({pattern.complexity})")
        if context is not None:
            if context.industry and context.industry.lower() in pattern.use_case.lower():
                score += INDUSTRY_MATCH
                reasons.append(f"Suited to {context.industry}")
            if context.project_type and context.project_type.lower() in pattern.name.lower():
                score += PROJECT_TYPE_MATCH
                reasons.append(f"Fits {context.project_type} projects")

        return min(score, 1.0), reasons

    def get_recommended_patterns(
        self,
        user_id: str,
        context: Optional[Union[RecommendationContext, Mapping[str, Any]]] = None,
    ) -> list[PatternRecommendation]:
        if isinstance(context, Mapping):
            context = RecommendationContext(**context)
        preferences = self.get_user_preferences(user_id)

        recommendations = []
        for pattern in self.library.get_all_patterns():
            score, reasons = self.score_pattern(pattern, preferences, context)
            if score <= MIN_RECOMMENDATION_SCORE:
                continue
            usage = self.state.usage.get(pattern.id)
            recommendations.append(PatternRecommendation(
                pattern=pattern,
                score=round(score, 6),
                reasons=reasons,
                usage=usage.model_copy() if usage else None,
            ))

        recommendations.sort(key=lambda r: -r.score)
        return recommendations[:MAX_RECOMMENDATIONS]

    # ================================================================= usage

    def _require_known(self, pattern_id: str) -> None:
        if self.library.has_pattern(pattern_id):
            return
        if self.state.custom_patterns.get(pattern_id) is None:
            raise PatternNotFoundError(pattern_id)

    def track_pattern_usage(self, pattern_id: str) -> PatternUsage:
        """Increment the usage counter for a catalog or custom pattern."""
        self._require_known(pattern_id)
        with self.state.locks.get(pattern_id):
            usage = self.state.usage.get(pattern_id) or PatternUsage(pattern_id=pattern_id)
            usage = usage.model_copy(update={
                "usage_count": usage.usage_count + 1,
                "last_used": datetime.utcnow(),
            })
            self.state.usage[pattern_id] = usage
        return usage

    def record_pattern_feedback(self, pattern_id: str, rating: float, feedback: Optional[str] = None) -> PatternUsage:
        """
        Fold a rating into the running average.

        Raises:
            ValidationError: If ``rating`` is outside [0, 5].
        """
        if rating < 0 or rating > MAX_RATING:
            raise ValidationError(FieldError("rating", f"must be between 0 and {MAX_RATING:g}, got {rating}"))
        self._require_known(pattern_id)

        with self.state.locks.get(pattern_id):
            usage = self.state.usage.get(pattern_id) or PatternUsage(pattern_id=pattern_id)
            count = usage.feedback_count
            average = (usage.average_rating * count + rating) / (count + 1)
            comments = list(usage.feedback)
            if feedback:
                comments.append(feedback)
            usage = usage.model_copy(update={
                "average_rating": min(max(average, 0.0), MAX_RATING),
                "feedback_count": count + 1,
                "feedback": comments,
            })
            self.state.usage[pattern_id] = usage
        return usage

    def get_pattern_usage(self, pattern_id: str) -> PatternUsage:
        usage = self.state.usage.get(pattern_id)
        return usage.model_copy() if usage else PatternUsage(pattern_id=pattern_id)

    def get_popular_patterns(self, limit: int = 5) -> list[TemplatePattern]:
        used = [p for p in self.library.get_all_patterns() if p.id in self.state.usage]
        used.sort(key=lambda p: -self.state.usage[p.id].usage_count)
        return used[:limit]

    # ======================================================= custom patterns

    def create_custom_pattern(
        self,
        base_pattern_id: str,
        name: str,
        customizations: Optional[OptionsInput] = None,
        created_by: str = "anonymous",
        is_public: bool = False,
        description: str = "",
        tags: Optional[list[str]] = None,
    ) -> CustomPattern:
        """
        Save a variant of a catalog pattern.

        Raises:
            PatternNotFoundError: If the base pattern does not exist.
            ValidationError: If the base is itself a custom pattern, or the
                customizations are invalid.
        """
        if not self.library.has_pattern(base_pattern_id):
            if self.state.custom_patterns.get(base_pattern_id) is not None:
                raise ValidationError(FieldError(
                    "base_pattern_id",
                    "A custom pattern must be based on a catalog pattern, not another custom pattern",
                ))
            raise PatternNotFoundError(base_pattern_id)

        options = coerce_options(customizations)
        base_template = self.library.create_template_from_pattern(base_pattern_id)
        report = self.customization.validate_customization(base_template, options)
        if not report.valid:
            raise ValidationError(report.errors)

        pattern = CustomPattern(
            base_pattern_id=base_pattern_id,
            name=name,
            description=description,
            customizations=options,
            created_by=created_by,
            is_public=is_public,
            tags=list(tags or []),
        )
        self.state.custom_patterns.save(pattern)
        logger.info("Created custom pattern %s from %s", pattern.id, base_pattern_id)
        return pattern

    def get_custom_pattern(self, pattern_id: str) -> CustomPattern:
        pattern = self.state.custom_patterns.get(pattern_id)
        if pattern is None:
            raise PatternNotFoundError(pattern_id)
        return pattern

    def get_custom_patterns(self, user_id: Optional[str] = None, include_public: bool = True) -> list[CustomPattern]:
        return self.state.custom_patterns.list_for_user(user_id, include_public=include_public)

    # =========================================================== generation

    def get_template_from_pattern(
        self,
        pattern_id: str,
        customizations: Optional[OptionsInput] = None,
    ) -> Template:
        """Instantiate a catalog or custom pattern, then layer ``customizations``."""
        if self.library.has_pattern(pattern_id):
            template = self.library.create_template_from_pattern(pattern_id)
        else:
            template = self._materialize_custom(self.get_custom_pattern(pattern_id))

        if customizations is not None:
            template = self.customization.customize_template(template, customizations)
        return template

    def generate_template_from_pattern(
        self,
        pattern_id: str,
        data: Optional[Mapping[str, Any]] = None,
        customizations: Optional[OptionsInput] = None,
        branding: Optional[ClientBranding] = None,
    ) -> ComposedTemplate:
        """
        Instantiate, track usage and compose in one step.

        Raises:
            PatternNotFoundError: Unknown pattern id.
            CompositionError: Missing required variables or malformed markup.
        """
        template = self.get_template_from_pattern(pattern_id, customizations)
        self.track_pattern_usage(pattern_id)
        return self.composer.compose(template, data or {}, branding)

    def _materialize_custom(self, custom: CustomPattern) -> Template:
        if not self.library.has_pattern(custom.base_pattern_id):
            raise ValidationError(FieldError(
                "base_pattern_id",
                f"Custom pattern '{custom.id}' has non-catalog base '{custom.base_pattern_id}'",
            ))
        template = self.library.create_template_from_pattern(custom.base_pattern_id)
        template = self.customization.customize_template(template, custom.customizations)
        metadata = template.metadata.model_copy(update={
            "description": custom.description or template.metadata.description,
            "tags": [*template.metadata.tags, f"custom:{custom.id}", *custom.tags],
        })
        return template.model_copy(update={"name": custom.name, "metadata": metadata})
