"""Tests for the pattern registry: search, usage, recommendations, custom patterns."""

import threading

import pytest

from docforge.errors import CompositionError, PatternNotFoundError, ValidationError
from docforge.templates.registry import (
    PatternRegistry,
    RecommendationContext,
    RegistryState,
    SearchFilters,
    similarity_score,
)


class TestSearch:
    """search_patterns."""

    def test_filters_combine(self, registry):
        """Filters apply as a logical AND."""
        results = registry.search_patterns("", SearchFilters(category="business", complexity="simple"))
        assert [p.id for p in results] == ["meeting-minutes"]

    def test_tags_must_all_match(self, registry):
        """Every requested tag must be present."""
        assert [p.id for p in registry.search_patterns("", {"tags": ["legal", "contract"]})] == ["service-agreement"]
        assert registry.search_patterns("", {"tags": ["legal", "api"]}) == []

    def test_use_case_filter(self, registry):
        results = registry.search_patterns("", {"use_case": "training"})
        assert [p.id for p in results] == ["course-outline"]

    def test_sorted_by_usage(self, registry):
        """More-used patterns come first; ties keep catalog order."""
        for _ in range(3):
            registry.track_pattern_usage("case-study")
        registry.track_pattern_usage("meeting-minutes")
        ids = [p.id for p in registry.search_patterns()]
        assert ids[:3] == ["case-study", "meeting-minutes", "business-proposal"]

    def test_get_pattern_unknown(self, registry):
        with pytest.raises(PatternNotFoundError):
            registry.get_pattern("nope")


class TestSimilarity:
    """get_similar_patterns."""

    def test_excludes_self(self, registry):
        """The target never appears among its similar patterns."""
        similar = registry.get_similar_patterns("business-proposal")
        assert "business-proposal" not in [r.pattern.id for r in similar]

    def test_same_category_ranks_first(self, registry):
        """meeting-minutes shares the business category."""
        similar = registry.get_similar_patterns("business-proposal")
        assert similar[0].pattern.id == "meeting-minutes"
        assert any("Same category" in reason for reason in similar[0].reasons)

    def test_scores_descending(self, registry):
        scores = [r.score for r in registry.get_similar_patterns("case-study", limit=10)]
        assert scores == sorted(scores, reverse=True)

    def test_score_bounds(self, library):
        """Identical patterns score 1.0."""
        pattern = library.get_pattern("case-study")
        assert similarity_score(pattern, pattern) == pytest.approx(1.0)


class TestUsageAndFeedback:
    """Usage tracking and ratings."""

    def test_track_usage(self, registry):
        registry.track_pattern_usage("case-study")
        usage = registry.track_pattern_usage("case-study")
        assert usage.usage_count == 2
        assert usage.last_used is not None

    def test_track_unknown(self, registry):
        with pytest.raises(PatternNotFoundError):
            registry.track_pattern_usage("nope")

    def test_running_average(self, registry):
        """Ratings fold into a running average; comments are kept."""
        registry.record_pattern_feedback("case-study", 5, "Great")
        usage = registry.record_pattern_feedback("case-study", 3)
        assert usage.average_rating == pytest.approx(4.0)
        assert usage.feedback_count == 2
        assert usage.feedback == ["Great"]

    @pytest.mark.parametrize("rating", [-1, 5.5])
    def test_rating_out_of_range(self, registry, rating):
        with pytest.raises(ValidationError) as exc_info:
            registry.record_pattern_feedback("case-study", rating)
        assert exc_info.value.errors[0].field == "rating"

    def test_popular_patterns(self, registry):
        registry.track_pattern_usage("course-outline")
        registry.track_pattern_usage("course-outline")
        registry.track_pattern_usage("case-study")
        assert [p.id for p in registry.get_popular_patterns(limit=2)] == ["course-outline", "case-study"]

    def test_unused_pattern_usage(self, registry):
        """Patterns never used report zero counts."""
        assert registry.get_pattern_usage("case-study").usage_count == 0

    def test_concurrent_tracking_loses_nothing(self, registry):
        """Concurrent increments on one pattern all land."""
        def work():
            for _ in range(50):
                registry.track_pattern_usage("case-study")

        threads = [threading.Thread(target=work) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert registry.get_pattern_usage("case-study").usage_count == 400

    def test_concurrent_feedback(self, registry):
        """Concurrent ratings are all counted."""
        def work():
            for _ in range(25):
                registry.record_pattern_feedback("case-study", 4)

        threads = [threading.Thread(target=work) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        usage = registry.get_pattern_usage("case-study")
        assert usage.feedback_count == 100
        assert usage.average_rating == pytest.approx(4.0)


class TestRecommendations:
    """get_recommended_patterns."""

    def test_no_signal_no_recommendations(self, registry):
        """A new user with no usage data gets nothing above the threshold."""
        assert registry.get_recommended_patterns("new-user") == []

    def test_preferences_drive_results(self, registry):
        """Preferred category plus complexity clears the threshold."""
        registry.set_user_preferences("u1", preferred_categories=["legal"], preferred_complexity="complex")
        recommendations = registry.get_recommended_patterns("u1")
        assert recommendations[0].pattern.id == "service-agreement"
        assert recommendations[0].score == pytest.approx(0.5)
        assert all(0 < r.score <= 1 for r in recommendations)

    def test_context_match(self, registry):
        """Industry and project type match use case and name."""
        context = RecommendationContext(industry="API", project_type="documentation")
        recommendations = registry.get_recommended_patterns("anyone", context)
        assert [r.pattern.id for r in recommendations] == ["technical-documentation"]

    def test_usage_never_lowers_score(self, registry):
        """Tracking more usage never decreases a pattern's score."""
        pattern = registry.get_pattern("case-study")
        preferences = registry.get_user_preferences("nobody")
        previous = 0.0
        for _ in range(40):
            registry.track_pattern_usage("case-study")
            score, _ = registry.score_pattern(pattern, preferences)
            assert score >= previous
            previous = score
        assert previous == pytest.approx(0.3)

    def test_score_clamped(self, registry):
        """Scores never exceed 1.0."""
        registry.set_user_preferences("u2", preferred_categories=["technical"], preferred_complexity="complex")
        for _ in range(50):
            registry.track_pattern_usage("technical-documentation")
        registry.record_pattern_feedback("technical-documentation", 5)
        context = RecommendationContext(industry="API", project_type="documentation")
        score, _ = registry.score_pattern(
            registry.get_pattern("technical-documentation"), registry.get_user_preferences("u2"), context,
        )
        assert score == 1.0


class TestCustomPatterns:
    """Custom pattern lifecycle."""

    def test_create_and_generate(self, registry, proposal_data):
        """A custom pattern instantiates with its stored customizations."""
        custom = registry.create_custom_pattern(
            "business-proposal", "Acme Proposal", {"colors": {"primary": "#ff6600"}}, created_by="u1",
        )
        template = registry.get_template_from_pattern(custom.id)
        assert template.name == "Acme Proposal"
        assert template.styling.colors["primary"] == "#ff6600"
        assert f"custom:{custom.id}" in template.metadata.tags

        composed = registry.generate_template_from_pattern(custom.id, proposal_data)
        assert "Website Revamp" in composed.compiled_content.html
        assert registry.get_pattern_usage(custom.id).usage_count == 1

    def test_unknown_base(self, registry):
        with pytest.raises(PatternNotFoundError):
            registry.create_custom_pattern("nope", "X")

    def test_custom_base_rejected(self, registry):
        """Custom patterns cannot be based on other custom patterns."""
        custom = registry.create_custom_pattern("case-study", "First")
        with pytest.raises(ValidationError):
            registry.create_custom_pattern(custom.id, "Second")

    def test_invalid_customizations(self, registry):
        with pytest.raises(ValidationError):
            registry.create_custom_pattern("case-study", "Bad", {"colors": {"primary": "red"}})

    def test_visibility(self, registry):
        """Users see their own patterns plus public ones."""
        mine = registry.create_custom_pattern("case-study", "Mine", created_by="u1")
        public = registry.create_custom_pattern("case-study", "Shared", created_by="u2", is_public=True)
        registry.create_custom_pattern("case-study", "Private", created_by="u2")
        assert {p.id for p in registry.get_custom_patterns("u1")} == {mine.id, public.id}
        assert {p.id for p in registry.get_custom_patterns()} == {public.id}
        assert {p.id for p in registry.get_custom_patterns("u1", include_public=False)} == {mine.id}

    def test_get_unknown_custom(self, registry):
        with pytest.raises(PatternNotFoundError):
            registry.get_custom_pattern("custom_missing")


class TestGeneration:
    """generate_template_from_pattern."""

    def test_generate_tracks_usage(self, registry, proposal_data):
        registry.generate_template_from_pattern("business-proposal", proposal_data)
        assert registry.get_pattern_usage("business-proposal").usage_count == 1

    def test_generate_with_customizations(self, registry, proposal_data):
        composed = registry.generate_template_from_pattern(
            "business-proposal", proposal_data, {"typography": {"font_size": "large"}},
        )
        assert "font-size: 18px;" in composed.compiled_content.css

    def test_composition_errors_propagate(self, registry):
        """A required variable with no value surfaces as CompositionError."""
        template = registry.get_template_from_pattern("business-proposal")
        with pytest.raises(CompositionError):
            registry.composer.compose(template, {})

    def test_state_is_per_registry(self, library):
        """Separate state objects do not share usage."""
        first = PatternRegistry(library=library, state=RegistryState())
        second = PatternRegistry(library=library, state=RegistryState())
        first.track_pattern_usage("case-study")
        assert second.get_pattern_usage("case-study").usage_count == 0
