"""
Tests for CategoryClassifier - query routing.

Uses a real ProviderRegistry (no network: the fetcher is never called).
"""

import pytest

from media_feed.application.search.query_classifier import (
    EXPLICIT_DEFAULT_QUERY,
    CategoryClassifier,
    ClassifierPolicy,
    ProviderQueryPlan,
    has_explicit_marker,
    is_video_focused,
)
from media_feed.domain.entities.media import ProviderGroup, SafetyLevel
from media_feed.infrastructure.sources import ProviderRegistry
from media_feed.shared.settings import FeedSettings

GENERIC = ProviderGroup.GENERIC
ANIMAL = ProviderGroup.ANIMAL
SPACE = ProviderGroup.SPACE
EXPLICIT = ProviderGroup.EXPLICIT


@pytest.fixture
def registry(fake_fetcher, rng):
    return ProviderRegistry(fake_fetcher, rng=rng)


@pytest.fixture
def classifier(registry):
    return CategoryClassifier(registry)


def provider_tags(plan: ProviderQueryPlan) -> set[str]:
    return {e.provider.tag for e in plan.entries}


# =============================================================================
# Helpers
# =============================================================================


class TestMarkers:
    @pytest.mark.parametrize("query", ["18+", "x", "Adult", "free porn clips", "hentai art", "NSFW"])
    def test_explicit_markers(self, query):
        assert has_explicit_marker(query)

    @pytest.mark.parametrize("query", ["", "cats", "xylophone", "sunset"])
    def test_not_explicit(self, query):
        assert not has_explicit_marker(query)

    def test_video_focus(self):
        assert is_video_focused("videos")
        assert is_video_focused("cat video compilation")
        assert not is_video_focused("vid")


# =============================================================================
# Routing
# =============================================================================


class TestRouting:
    def test_empty_query_is_generic_only(self, classifier, registry):
        plan = classifier.classify(None)
        assert plan.query == ""
        assert plan.groups == frozenset({GENERIC})
        assert plan.safety_level is SafetyLevel.STRICT
        assert plan.entries == tuple(e for e in registry.entries if e.group is GENERIC)

    def test_cat(self, classifier):
        plan = classifier.classify("cat")
        assert plan.groups == frozenset({GENERIC, ANIMAL})
        assert plan.is_cat and not plan.is_dog
        assert "cat" in provider_tags(plan)
        assert "dog" not in provider_tags(plan)
        assert not plan.explicit_dispatched
        assert plan.safety_level is SafetyLevel.STRICT

    def test_dog_substring(self, classifier):
        plan = classifier.classify("Puppy")
        assert plan.is_dog
        assert "dog" in provider_tags(plan)
        assert "cat" not in provider_tags(plan)

    def test_generic_animal_word_enables_group_without_feeds(self, classifier):
        plan = classifier.classify("pet")
        assert ANIMAL in plan.groups
        assert not {"dog", "cat"} & provider_tags(plan)

    def test_nasa_hits_space_and_broad_net(self, classifier):
        plan = classifier.classify("nasa")
        assert plan.groups == frozenset({GENERIC, SPACE, EXPLICIT})
        assert "nasa" in provider_tags(plan)
        assert not plan.is_explicit_query
        assert plan.safety_level is SafetyLevel.STRICT

    def test_explicit_marker(self, classifier):
        plan = classifier.classify("18+")
        assert EXPLICIT in plan.groups
        assert plan.is_explicit_query
        assert plan.safety_level is SafetyLevel.RELAXED

    def test_broad_net_long_query(self, classifier):
        plan = classifier.classify("design")
        assert EXPLICIT in plan.groups
        assert plan.safety_level is SafetyLevel.STRICT

    def test_short_query_stays_generic(self, classifier):
        assert classifier.classify("art").groups == frozenset({GENERIC})

    def test_video_focused_flag(self, classifier):
        assert classifier.classify("videos").video_focused
        assert not classifier.classify("photos").video_focused


class TestPolicy:
    def test_broad_net_disabled(self, registry):
        classifier = CategoryClassifier(registry, ClassifierPolicy(broad_net_min_length=None))
        assert EXPLICIT not in classifier.classify("design").groups
        assert EXPLICIT in classifier.classify("porn").groups

    def test_explicit_group_disabled(self, registry):
        classifier = CategoryClassifier(registry, ClassifierPolicy(explicit_enabled=False))
        plan = classifier.classify("hentai")
        assert EXPLICIT not in plan.groups
        assert not plan.explicit_dispatched

    def test_from_settings(self):
        policy = ClassifierPolicy.from_settings(FeedSettings(broad_net_min_length=8, explicit_enabled=False))
        assert policy == ClassifierPolicy(broad_net_min_length=8, explicit_enabled=False)


class TestSafety:
    def test_caller_override_wins(self, classifier):
        assert classifier.classify("18+", SafetyLevel.STRICT).safety_level is SafetyLevel.STRICT
        assert classifier.classify("cats", SafetyLevel.RELAXED).safety_level is SafetyLevel.RELAXED

    def test_override_does_not_change_routing(self, classifier):
        plan = classifier.classify("cats", SafetyLevel.RELAXED)
        assert EXPLICIT in plan.groups  # broad net: len("cats") > 3
        assert not plan.is_explicit_query

    def test_explicit_web_entries_forced_relaxed(self, classifier):
        plan = classifier.classify("design")
        explicit_web = [e for e in plan.entries if e.group is EXPLICIT and e.provider.tag == "web"]
        assert len(explicit_web) == 2
        assert all(plan.safety_for(e) is SafetyLevel.RELAXED for e in explicit_web)
        generic_web = [e for e in plan.entries if e.group is GENERIC and e.provider.tag == "web"]
        assert all(plan.safety_for(e) is SafetyLevel.STRICT for e in generic_web)


class TestQueryForwarding:
    def test_generic_entries(self, classifier):
        plan = classifier.classify("  Cat  ")
        assert plan.query == "Cat"
        by_tag = {(e.provider.tag, e.mode.value): plan.query_for(e) for e in plan.entries}
        assert by_tag[("web", "image")] == "Cat"
        assert by_tag[("picsum", "image")] is None
        assert by_tag[("cat", "image")] is None

    def test_trending_forwards_none(self, classifier):
        plan = classifier.classify("")
        assert all(plan.query_for(e) is None for e in plan.entries)

    def test_explicit_entries_get_query(self, classifier):
        plan = classifier.classify("hentai")
        assert plan.is_hentai
        explicit = [e for e in plan.entries if e.group is EXPLICIT]
        assert explicit
        assert all(plan.query_for(e) == "hentai" for e in explicit)

    def test_explicit_default_query(self):
        plan = ProviderQueryPlan(query="", safety_level=SafetyLevel.STRICT)
        assert plan.explicit_query == EXPLICIT_DEFAULT_QUERY

    def test_to_dict(self, classifier):
        d = classifier.classify("cat").to_dict()
        assert d["groups"] == ["animal", "generic"]
        assert d["safety_level"] == "strict"
        assert "Cats:image" in d["entries"]
