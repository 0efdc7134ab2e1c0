"""Tests configuration and fixtures."""

import pytest
from prometheus_client import CollectorRegistry

from calme.config import Settings
from calme.domain.enums.categories import GraphId, SafeSpaceType
from calme.domain.models.profile import UserProfile
from calme.flows import build_graph_catalog
from calme.infrastructure.metrics.prometheus_metrics import ConversationMetrics
from calme.infrastructure.storage.profile_store import InMemoryProfileStore
from calme.services.dialogue.engine import DialogueEngine


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with defaults."""
    return Settings(
        env="development",
        debug=True,
    )


@pytest.fixture
def catalog(test_settings):
    """Catalog of the built-in graphs."""
    return build_graph_catalog(test_settings)


@pytest.fixture
def registry() -> CollectorRegistry:
    """Fresh metrics registry per test."""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry) -> ConversationMetrics:
    return ConversationMetrics(registry)


@pytest.fixture
def engine(catalog, metrics) -> DialogueEngine:
    """Engine at the start of the main flow."""
    return DialogueEngine(catalog, GraphId.MAIN, metrics=metrics)


@pytest.fixture
def sample_profile() -> UserProfile:
    """Profile of a user who finished onboarding."""
    return UserProfile(
        name="Dana",
        safe_space_type=SafeSpaceType.MAMAD,
        safe_space_location="the mamad next to the kitchen",
        time_to_reach_safety=30,
        calming_preferences=["music"],
        onboarding_completed=True,
    )


@pytest.fixture
def store() -> InMemoryProfileStore:
    """Empty profile store."""
    return InMemoryProfileStore()
