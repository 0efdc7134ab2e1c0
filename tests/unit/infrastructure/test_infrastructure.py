"""
Unit Tests for Infrastructure

Tests metrics collectors, the in-memory profile store, settings
and log redaction.
"""

import logging

import pytest
from prometheus_client import CollectorRegistry
from pydantic import ValidationError

from calme.config import Settings
from calme.config.logging_config import _redact_sensitive_data, resolve_log_level
from calme.infrastructure.metrics.prometheus_metrics import ConversationMetrics
from calme.infrastructure.storage.profile_store import InMemoryProfileStore, ProfileStore
from calme.domain.models.profile import UserProfile


class TestConversationMetrics:
    """Test suite for ConversationMetrics."""

    def test_registries_are_isolated(self) -> None:
        """Two collectors on separate registries never clash."""
        first = ConversationMetrics(CollectorRegistry())
        second = ConversationMetrics(CollectorRegistry())
        first.track_clarification("parseYesNo")

        assert first.registry.get_sample_value(
            "calme_clarifications_total", {"parser_type": "parseYesNo"}
        ) == 1.0
        assert second.registry.get_sample_value(
            "calme_clarifications_total", {"parser_type": "parseYesNo"}
        ) is None

    def test_clarification_without_parser(self, metrics, registry) -> None:
        metrics.track_clarification(None)
        assert registry.get_sample_value("calme_clarifications_total", {"parser_type": "none"}) == 1.0

    def test_classifier_results(self, metrics, registry) -> None:
        metrics.track_classifier_result("classifySafety", "keyword")
        metrics.track_classifier_result("classifySafety", "keyword")
        assert registry.get_sample_value(
            "calme_classifier_results_total", {"parser_type": "classifySafety", "tier": "keyword"}
        ) == 2.0

    def test_time_turn(self, metrics, registry) -> None:
        with metrics.time_turn():
            pass
        assert registry.get_sample_value("calme_turn_duration_seconds_count") == 1.0

    def test_custom_namespace(self) -> None:
        registry = CollectorRegistry()
        ConversationMetrics(registry, namespace="test").track_activity_trigger("paint")
        assert registry.get_sample_value("test_activity_triggers_total", {"activity": "paint"}) == 1.0

    def test_render(self, metrics) -> None:
        metrics.update_system_info("staging")
        payload, content_type = metrics.render()
        assert b"calme_system_info" in payload
        assert b'environment="staging"' in payload
        assert content_type.startswith("text/plain")


class TestInMemoryProfileStore:
    """Test suite for InMemoryProfileStore."""

    def test_is_a_profile_store(self, store) -> None:
        assert isinstance(store, ProfileStore)

    def test_empty_store(self, store) -> None:
        assert store.get_active_profile() is None

    def test_save_activates_profile(self, store, sample_profile) -> None:
        store.save_profile(sample_profile)
        assert store.get_active_profile() is sample_profile
        assert sample_profile.is_active

    def test_saving_another_profile_deactivates_previous(self, store, sample_profile) -> None:
        store.save_profile(sample_profile)
        other = UserProfile(id="second", name="Avi")
        store.save_profile(other)

        assert store.get_active_profile() is other
        assert not sample_profile.is_active

    def test_activity_history(self, store) -> None:
        store.record_activity("primary", "breathing", True)
        store.record_activity("other", "paint", False)

        history = store.activity_history("primary")
        assert len(history) == 1
        assert history[0].activity_name == "breathing"
        assert history[0].completed
        assert len(store.activity_history()) == 2
        assert history[0].to_dict()["profile_id"] == "primary"


class TestSettings:
    """Test suite for Settings."""

    def test_defaults(self, test_settings) -> None:
        assert test_settings.dialogue.activity_catalog[0] == "breathing"
        assert len(test_settings.dialogue.activity_catalog) == 9
        assert test_settings.dialogue.validate_reachability
        assert test_settings.metrics.namespace == "calme"
        assert test_settings.env == "development"

    def test_environment_override(self, monkeypatch) -> None:
        monkeypatch.setenv("CALME_DIALOGUE_ACTIVITY_LAUNCH_DELAY_SECONDS", "0")
        monkeypatch.setenv("CALME_ENV", "production")
        settings = Settings()
        assert settings.dialogue.activity_launch_delay_seconds == 0.0
        assert settings.env == "production"

    def test_duplicate_activities_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("CALME_DIALOGUE_ACTIVITY_CATALOG", '["paint", "paint"]')
        with pytest.raises(ValidationError):
            Settings()

    def test_debug_forces_debug_log_level(self) -> None:
        settings = Settings(debug=True, log_level="WARNING")
        assert resolve_log_level(settings) == logging.DEBUG

    def test_log_level_used_without_debug(self) -> None:
        settings = Settings(debug=False, log_level="WARNING")
        assert resolve_log_level(settings) == logging.WARNING


class TestLogRedaction:
    """Personal data never reaches rendered logs."""

    def test_sensitive_keys_are_redacted(self) -> None:
        event = _redact_sensitive_data(
            None,
            "info",
            {"event": "turn_processed", "utterance": "I'm at 5 Herzl St", "category": "SAFE"},
        )
        assert event["utterance"] == "[REDACTED]"
        assert event["category"] == "SAFE"
