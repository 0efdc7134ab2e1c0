"""
Unit Tests for Conversation Orchestrator

Tests parser dispatch, activity hand-off, profile handling and
suggestion refresh.
"""

from unittest.mock import Mock

import pytest

from calme.config import MetricsSettings, Settings
from calme.domain.enums.categories import GraphId
from calme.domain.models.parser_output import ClassificationResult
from calme.infrastructure.storage.profile_store import InMemoryProfileStore
from calme.services.dialogue.errors import ActivityInProgressError
from calme.services.orchestration.conversation_orchestrator import (
    ACKNOWLEDGEMENT,
    ConversationOrchestrator,
)


@pytest.fixture
def orchestrator(catalog, sample_profile, test_settings, metrics) -> ConversationOrchestrator:
    """Orchestrator for a user who finished onboarding."""
    return ConversationOrchestrator(
        catalog=catalog,
        store=InMemoryProfileStore(sample_profile),
        settings=test_settings,
        metrics=metrics,
    )


class TestStartup:
    """Tests for choosing the starting graph."""

    def test_new_user_starts_onboarding(self, catalog, store, test_settings) -> None:
        orchestrator = ConversationOrchestrator(catalog=catalog, store=store, settings=test_settings)
        assert orchestrator.session.active_graph_id == GraphId.ONBOARDING
        assert orchestrator.current_node.id == "onboard_start"

    def test_known_user_starts_main_flow(self, orchestrator) -> None:
        assert orchestrator.session.active_graph_id == GraphId.MAIN
        assert orchestrator.current_node.id == "check_safety"
        assert orchestrator.session.variables["name"] == "Dana"

    def test_preferred_activity_is_suggested_first(self, orchestrator) -> None:
        assert orchestrator.session.variables["suggestions"] == "music, breathing, grounding"

    def test_metrics_built_from_settings(self, catalog, sample_profile) -> None:
        settings = Settings(metrics=MetricsSettings(namespace="test"))
        orchestrator = ConversationOrchestrator(
            catalog=catalog, store=InMemoryProfileStore(sample_profile), settings=settings
        )

        orchestrator.handle_utterance("yes I'm safe at home")

        assert orchestrator.metrics.namespace == "test"
        assert orchestrator.metrics.registry.get_sample_value(
            "test_classifier_results_total", {"parser_type": "classifySafety", "tier": "keyword"}
        ) == 1.0

    def test_metrics_disabled_in_settings(self, catalog, store) -> None:
        settings = Settings(metrics=MetricsSettings(enabled=False))
        orchestrator = ConversationOrchestrator(catalog=catalog, store=store, settings=settings)
        assert orchestrator.metrics is None


class TestHandleUtterance:
    """Test suite for handle_utterance."""

    def test_runs_current_parser(self, orchestrator, registry) -> None:
        response = orchestrator.handle_utterance("yes I'm safe at home")

        assert response.node.id == "stress_assessment"
        assert response.result.category == "SAFE"
        assert response.activity_trigger is None
        assert response.launch_delay_seconds == 0.0
        assert registry.get_sample_value(
            "calme_classifier_results_total", {"parser_type": "classifySafety", "tier": "keyword"}
        ) == 1.0
        assert registry.get_sample_value("calme_turn_duration_seconds_count") == 1.0

    def test_activity_trigger_carries_launch_delay(self, orchestrator, test_settings) -> None:
        orchestrator.handle_utterance("yes I'm safe at home")
        response = orchestrator.handle_utterance("I can't breathe, my heart is racing")

        assert response.node.id == "breathing_activity"
        assert response.activity_trigger.activity_name == "breathing"
        assert response.launch_delay_seconds == test_settings.dialogue.activity_launch_delay_seconds

    def test_clarification_does_not_advance(self, orchestrator) -> None:
        response = orchestrator.handle_utterance("hmm")
        assert response.node.is_clarification
        assert orchestrator.session.current_node_id == "check_safety"

    def test_node_without_parser_is_acknowledged(self, orchestrator) -> None:
        orchestrator.switch_to_alert()
        response = orchestrator.handle_utterance("ok")

        assert response.result is ACKNOWLEDGEMENT
        assert response.node.id == "alert_focus"

    def test_injected_parser_runner(self, catalog, sample_profile, test_settings) -> None:
        runner = Mock(return_value=ClassificationResult(category="DANGER", confidence=0.95))
        orchestrator = ConversationOrchestrator(
            catalog=catalog,
            store=InMemoryProfileStore(sample_profile),
            settings=test_settings,
            parser_runner=runner,
        )

        response = orchestrator.handle_utterance("anything")

        runner.assert_called_once_with("classifySafety", "anything")
        assert response.node.id == "emergency_end"
        assert response.is_complete

    def test_to_dict(self, orchestrator) -> None:
        data = orchestrator.handle_utterance("yes I'm safe at home").to_dict()
        assert data["node"]["id"] == "stress_assessment"
        assert data["result"]["kind"] == "classification"
        assert data["activity_trigger"] is None


class TestActivities:
    """Tests for activity completion."""

    def test_complete_activity_records_history(self, orchestrator) -> None:
        orchestrator.handle_utterance("yes I'm safe at home")
        orchestrator.handle_utterance("I can't breathe, my heart is racing")

        with pytest.raises(ActivityInProgressError):
            orchestrator.handle_utterance("done")

        node = orchestrator.complete_activity(completed=True)

        assert node.id == "breathing_return"
        history = orchestrator.store.activity_history("primary")
        assert [(r.activity_name, r.completed) for r in history] == [("breathing", True)]

    def test_attempted_activities_leave_suggestions(self, orchestrator) -> None:
        orchestrator.handle_utterance("yes I'm safe at home")
        orchestrator.handle_utterance("I can't breathe, my heart is racing")
        orchestrator.complete_activity()

        assert orchestrator.session.variables["suggestions"] == "music, grounding, stretching"

    def test_all_attempted_falls_back_to_full_catalog(self, orchestrator, test_settings) -> None:
        orchestrator.session.attempted_activities.update(test_settings.dialogue.activity_catalog)
        orchestrator.handle_utterance("yes I'm safe at home")
        assert orchestrator.session.variables["suggestions"] == "music, breathing, grounding"


class TestReset:
    """Tests for reset."""

    def test_reset_keeps_profile_variables(self, orchestrator) -> None:
        orchestrator.handle_utterance("I'm trapped, help!")
        node = orchestrator.reset()

        assert node.id == "check_safety"
        assert orchestrator.session.variables["name"] == "Dana"
