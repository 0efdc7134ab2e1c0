"""
Prometheus Metrics

Conversation observability for CALMe: transitions, clarification
loops, first-rule fallbacks and activity hand-offs.

ARCHITECTURE: Metrics are decoupled from business logic.
Only increment/observe; never block on metrics operations.
Every collector is registered on an injected CollectorRegistry so
that engines, tests and embedded hosts never share global state.
"""

import time
from contextlib import contextmanager
from typing import Iterator, Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    Info,
    generate_latest,
)

from calme import __version__


class ConversationMetrics:
    """
    Collectors for one registry.

    Usage:
        registry = CollectorRegistry()
        metrics = ConversationMetrics(registry)
        engine = DialogueEngine(catalog, metrics=metrics)
    """

    def __init__(
        self,
        registry: Optional[CollectorRegistry] = None,
        namespace: str = "calme",
    ) -> None:
        """
        Initialize collectors.

        Args:
            registry: Registry to register on (a private one when omitted)
            namespace: Metric name prefix
        """
        self.registry = registry if registry is not None else CollectorRegistry()
        self.namespace = namespace

        # =====================================================================
        # DIALOGUE METRICS
        # =====================================================================

        self.transitions_total = Counter(
            "transitions_total",
            "Node transitions performed by the dialogue engine",
            ["graph_id", "kind"],  # kind: direct, conditional, fallback
            namespace=namespace,
            registry=self.registry,
        )

        self.clarifications_total = Counter(
            "clarifications_total",
            "Clarification re-prompts issued",
            ["parser_type"],
            namespace=namespace,
            registry=self.registry,
        )

        self.fallback_first_rule_total = Counter(
            "fallback_first_rule_total",
            "Conditional transitions where no rule matched",
            ["graph_id", "node_id"],
            namespace=namespace,
            registry=self.registry,
        )

        self.graph_switches_total = Counter(
            "graph_switches_total",
            "Active graph switches",
            ["to_graph"],
            namespace=namespace,
            registry=self.registry,
        )

        # =====================================================================
        # ACTIVITY METRICS
        # =====================================================================

        self.activity_triggers_total = Counter(
            "activity_triggers_total",
            "Activity hand-offs to the host",
            ["activity"],
            namespace=namespace,
            registry=self.registry,
        )

        self.activity_completions_total = Counter(
            "activity_completions_total",
            "Activities reported back by the host",
            ["activity", "outcome"],  # completed, abandoned
            namespace=namespace,
            registry=self.registry,
        )

        # =====================================================================
        # CLASSIFIER METRICS
        # =====================================================================

        self.classifier_results_total = Counter(
            "classifier_results_total",
            "Parser results by winning tier",
            ["parser_type", "tier"],
            namespace=namespace,
            registry=self.registry,
        )

        self.turn_duration = Histogram(
            "turn_duration_seconds",
            "Time spent classifying and transitioning one user turn",
            buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5],
            namespace=namespace,
            registry=self.registry,
        )

        self.system_info = Info(
            "system",
            "CALMe dialogue core information",
            namespace=namespace,
            registry=self.registry,
        )
        self.system_info.info({"version": __version__})

    # =========================================================================
    # HELPERS
    # =========================================================================

    def track_transition(self, graph_id: str, kind: str) -> None:
        """Record a node transition."""
        self.transitions_total.labels(graph_id=graph_id, kind=kind).inc()

    def track_clarification(self, parser_type: Optional[str]) -> None:
        """Record a clarification re-prompt."""
        self.clarifications_total.labels(parser_type=parser_type or "none").inc()

    def track_fallback(self, graph_id: str, node_id: str) -> None:
        """Record a fallback to the first conditional rule."""
        self.fallback_first_rule_total.labels(graph_id=graph_id, node_id=node_id).inc()

    def track_graph_switch(self, graph_id: str) -> None:
        """Record a switch of the active graph."""
        self.graph_switches_total.labels(to_graph=graph_id).inc()

    def track_activity_trigger(self, activity: str) -> None:
        """Record an activity hand-off."""
        self.activity_triggers_total.labels(activity=activity).inc()

    def track_activity_completion(self, activity: str, completed: bool) -> None:
        """Record an activity outcome reported by the host."""
        outcome = "completed" if completed else "abandoned"
        self.activity_completions_total.labels(activity=activity, outcome=outcome).inc()

    def track_classifier_result(self, parser_type: str, tier: str) -> None:
        """Record which tier produced a parser result."""
        self.classifier_results_total.labels(parser_type=parser_type, tier=tier).inc()

    @contextmanager
    def time_turn(self) -> Iterator[None]:
        """Observe the duration of the enclosed turn."""
        start_time = time.perf_counter()
        try:
            yield
        finally:
            self.turn_duration.observe(time.perf_counter() - start_time)

    def update_system_info(self, environment: str) -> None:
        """Update system info metric with current environment."""
        self.system_info.info({
            "version": __version__,
            "environment": environment,
        })

    def render(self) -> tuple[bytes, str]:
        """
        Export the registry in Prometheus text format.

        Returns:
            Payload and its content type, ready for a host's /metrics route
        """
        return generate_latest(self.registry), CONTENT_TYPE_LATEST
