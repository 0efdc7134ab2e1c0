"""
Dialogue Graph Engine

Finite-state traversal over a validated conversation graph. The
engine owns exactly one Session and advances it from parser
results; it never classifies text, never runs activities and never
sleeps.

ARCHITECTURE: The engine depends on the parser result shape only.
Activity launch and resumption form a two-phase gate: a transition
into an activity node parks the session until the host calls
resume_after_activity. A host may abandon a parked session at any
time; reset() and switch_graph() release it.

SAFETY_NOTE: Low-confidence answers never advance the conversation.
The user is re-asked the same logical question instead.
"""

from dataclasses import replace
from typing import Any, Iterable, Optional, Union

from calme.config.logging_config import get_logger
from calme.domain.enums.categories import GraphId
from calme.domain.models.conversation import (
    PLACEHOLDER_PATTERN,
    ActivityTrigger,
    Conditional,
    ConversationNode,
    DialogueGraph,
    Direct,
    RenderableNode,
    TurnOutcome,
)
from calme.domain.models.parser_output import ParserResult
from calme.domain.models.session import Session
from calme.infrastructure.metrics.prometheus_metrics import ConversationMetrics
from calme.services.dialogue.catalog import GraphCatalog
from calme.services.dialogue.errors import (
    ActivityInProgressError,
    MissingTransitionError,
    NoPendingActivityError,
    UnknownNodeError,
)


_module_logger = get_logger(__name__)

CLARIFY_SUFFIX = "_clarify"


class DialogueEngine:
    """
    Drives one conversation through the graphs of a catalog.

    Usage:
        engine = DialogueEngine(get_graph_catalog())
        node = engine.get_current_node()
        outcome = engine.submit_result(classify_safety("I'm safe at home"))
    """

    def __init__(
        self,
        catalog: GraphCatalog,
        graph_id: Union[GraphId, str] = GraphId.MAIN,
        session: Optional[Session] = None,
        logger: Optional[Any] = None,
        metrics: Optional[ConversationMetrics] = None,
    ) -> None:
        """
        Initialize engine.

        Args:
            catalog: Validated graphs the engine may traverse
            graph_id: Graph to start in (ignored when a session is restored)
            session: Restored session; a fresh one starts at the graph's start node
            logger: Structured logger (defaults to the module logger)
            metrics: Optional metrics collectors
        """
        self._catalog = catalog
        self._logger = logger if logger is not None else _module_logger
        self._metrics = metrics

        if session is None:
            graph = catalog.get(graph_id)
            session = Session(current_node_id=graph.start_node, active_graph_id=graph.graph_id)
        else:
            graph = catalog.get(session.active_graph_id)
            if session.current_node_id not in graph:
                raise UnknownNodeError(session.current_node_id, graph.graph_id.value)

        self._graph: DialogueGraph = graph
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    @property
    def graph(self) -> DialogueGraph:
        return self._graph

    @property
    def current_node(self) -> ConversationNode:
        return self._graph.nodes[self._session.current_node_id]

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_current_node(self) -> RenderableNode:
        """Current node with placeholders substituted from session variables."""
        return self._render(self.current_node)

    def get_current_parser_type(self) -> Optional[str]:
        """Parser the host should run on the next utterance, if any."""
        return self.current_node.parser_type

    def is_complete(self) -> bool:
        """Whether the conversation reached an end node."""
        return self.current_node.is_end

    def unattempted_activities(self, catalog: Iterable[str]) -> list[str]:
        """
        Activities from ``catalog`` the user has not tried yet.

        Args:
            catalog: Activity names in preference order

        Returns:
            Untried activities, catalog order preserved
        """
        attempted = self._session.attempted_activities
        return [name for name in catalog if name not in attempted]

    # =========================================================================
    # STATE CHANGES
    # =========================================================================

    def set_variable(self, name: str, value: str) -> None:
        """Store a value for {name} substitution."""
        self._session.variables[name] = value
        self._session.touch()

    def move_to_node(self, node_id: str) -> RenderableNode:
        """
        Jump to a node of the active graph.

        Raises:
            UnknownNodeError: If the node does not exist
        """
        node = self._graph.get(node_id)
        if node is None:
            raise UnknownNodeError(node_id, self._graph.graph_id.value)

        self._session.current_node_id = node_id
        self._session.touch()
        return self._render(node)

    def submit_result(self, result: ParserResult) -> TurnOutcome:
        """
        Advance the conversation with a parser result.

        Args:
            result: Classification or extraction for the current node

        Returns:
            Next renderable node, plus an activity trigger when the
            next node is an activity

        Raises:
            ActivityInProgressError: If an activity is still running
            MissingTransitionError: If the current node has no transition
        """
        if self._session.has_pending_activity:
            raise ActivityInProgressError(
                self._session.pending_activity,
                self._session.pending_return_node or self._session.current_node_id,
            )

        node = self.current_node

        if result.needs_clarification:
            return TurnOutcome(next_node=self._clarification_node(node, result))

        if node.next is None:
            raise MissingTransitionError(node.id)

        self._capture(node, result)
        target = self._resolve_target(node, result)
        target_node = self._graph.get(target)

        # A malformed activity node raises before the session moves
        trigger = None
        if target_node is not None and target_node.is_activity:
            trigger = self._park_for_activity(target_node)

        rendered = self.move_to_node(target)
        return TurnOutcome(next_node=rendered, activity_trigger=trigger)

    def resume_after_activity(self, completed: bool = True) -> RenderableNode:
        """
        Continue after the host finished (or skipped) an activity.

        Args:
            completed: Whether the user completed the activity

        Returns:
            The activity's return node

        Raises:
            NoPendingActivityError: If no activity is pending
        """
        return_node = self._session.pending_return_node
        if return_node is None:
            raise NoPendingActivityError()

        activity = self._session.pending_activity
        if activity:
            self._session.attempted_activities.add(activity)
        self._session.clear_pending_activity()

        self._logger.info(
            "activity_resumed",
            activity=activity,
            completed=completed,
            return_node=return_node,
        )
        if self._metrics is not None and activity:
            self._metrics.track_activity_completion(activity, completed)

        return self.move_to_node(return_node)

    def reset(self) -> RenderableNode:
        """Return to the active graph's start node with empty state."""
        self._session.current_node_id = self._graph.start_node
        self._session.variables.clear()
        self._session.attempted_activities.clear()
        self._session.clear_pending_activity()
        self._session.touch()

        self._logger.info("dialogue_reset", graph_id=self._graph.graph_id.value)
        return self.get_current_node()

    def switch_graph(self, graph_id: Union[GraphId, str]) -> RenderableNode:
        """
        Make another graph active and move to its start node.

        Variables and activity history are kept; a pending activity
        is abandoned.

        Raises:
            UnknownGraphError: If the catalog has no such graph
        """
        graph = self._catalog.get(graph_id)
        previous = self._graph.graph_id

        self._graph = graph
        self._session.active_graph_id = graph.graph_id
        self._session.clear_pending_activity()

        self._logger.info(
            "graph_switched",
            from_graph=previous.value,
            to_graph=graph.graph_id.value,
        )
        if self._metrics is not None:
            self._metrics.track_graph_switch(graph.graph_id.value)

        return self.move_to_node(graph.start_node)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _render(self, node: ConversationNode, is_clarification: bool = False) -> RenderableNode:
        variables = self._session.variables
        content = PLACEHOLDER_PATTERN.sub(
            lambda m: variables.get(m.group(1), m.group(0)),
            node.content,
        )
        return RenderableNode(node=node, content=content, is_clarification=is_clarification)

    def _clarification_node(self, node: ConversationNode, result: ParserResult) -> RenderableNode:
        prompt = result.clarification_prompt or node.content
        transient = replace(node, id=f"{node.id}{CLARIFY_SUFFIX}", content=prompt, capture=None)

        self._logger.info(
            "clarification_requested",
            node_id=node.id,
            parser_type=node.parser_type,
            confidence=result.confidence,
        )
        if self._metrics is not None:
            self._metrics.track_clarification(node.parser_type)

        return self._render(transient, is_clarification=True)

    def _capture(self, node: ConversationNode, result: ParserResult) -> None:
        if not node.capture:
            return
        value = result.extracted_value or result.category
        if value:
            self._session.variables[node.capture] = value

    def _resolve_target(self, node: ConversationNode, result: ParserResult) -> str:
        graph_id = self._graph.graph_id.value
        transition = node.next

        if isinstance(transition, Direct):
            self._track_transition("direct")
            return transition.target

        if not isinstance(transition, Conditional):
            raise MissingTransitionError(node.id)
        for rule in transition.rules:
            if rule.is_default or (rule.predicate is not None and rule.predicate.evaluate(result)):
                self._track_transition("conditional")
                return rule.goto

        # Only reachable for graphs that bypassed the validator
        if not transition.rules:
            raise MissingTransitionError(node.id)
        fallback = transition.rules[0].goto
        self._logger.warning(
            "no_matching_condition",
            graph_id=graph_id,
            node_id=node.id,
            category=result.category,
            fallback=fallback,
        )
        if self._metrics is not None:
            self._metrics.track_fallback(graph_id, node.id)
        self._track_transition("fallback")
        return fallback

    def _park_for_activity(self, node: ConversationNode) -> ActivityTrigger:
        if not isinstance(node.next, Direct) or not node.activity_name:
            raise MissingTransitionError(node.id)
        trigger = ActivityTrigger(activity_name=node.activity_name, return_node=node.next.target)

        self._session.pending_return_node = trigger.return_node
        self._session.pending_activity = trigger.activity_name

        self._logger.info(
            "activity_triggered",
            activity=trigger.activity_name,
            return_node=trigger.return_node,
        )
        if self._metrics is not None:
            self._metrics.track_activity_trigger(trigger.activity_name)

        return trigger

    def _track_transition(self, kind: str) -> None:
        if self._metrics is not None:
            self._metrics.track_transition(self._graph.graph_id.value, kind)
