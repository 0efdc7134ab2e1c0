"""
Conversation Orchestrator

Main coordination layer for one CALMe conversation:
1. Picks the parser the current node asks for and runs it
2. Feeds the result to the dialogue engine
3. Turns a finished onboarding into a stored emergency profile
4. Keeps activity suggestions and profile variables current

ARCHITECTURE: The orchestrator is the only place where the
classifier library, the dialogue engine and the profile store meet.
Neither the engine nor the classifiers know about each other.

PRIVACY: Utterances are handed to parsers and never logged.
"""

from contextlib import nullcontext
from dataclasses import dataclass
from typing import Callable, Optional

from calme.config.logging_config import bind_session_context, get_logger
from calme.config.settings import Settings, get_settings
from calme.domain.enums.categories import GraphId
from calme.domain.models.conversation import ActivityTrigger, RenderableNode
from calme.domain.models.parser_output import ClassificationResult, ParserResult
from calme.domain.models.profile import UserProfile
from calme.domain.models.session import Session
from calme.flows import get_graph_catalog
from calme.infrastructure.metrics.prometheus_metrics import ConversationMetrics
from calme.infrastructure.storage.profile_store import InMemoryProfileStore, ProfileStore
from calme.services.classification.registry import result_tier, run_parser
from calme.services.dialogue.catalog import GraphCatalog
from calme.services.dialogue.engine import DialogueEngine

logger = get_logger(__name__)


# Result submitted for nodes that only wait for the user to continue
ACKNOWLEDGEMENT = ClassificationResult(
    category="acknowledged",
    confidence=1.0,
    reasoning="no parser on node",
)

ParserRunner = Callable[[str, str], ParserResult]


@dataclass
class TurnResponse:
    """
    Outcome of one user turn.

    Attributes:
        node: Node to render next
        result: Parser result the turn was decided on
        activity_trigger: Activity the host should launch, if any
        launch_delay_seconds: Pause before launching the activity
        profile_saved: Whether this turn finished onboarding
        is_complete: Whether the conversation reached an end node
    """

    node: RenderableNode
    result: ParserResult
    activity_trigger: Optional[ActivityTrigger] = None
    launch_delay_seconds: float = 0.0
    profile_saved: bool = False
    is_complete: bool = False

    def to_dict(self) -> dict:
        """Serialize for the host UI."""
        return {
            "node": self.node.to_dict(),
            "result": self.result.to_dict(),
            "activity_trigger": self.activity_trigger.to_dict() if self.activity_trigger else None,
            "launch_delay_seconds": self.launch_delay_seconds,
            "profile_saved": self.profile_saved,
            "is_complete": self.is_complete,
        }


class ConversationOrchestrator:
    """
    Runs a conversation turn by turn.

    A user without an active profile starts in onboarding; once the
    onboarding graph ends the profile is saved and the conversation
    continues in the main flow.

    Usage:
        orchestrator = ConversationOrchestrator()
        print(orchestrator.current_node.content)
        response = orchestrator.handle_utterance("I'm safe at home")
        if response.activity_trigger:
            ...  # run the activity, then
            orchestrator.complete_activity()
    """

    def __init__(
        self,
        catalog: Optional[GraphCatalog] = None,
        store: Optional[ProfileStore] = None,
        settings: Optional[Settings] = None,
        metrics: Optional[ConversationMetrics] = None,
        session: Optional[Session] = None,
        parser_runner: ParserRunner = run_parser,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            catalog: Graph catalog (defaults to the built-in graphs)
            store: Profile store (defaults to an in-memory store)
            settings: Settings to use (defaults to the cached settings)
            metrics: Metrics collectors (built from settings when enabled)
            session: Restored session to continue
            parser_runner: Callable mapping (parser_type, utterance) to a result
        """
        if catalog is None:
            catalog = get_graph_catalog()
        self.settings = settings or get_settings()
        self.store = store if store is not None else InMemoryProfileStore()
        if metrics is None and self.settings.metrics.enabled:
            metrics = ConversationMetrics(namespace=self.settings.metrics.namespace)
            metrics.update_system_info(self.settings.env)
        self.metrics = metrics
        self._run_parser = parser_runner

        profile = self.store.get_active_profile()
        if profile is not None and profile.onboarding_completed:
            start_graph = GraphId.MAIN
        else:
            start_graph = GraphId.ONBOARDING

        self._engine = DialogueEngine(catalog, start_graph, session=session, metrics=metrics)

        if profile is not None:
            self._seed_profile_variables(profile)
        self._refresh_suggestions()
        self._bind_context()

        logger.info(
            "conversation_started",
            graph_id=self._engine.graph.graph_id.value,
            node_id=self._engine.session.current_node_id,
            has_profile=profile is not None,
        )

    @property
    def engine(self) -> DialogueEngine:
        return self._engine

    @property
    def session(self) -> Session:
        return self._engine.session

    @property
    def current_node(self) -> RenderableNode:
        """Node the host should currently display."""
        return self._engine.get_current_node()

    def handle_utterance(self, utterance: str) -> TurnResponse:
        """
        Process one user message.

        Nodes without a parser accept any input as an acknowledgement.

        Args:
            utterance: Raw user text

        Returns:
            TurnResponse for the host

        Raises:
            ActivityInProgressError: If an activity is still running
            MissingTransitionError: If the conversation already ended
        """
        self._bind_context()
        timer = self.metrics.time_turn() if self.metrics is not None else nullcontext()

        with timer:
            from_node = self._engine.session.current_node_id
            parser_type = self._engine.get_current_parser_type()

            if parser_type is None:
                result: ParserResult = ACKNOWLEDGEMENT
            else:
                result = self._run_parser(parser_type, utterance)
                if self.metrics is not None:
                    self.metrics.track_classifier_result(parser_type, result_tier(result))

            outcome = self._engine.submit_result(result)

            logger.info(
                "turn_processed",
                from_node=from_node,
                to_node=outcome.next_node.id,
                parser_type=parser_type,
                category=result.category,
                confidence=result.confidence,
                text_length=len(utterance),
                clarification=outcome.next_node.is_clarification,
            )

            profile_saved = self._finish_onboarding_if_complete()
            self._refresh_suggestions()

        trigger = outcome.activity_trigger
        return TurnResponse(
            node=outcome.next_node,
            result=result,
            activity_trigger=trigger,
            launch_delay_seconds=(
                self.settings.dialogue.activity_launch_delay_seconds if trigger else 0.0
            ),
            profile_saved=profile_saved,
            is_complete=outcome.next_node.node.is_end and not profile_saved,
        )

    def complete_activity(self, completed: bool = True) -> RenderableNode:
        """
        Resume the conversation after the host ran an activity.

        Args:
            completed: Whether the user completed the activity

        Returns:
            The activity's return node

        Raises:
            NoPendingActivityError: If no activity is running
        """
        activity = self._engine.session.pending_activity
        node = self._engine.resume_after_activity(completed)

        profile = self.store.get_active_profile()
        if profile is not None and activity:
            self.store.record_activity(profile.id, activity, completed)

        self._refresh_suggestions()
        return node

    def switch_to_alert(self) -> RenderableNode:
        """Enter the alert fast-path (e.g. on an incoming siren)."""
        return self.switch_graph(GraphId.ALERT)

    def switch_graph(self, graph_id: GraphId) -> RenderableNode:
        """Make another graph active, keeping session variables."""
        node = self._engine.switch_graph(graph_id)
        self._bind_context()
        return node

    def reset(self) -> RenderableNode:
        """Restart the active graph, keeping the stored profile."""
        self._engine.reset()
        profile = self.store.get_active_profile()
        if profile is not None:
            self._seed_profile_variables(profile)
        self._refresh_suggestions()
        return self._engine.get_current_node()

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _finish_onboarding_if_complete(self) -> bool:
        if self._engine.graph.graph_id != GraphId.ONBOARDING or not self._engine.is_complete():
            return False

        profile = UserProfile.from_variables(
            self._engine.session.variables,
            default_name=self.settings.dialogue.default_profile_name,
        )
        self.store.save_profile(profile)
        logger.info(
            "onboarding_completed",
            profile_id=profile.id,
            safe_space_type=profile.safe_space_type.value,
            accessibility_count=len(profile.accessibility_needs),
        )

        self.switch_graph(GraphId.MAIN)
        self._seed_profile_variables(profile)
        return True

    def _seed_profile_variables(self, profile: UserProfile) -> None:
        for name, value in profile.greeting_variables().items():
            if value:
                self._engine.set_variable(name, value)

    def _refresh_suggestions(self) -> None:
        catalog = self.settings.dialogue.activity_catalog
        untried = self._engine.unattempted_activities(catalog) or list(catalog)

        profile = self.store.get_active_profile()
        if profile is not None:
            preferred = [name for name in untried if name in profile.calming_preferences]
            untried = preferred + [name for name in untried if name not in preferred]

        suggestions = untried[: self.settings.dialogue.suggestion_count]
        self._engine.set_variable("suggestions", ", ".join(suggestions))

    def _bind_context(self) -> None:
        bind_session_context(
            str(self._engine.session.id),
            self._engine.graph.graph_id.value,
        )
