"""Domain models package."""

from calme.domain.models.parser_output import (
    ClassificationResult,
    ExtractionResult,
    ParserResult,
)
from calme.domain.models.predicates import (
    Always,
    AnyOf,
    CategoryIs,
    ConfidenceCompare,
    Predicate,
    ValueContains,
)
from calme.domain.models.conversation import (
    ActivityTrigger,
    ConditionRule,
    Conditional,
    ConversationNode,
    DialogueGraph,
    Direct,
    RenderableNode,
    Transition,
    TurnOutcome,
)
from calme.domain.models.session import Session
from calme.domain.models.profile import UserProfile, parse_duration_seconds

__all__ = [
    # Parser output contract
    "ClassificationResult",
    "ExtractionResult",
    "ParserResult",
    # Predicates
    "Always",
    "AnyOf",
    "CategoryIs",
    "ConfidenceCompare",
    "Predicate",
    "ValueContains",
    # Conversation graph
    "ActivityTrigger",
    "ConditionRule",
    "Conditional",
    "ConversationNode",
    "DialogueGraph",
    "Direct",
    "RenderableNode",
    "Transition",
    "TurnOutcome",
    # Session and profile
    "Session",
    "UserProfile",
    "parse_duration_seconds",
]
