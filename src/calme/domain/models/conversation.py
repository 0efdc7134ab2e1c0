"""
Conversation Graph Model

Immutable description of a conversation: nodes, the transitions
between them, and the values the engine hands back to the host
(renderable nodes and activity triggers).

ARCHITECTURE: Graphs are data only. Construction goes through the
graph validator so that malformed graphs fail at load time rather
than in the middle of a conversation.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Union

from calme.domain.enums.categories import GraphId, NodeKind
from calme.domain.models.predicates import Predicate


PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\}")


@dataclass(frozen=True)
class Direct:
    """Unconditional transition to ``target``."""

    target: str

    def targets(self) -> tuple[str, ...]:
        return (self.target,)


@dataclass(frozen=True)
class ConditionRule:
    """
    One branch of a conditional transition.

    Attributes:
        goto: Target node id
        predicate: Condition over the parser result (None for a pure default)
        is_default: Whether this rule matches unconditionally
    """

    goto: str
    predicate: Optional[Predicate] = None
    is_default: bool = False

    def __post_init__(self) -> None:
        if self.predicate is None and not self.is_default:
            raise ValueError(f"Rule to '{self.goto}' needs a predicate or is_default=True")

    @property
    def always_matches(self) -> bool:
        """Whether this rule can never fail to match."""
        return self.is_default or (
            self.predicate is not None and self.predicate.is_tautology
        )


@dataclass(frozen=True)
class Conditional:
    """Ordered list of rules; the first matching rule wins."""

    rules: tuple[ConditionRule, ...]

    def targets(self) -> tuple[str, ...]:
        return tuple(rule.goto for rule in self.rules)

    @property
    def has_default(self) -> bool:
        return any(rule.always_matches for rule in self.rules)


Transition = Union[Direct, Conditional]


@dataclass(frozen=True)
class ConversationNode:
    """
    A single step of a conversation.

    Attributes:
        id: Unique node key within its graph
        kind: question, activity or end
        content: Template text with {var} placeholders
        next: Transition (required unless kind is end)
        parser_type: Parser selector for free-text answers
        activity_name: Activity to launch (required iff kind is activity)
        capture: Session variable that stores the answer's value
    """

    id: str
    kind: NodeKind
    content: str = ""
    next: Optional[Transition] = None
    parser_type: Optional[str] = None
    activity_name: Optional[str] = None
    capture: Optional[str] = None

    @property
    def is_end(self) -> bool:
        return self.kind == NodeKind.END

    @property
    def is_activity(self) -> bool:
        return self.kind == NodeKind.ACTIVITY

    def placeholders(self) -> list[str]:
        """Variable names referenced by the content template."""
        return PLACEHOLDER_PATTERN.findall(self.content)


@dataclass(frozen=True)
class RenderableNode:
    """
    A node as presented to the host.

    ``content`` has every known placeholder substituted. Transient
    clarification nodes carry ``is_clarification=True``.
    """

    node: ConversationNode
    content: str
    is_clarification: bool = False

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def kind(self) -> NodeKind:
        return self.node.kind

    @property
    def parser_type(self) -> Optional[str]:
        return self.node.parser_type

    @property
    def activity_name(self) -> Optional[str]:
        return self.node.activity_name

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "content": self.content,
            "parser_type": self.parser_type,
            "activity_name": self.activity_name,
            "is_clarification": self.is_clarification,
        }


@dataclass(frozen=True)
class ActivityTrigger:
    """
    Signal for the host to run an activity.

    Attributes:
        activity_name: Activity the host should launch
        return_node: Node the conversation resumes at afterwards
    """

    activity_name: str
    return_node: str

    def to_dict(self) -> dict:
        return {
            "activity_name": self.activity_name,
            "return_node": self.return_node,
        }


@dataclass(frozen=True)
class TurnOutcome:
    """Result of submitting a parser result to the engine."""

    next_node: RenderableNode
    activity_trigger: Optional[ActivityTrigger] = None

    def to_dict(self) -> dict:
        return {
            "next_node": self.next_node.to_dict(),
            "activity_trigger": (
                self.activity_trigger.to_dict() if self.activity_trigger else None
            ),
        }


@dataclass(frozen=True)
class DialogueGraph:
    """
    Immutable, validated conversation graph.

    Build graphs through ``calme.services.dialogue.validator.build_graph``
    (or ``calme.flows.loader.load_graph``), which run the static
    validator before returning.

    Attributes:
        graph_id: Graph identifier
        start_node: Id of the entry node
        nodes: Read-only mapping of node id to node
    """

    graph_id: GraphId
    start_node: str
    nodes: Mapping[str, ConversationNode] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "nodes", MappingProxyType(dict(self.nodes)))

    def get(self, node_id: str) -> Optional[ConversationNode]:
        return self.nodes.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)
