"""
Flow Builders

Small constructors that keep the built-in conversation tables
readable. They only create domain values; validation happens when
the table is passed to ``build_graph``.
"""

from typing import Optional, Union

from calme.domain.enums.categories import NodeKind
from calme.domain.models.conversation import (
    ConditionRule,
    Conditional,
    ConversationNode,
    Direct,
    Transition,
)
from calme.domain.models.predicates import AnyOf, CategoryIs, ConfidenceCompare, ValueContains


NextSpec = Union[str, Transition]


def _transition(next_spec: NextSpec) -> Transition:
    if isinstance(next_spec, str):
        return Direct(next_spec)
    return next_spec


def question(
    node_id: str,
    content: str,
    next_spec: NextSpec,
    parser: Optional[str] = None,
    capture: Optional[str] = None,
) -> ConversationNode:
    """Question node; without a parser it is a statement the host acknowledges."""
    return ConversationNode(
        id=node_id,
        kind=NodeKind.QUESTION,
        content=content,
        next=_transition(next_spec),
        parser_type=parser,
        capture=capture,
    )


def activity(node_id: str, content: str, activity_name: str, return_node: str) -> ConversationNode:
    """Activity node resuming at ``return_node``."""
    return ConversationNode(
        id=node_id,
        kind=NodeKind.ACTIVITY,
        content=content,
        next=Direct(return_node),
        activity_name=activity_name,
    )


def end(node_id: str, content: str) -> ConversationNode:
    """Terminal node."""
    return ConversationNode(id=node_id, kind=NodeKind.END, content=content)


def branch(*rules: ConditionRule) -> Conditional:
    """Conditional transition; rules are evaluated in order."""
    return Conditional(rules=tuple(rules))


def when(*categories: str, goto: str) -> ConditionRule:
    """Rule matching any of the given categories."""
    predicates = [CategoryIs(str(category)) for category in categories]
    predicate = predicates[0] if len(predicates) == 1 else AnyOf(*predicates)
    return ConditionRule(goto=goto, predicate=predicate)


def contains(*fragments: str, goto: str) -> ConditionRule:
    """Rule matching an extracted value containing any fragment."""
    predicates = [ValueContains(fragment) for fragment in fragments]
    predicate = predicates[0] if len(predicates) == 1 else AnyOf(*predicates)
    return ConditionRule(goto=goto, predicate=predicate)


def confidence_above(threshold: float, goto: str) -> ConditionRule:
    """Rule matching results more confident than ``threshold``."""
    return ConditionRule(goto=goto, predicate=ConfidenceCompare(">", threshold))


def otherwise(goto: str) -> ConditionRule:
    """Default rule."""
    return ConditionRule(goto=goto, is_default=True)
