"""
Declarative Graph Loader

Builds conversation graphs from plain mappings (as parsed from JSON
or YAML) and exports graphs back to that shape.

Document shape:

    {
        "graph_id": "alert",
        "start_node": "alert_start",
        "nodes": [
            {"id": "alert_focus", "kind": "question", "parser": "extractLocation",
             "content": "Where are you?",
             "next": [
                 {"when": {"type": "value_contains", "fragment": "home"}, "goto": "alert_home"},
                 {"default": true, "goto": "alert_clarify"}
             ]},
            {"id": "alert_home", "kind": "end", "content": "..."}
        ]
    }

``next`` is either a node id (direct transition) or an ordered list
of rules (conditional transition).
"""

from typing import Annotated, Any, Collection, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from calme.config.logging_config import get_logger
from calme.domain.enums.categories import GraphId, NodeKind
from calme.domain.models.conversation import (
    ConditionRule,
    Conditional,
    ConversationNode,
    DialogueGraph,
    Direct,
)
from calme.domain.models.predicates import (
    Always,
    AnyOf,
    CategoryIs,
    ConfidenceCompare,
    Predicate,
    ValueContains,
)
from calme.services.dialogue.errors import GraphValidationError
from calme.services.dialogue.validator import build_graph

logger = get_logger(__name__)


# Document Models

class CategoryIsModel(BaseModel):
    """Category equality."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["category_is"]
    category: str = Field(..., min_length=1)


class ValueContainsModel(BaseModel):
    """Case-insensitive containment on the extracted value."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["value_contains"]
    fragment: str = Field(..., min_length=1)


class ConfidenceModel(BaseModel):
    """Comparison on the result confidence."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["confidence"]
    op: Literal[">", ">=", "<", "<=", "=="]
    threshold: float = Field(..., ge=0.0, le=1.0)


class AlwaysModel(BaseModel):
    """Guaranteed-true predicate."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["always"]


class AnyOfModel(BaseModel):
    """Short-circuit OR."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["any_of"]
    predicates: list["PredicateModel"] = Field(..., min_length=1)


PredicateModel = Annotated[
    Union[CategoryIsModel, ValueContainsModel, ConfidenceModel, AlwaysModel, AnyOfModel],
    Field(discriminator="type"),
]

AnyOfModel.model_rebuild()


class RuleModel(BaseModel):
    """One conditional rule."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    goto: str = Field(..., min_length=1)
    when: Optional[PredicateModel] = None
    is_default: bool = Field(default=False, alias="default")

    @model_validator(mode="after")
    def check_condition(self) -> "RuleModel":
        """Require a predicate unless the rule is the default."""
        if self.when is None and not self.is_default:
            raise ValueError(f"rule to '{self.goto}' needs 'when' or 'default: true'")
        return self


class NodeModel(BaseModel):
    """One conversation node."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: str = Field(..., min_length=1)
    kind: NodeKind = NodeKind.QUESTION
    content: str = ""
    next: Union[str, list[RuleModel], None] = None
    parser_type: Optional[str] = Field(default=None, alias="parser")
    activity_name: Optional[str] = Field(default=None, alias="activity")
    capture: Optional[str] = None


class GraphModel(BaseModel):
    """A whole conversation graph."""

    model_config = ConfigDict(extra="forbid")

    graph_id: GraphId
    start_node: str = Field(..., min_length=1)
    nodes: list[NodeModel] = Field(..., min_length=1)


# Conversion

def _predicate(model: Any) -> Predicate:
    if isinstance(model, CategoryIsModel):
        return CategoryIs(model.category)
    if isinstance(model, ValueContainsModel):
        return ValueContains(model.fragment)
    if isinstance(model, ConfidenceModel):
        return ConfidenceCompare(model.op, model.threshold)
    if isinstance(model, AlwaysModel):
        return Always()
    return AnyOf(*(_predicate(p) for p in model.predicates))


def _node(model: NodeModel) -> ConversationNode:
    if model.next is None:
        transition = None
    elif isinstance(model.next, str):
        transition = Direct(model.next)
    else:
        transition = Conditional(
            rules=tuple(
                ConditionRule(
                    goto=rule.goto,
                    predicate=_predicate(rule.when) if rule.when is not None else None,
                    is_default=rule.is_default,
                )
                for rule in model.next
            )
        )

    return ConversationNode(
        id=model.id,
        kind=model.kind,
        content=model.content,
        next=transition,
        parser_type=model.parser_type,
        activity_name=model.activity_name,
        capture=model.capture,
    )


def load_graph(
    data: Mapping[str, Any],
    known_parsers: Optional[Collection[str]] = None,
    check_reachability: bool = True,
) -> DialogueGraph:
    """
    Build a validated graph from a plain mapping.

    Args:
        data: Graph document
        known_parsers: Parser keys nodes may reference
        check_reachability: Whether to warn about unreachable nodes

    Returns:
        Validated immutable graph

    Raises:
        GraphValidationError: If the document or the graph is malformed
    """
    try:
        document = GraphModel.model_validate(data)
    except ValidationError as e:
        graph_id = str(data.get("graph_id", "unknown")) if isinstance(data, Mapping) else "unknown"
        issues = [
            f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]
        logger.error("graph_document_invalid", graph_id=graph_id, issue_count=len(issues))
        raise GraphValidationError(graph_id, issues) from e

    return build_graph(
        document.graph_id,
        document.start_node,
        [_node(node) for node in document.nodes],
        known_parsers=known_parsers,
        check_reachability=check_reachability,
    )


# Export

def _predicate_to_dict(predicate: Predicate) -> dict:
    if isinstance(predicate, CategoryIs):
        return {"type": "category_is", "category": predicate.category}
    if isinstance(predicate, ValueContains):
        return {"type": "value_contains", "fragment": predicate.fragment}
    if isinstance(predicate, ConfidenceCompare):
        return {"type": "confidence", "op": predicate.op, "threshold": predicate.threshold}
    if isinstance(predicate, Always):
        return {"type": "always"}
    return {"type": "any_of", "predicates": [_predicate_to_dict(p) for p in predicate.predicates]}


def _node_to_dict(node: ConversationNode) -> dict:
    data: dict[str, Any] = {"id": node.id, "kind": node.kind.value, "content": node.content}

    if isinstance(node.next, Direct):
        data["next"] = node.next.target
    elif isinstance(node.next, Conditional):
        rules = []
        for rule in node.next.rules:
            entry: dict[str, Any] = {"goto": rule.goto}
            if rule.predicate is not None:
                entry["when"] = _predicate_to_dict(rule.predicate)
            if rule.is_default:
                entry["default"] = True
            rules.append(entry)
        data["next"] = rules

    if node.parser_type:
        data["parser"] = node.parser_type
    if node.activity_name:
        data["activity"] = node.activity_name
    if node.capture:
        data["capture"] = node.capture
    return data


def graph_to_dict(graph: DialogueGraph) -> dict:
    """Export a graph as a document accepted by ``load_graph``."""
    return {
        "graph_id": graph.graph_id.value,
        "start_node": graph.start_node,
        "nodes": [_node_to_dict(node) for node in graph.nodes.values()],
    }
