"""
Graph Validator

Static checks run once when a conversation graph is built. A graph
that passes cannot stall the engine at runtime: every target exists,
every conditional has a guaranteed fallback and node kinds carry the
fields they need.

SAFETY_NOTE: A stalled conversation during an alert leaves a user
without guidance. Hard errors here are deliberate and must never be
downgraded to warnings.
"""

from collections import deque
from typing import Collection, Iterable, Optional

from calme.config.logging_config import get_logger
from calme.domain.enums.categories import GraphId, NodeKind
from calme.domain.models.conversation import (
    Conditional,
    ConversationNode,
    DialogueGraph,
    Direct,
)
from calme.services.dialogue.errors import GraphValidationError


logger = get_logger(__name__)


class GraphValidator:
    """
    Validates conversation graphs.

    Usage:
        validator = GraphValidator(known_parsers=PARSERS.keys())
        issues = validator.find_issues(graph)
    """

    def __init__(
        self,
        known_parsers: Optional[Collection[str]] = None,
        check_reachability: bool = True,
    ) -> None:
        """
        Initialize validator.

        Args:
            known_parsers: Parser keys nodes may reference (None skips the check)
            check_reachability: Whether to warn about unreachable nodes
        """
        self._known_parsers = frozenset(known_parsers) if known_parsers is not None else None
        self._check_reachability = check_reachability

    def find_issues(self, graph: DialogueGraph) -> list[str]:
        """
        Collect every structural problem of a graph.

        Args:
            graph: Graph to check

        Returns:
            Human-readable issues; empty when the graph is valid
        """
        issues: list[str] = []

        if graph.start_node not in graph:
            issues.append(f"start node '{graph.start_node}' does not exist")

        for node_id, node in graph.nodes.items():
            if node_id != node.id:
                issues.append(f"node registered as '{node_id}' has id '{node.id}'")
            issues.extend(self._check_node(graph, node))

        return issues

    def find_unreachable(self, graph: DialogueGraph) -> list[str]:
        """Node ids that cannot be reached from the start node."""
        if graph.start_node not in graph:
            return []

        seen = {graph.start_node}
        queue = deque([graph.start_node])
        while queue:
            node = graph.nodes[queue.popleft()]
            if node.next is None:
                continue
            for target in node.next.targets():
                if target in graph and target not in seen:
                    seen.add(target)
                    queue.append(target)

        return sorted(set(graph.nodes) - seen)

    def validate(self, graph: DialogueGraph) -> DialogueGraph:
        """
        Raise if the graph has issues, otherwise return it unchanged.

        Raises:
            GraphValidationError: With every issue found
        """
        issues = self.find_issues(graph)
        if issues:
            logger.error(
                "graph_validation_failed",
                graph_id=graph.graph_id.value,
                issue_count=len(issues),
            )
            raise GraphValidationError(graph.graph_id.value, issues)

        if self._check_reachability:
            unreachable = self.find_unreachable(graph)
            if unreachable:
                logger.warning(
                    "graph_unreachable_nodes",
                    graph_id=graph.graph_id.value,
                    nodes=unreachable,
                )

        logger.debug("graph_validated", graph_id=graph.graph_id.value, nodes=len(graph))
        return graph

    def _check_node(self, graph: DialogueGraph, node: ConversationNode) -> list[str]:
        issues: list[str] = []
        where = f"node '{node.id}'"

        if node.kind == NodeKind.END:
            if node.next is not None:
                issues.append(f"{where}: end node must not have a transition")
        elif node.next is None:
            issues.append(f"{where}: {node.kind.value} node needs a transition")

        if node.kind == NodeKind.ACTIVITY:
            if not node.activity_name:
                issues.append(f"{where}: activity node needs an activity_name")
            if isinstance(node.next, Conditional):
                issues.append(f"{where}: activity node must use a direct transition")
        elif node.activity_name:
            issues.append(f"{where}: only activity nodes may name an activity")

        if isinstance(node.next, Direct):
            if node.next.target not in graph:
                issues.append(f"{where}: transition target '{node.next.target}' does not exist")
        elif isinstance(node.next, Conditional):
            if not node.next.rules:
                issues.append(f"{where}: conditional transition has no rules")
            elif not node.next.has_default:
                issues.append(f"{where}: conditional transition has no default rule")
            for target in node.next.targets():
                if target not in graph:
                    issues.append(f"{where}: rule target '{target}' does not exist")

        if (
            node.parser_type is not None
            and self._known_parsers is not None
            and node.parser_type not in self._known_parsers
        ):
            issues.append(f"{where}: unknown parser type '{node.parser_type}'")

        return issues


def build_graph(
    graph_id: GraphId,
    start_node: str,
    nodes: Iterable[ConversationNode],
    known_parsers: Optional[Collection[str]] = None,
    check_reachability: bool = True,
) -> DialogueGraph:
    """
    Assemble and validate a conversation graph.

    Args:
        graph_id: Identifier of the graph
        start_node: Id of the entry node
        nodes: Nodes of the graph (ids must be unique)
        known_parsers: Parser keys nodes may reference
        check_reachability: Whether to warn about unreachable nodes

    Returns:
        Validated immutable graph

    Raises:
        GraphValidationError: If the graph is malformed
    """
    by_id: dict[str, ConversationNode] = {}
    duplicates: list[str] = []
    for node in nodes:
        if node.id in by_id:
            duplicates.append(f"duplicate node id '{node.id}'")
        by_id[node.id] = node

    graph = DialogueGraph(graph_id=graph_id, start_node=start_node, nodes=by_id)
    validator = GraphValidator(known_parsers=known_parsers, check_reachability=check_reachability)

    if duplicates:
        raise GraphValidationError(graph_id.value, duplicates + validator.find_issues(graph))

    return validator.validate(graph)
