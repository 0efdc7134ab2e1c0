"""
Dialogue Engine Errors

Every error the engine raises derives from ``DialogueError`` so a
host can catch the whole family at its boundary.
"""

from typing import Optional, Sequence


class DialogueError(Exception):
    """Base exception for dialogue engine errors."""

    def __init__(self, message: str, node_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.node_id = node_id


class UnknownNodeError(DialogueError):
    """A node id was requested that does not exist in the active graph."""

    def __init__(self, node_id: str, graph_id: Optional[str] = None) -> None:
        where = f" in graph '{graph_id}'" if graph_id else ""
        super().__init__(f"Unknown node '{node_id}'{where}", node_id=node_id)
        self.graph_id = graph_id


class MissingTransitionError(DialogueError):
    """An answer was submitted at a node that has no outgoing transition."""

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Node '{node_id}' has no outgoing transition", node_id=node_id)


class ActivityInProgressError(DialogueError):
    """An answer was submitted while an activity is still running."""

    def __init__(self, activity_name: Optional[str], return_node: str) -> None:
        super().__init__(
            f"Activity '{activity_name}' is in progress; resume before submitting answers",
            node_id=return_node,
        )
        self.activity_name = activity_name


class NoPendingActivityError(DialogueError):
    """Resume was requested but no activity is pending."""

    def __init__(self) -> None:
        super().__init__("No activity is pending")


class UnknownGraphError(DialogueError):
    """A graph id was requested that the catalog does not hold."""

    def __init__(self, graph_id: str) -> None:
        super().__init__(f"Unknown graph '{graph_id}'")
        self.graph_id = graph_id


class GraphValidationError(DialogueError):
    """
    A graph failed static validation.

    Attributes:
        graph_id: Graph that was rejected
        issues: Every problem found, one line each
    """

    def __init__(self, graph_id: str, issues: Sequence[str]) -> None:
        self.graph_id = graph_id
        self.issues = list(issues)
        summary = "; ".join(self.issues[:5])
        more = f" (+{len(self.issues) - 5} more)" if len(self.issues) > 5 else ""
        super().__init__(f"Graph '{graph_id}' is invalid: {summary}{more}")
