"""
Dialogue Services

Graph validation, graph catalog and the dialogue engine.
"""

from calme.services.dialogue.catalog import GraphCatalog
from calme.services.dialogue.engine import DialogueEngine
from calme.services.dialogue.errors import (
    ActivityInProgressError,
    DialogueError,
    GraphValidationError,
    MissingTransitionError,
    NoPendingActivityError,
    UnknownGraphError,
    UnknownNodeError,
)
from calme.services.dialogue.validator import GraphValidator, build_graph

__all__ = [
    "ActivityInProgressError",
    "DialogueEngine",
    "DialogueError",
    "GraphCatalog",
    "GraphValidationError",
    "GraphValidator",
    "MissingTransitionError",
    "NoPendingActivityError",
    "UnknownGraphError",
    "UnknownNodeError",
    "build_graph",
]
