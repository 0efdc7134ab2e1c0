"""
CALMe Domain Layer

Conversation graph, session, profile and parser-result types.
These models carry no classification or traversal logic.
"""

from calme.domain.enums.categories import GraphId, NodeKind
from calme.domain.models.parser_output import ClassificationResult, ExtractionResult
from calme.domain.models.conversation import ConversationNode, DialogueGraph
from calme.domain.models.session import Session
from calme.domain.models.profile import UserProfile

__all__ = [
    "ClassificationResult",
    "ConversationNode",
    "DialogueGraph",
    "ExtractionResult",
    "GraphId",
    "NodeKind",
    "Session",
    "UserProfile",
]
