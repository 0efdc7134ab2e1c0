"""Conversation orchestration."""

from calme.services.orchestration.conversation_orchestrator import (
    ACKNOWLEDGEMENT,
    ConversationOrchestrator,
    TurnResponse,
)

__all__ = ["ACKNOWLEDGEMENT", "ConversationOrchestrator", "TurnResponse"]
