"""
CALMe - Supportive Conversation Core

This package provides the dialogue graph engine and the rule-based
semantic classifiers behind the CALMe support conversation, a short
structured dialogue for people under acute stress (for example right
after a rocket-alert siren).

IMPORTANT: This is a safety-sensitive system. Conversation graphs are
validated at load time and classifiers never guess below threshold.
"""

__version__ = "0.1.0"
__author__ = "CALMe Engineering Team"
