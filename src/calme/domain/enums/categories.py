"""
Dialogue and Classifier Enumerations

Node kinds, graph identifiers and the category vocabularies that
classifiers emit and conversation graphs branch on.

The category values are part of the graph data contract: renaming
one requires updating every graph that compares against it.
"""

from enum import StrEnum


class NodeKind(StrEnum):
    """
    Kind of a dialogue node.

    A "decision" step is a question whose transition is conditional.
    """

    QUESTION = "question"
    """Shows content and waits for an answer (or an acknowledgement)."""

    ACTIVITY = "activity"
    """Hands off to an external calming activity, then resumes."""

    END = "end"
    """Terminal node. The conversation is complete."""


class GraphId(StrEnum):
    """Identifiers of the built-in conversation graphs."""

    ONBOARDING = "onboarding"
    MAIN = "main"
    ALERT = "alert"


class ResultKind(StrEnum):
    """Discriminator of a classifier result."""

    CLASSIFICATION = "classification"
    EXTRACTION = "extraction"


class SafetyCategory(StrEnum):
    """Categories emitted by the safety classifier."""

    DANGER = "DANGER"
    SAFE = "SAFE"
    UNSURE = "UNSURE"


class StressCategory(StrEnum):
    """
    Categories emitted by the stress classifier.

    The three context categories describe the situation rather
    than a stress level; the main flow routes them to dedicated
    reassurance nodes before the shared checks.
    """

    HIGH = "high_stress"
    MODERATE = "moderate_stress"
    NONE = "no_stress"
    IN_TRANSIT = "in_transit"
    OUTDOOR_WORKER = "outdoor_worker"
    CAREGIVER = "caregiver"
    UNCERTAIN = "uncertain"


class YesNoCategory(StrEnum):
    """Categories emitted by the yes/no parser."""

    YES = "yes"
    NO = "no"
    MAYBE = "maybe"
    UNCLEAR = "unclear"


class ActivityPreference(StrEnum):
    """
    Categories emitted by the activity preference parser.

    Values match the activity names the host's activity runner knows.
    """

    BREATHING = "breathing"
    STRETCHING = "stretching"
    MATCHING_CARDS = "matching-cards"
    SUDOKU = "sudoku"
    PUZZLE = "puzzle"
    PAINT = "paint"
    GROUNDING = "grounding"
    MUSIC = "music"
    STORY = "story"
    NO_ACTIVITY = "no_activity"
    UNCLEAR = "unclear_activity"


class SafeSpaceType(StrEnum):
    """Kinds of designated protected space."""

    MIKLAT = "miklat"
    """Public or building shelter."""

    MAMAD = "mamad"
    """Reinforced room inside a home."""

    STAIRWAY = "stairway"
    """Inner stairwell of a building."""

    OTHER = "other"
