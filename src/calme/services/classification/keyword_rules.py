"""
Keyword Priority Tables

Ordered keyword groups for the first tier of every classifier.
The first group with a hit wins outright, so declaration order is
part of each parser's contract: danger phrases are checked ahead of
safe phrases, severe stress ahead of mild stress.

CLINICAL_REVIEW_REQUIRED: Keyword lists and their confidences are
heuristics and require review by crisis-support professionals
before production use.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Sequence

from calme.domain.enums.categories import (
    ActivityPreference,
    SafetyCategory,
    StressCategory,
    YesNoCategory,
)


_APOSTROPHES = re.compile(r"['‘’`]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """
    Normalize an utterance for keyword matching.

    Lower-cases, drops apostrophes ("can't" -> "cant") and collapses
    whitespace.
    """
    text = _APOSTROPHES.sub("", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


# Keywords at least this long also match as word prefixes ("danger" in
# "dangerous"); shorter ones ("no", "ok", "car") only as whole words
PREFIX_MIN_LENGTH = 5


def _phrase_pattern(phrase: str) -> re.Pattern:
    if len(phrase) >= PREFIX_MIN_LENGTH:
        return re.compile(rf"(?<![a-z0-9]){re.escape(phrase)}")
    return re.compile(rf"(?<![a-z0-9]){re.escape(phrase)}s?(?![a-z0-9])")


@dataclass(frozen=True)
class KeywordGroup:
    """
    One category of a keyword priority table.

    Keywords match at word starts of the normalized input. Long
    keywords also match inflected forms ("panic" in "panicked"); short
    ones match whole words with an optional plural "s".

    Attributes:
        category: Category returned on a hit
        keywords: Keywords checked in order
        confidence: Confidence returned on a hit
        exclusions: Phrases that disqualify the whole group
    """

    category: str
    keywords: tuple[str, ...]
    confidence: float
    exclusions: tuple[str, ...] = ()
    _patterns: tuple[re.Pattern, ...] = field(default=(), init=False, repr=False, compare=False)
    _exclusion_patterns: tuple[re.Pattern, ...] = field(default=(), init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_patterns", tuple(_phrase_pattern(k) for k in self.keywords))
        object.__setattr__(
            self, "_exclusion_patterns", tuple(_phrase_pattern(e) for e in self.exclusions)
        )

    def is_excluded(self, normalized_text: str) -> bool:
        """Whether an exclusion phrase disqualifies the group."""
        return any(p.search(normalized_text) for p in self._exclusion_patterns)

    def find(self, normalized_text: str) -> Optional[str]:
        """Return the first keyword found in the text, if any."""
        if self.is_excluded(normalized_text):
            return None
        for keyword, pattern in zip(self.keywords, self._patterns):
            if pattern.search(normalized_text):
                return keyword
        return None


@dataclass(frozen=True)
class KeywordMatch:
    """A hit of the keyword tier."""

    group: KeywordGroup
    keyword: str

    @property
    def category(self) -> str:
        return str(self.group.category)

    @property
    def confidence(self) -> float:
        return self.group.confidence


def first_match(groups: Sequence[KeywordGroup], text: str) -> Optional[KeywordMatch]:
    """
    Find the first group with a keyword hit.

    Args:
        groups: Ordered keyword groups
        text: Raw utterance (normalized here)

    Returns:
        The winning group and keyword, or None
    """
    normalized = normalize(text)
    for group in groups:
        keyword = group.find(normalized)
        if keyword is not None:
            return KeywordMatch(group=group, keyword=keyword)
    return None


# =============================================================================
# SAFETY
# =============================================================================

# SAFETY_CRITICAL: DANGER must stay ahead of SAFE
SAFETY_GROUPS: tuple[KeywordGroup, ...] = (
    KeywordGroup(
        category=SafetyCategory.DANGER,
        keywords=(
            "trapped", "help", "not safe", "unsafe", "dont feel safe",
            "danger", "in danger", "at risk", "exposed", "vulnerable",
            "emergency", "stuck", "injured", "hurt", "hurting", "bleeding",
            "no", "not protected", "no shelter",
        ),
        confidence=0.95,
        exclusions=("not in danger", "no danger", "not trapped", "not hurt", "not stuck"),
    ),
    KeywordGroup(
        category=SafetyCategory.SAFE,
        keywords=(
            "yes", "safe", "protected", "secure", "sheltered", "shelter",
            "miklat", "mamad", "safe room", "im good", "all good", "im ok",
            "im okay",
        ),
        confidence=0.9,
    ),
    KeywordGroup(
        category=SafetyCategory.UNSURE,
        keywords=(
            "maybe", "not sure", "unsure", "i think", "possibly",
            "sort of", "kind of", "dont know",
        ),
        confidence=0.7,
    ),
)


# =============================================================================
# STRESS
# =============================================================================

# Severity first, then situational context, then calm
STRESS_GROUPS: tuple[KeywordGroup, ...] = (
    KeywordGroup(
        category=StressCategory.HIGH,
        keywords=(
            "crisis", "panic", "panicking", "scared", "terrified", "terror",
            "overwhelm", "cant breathe", "heart is racing", "heart racing",
            "heart pounding", "freaking out", "shaking", "help",
            "very stressed", "really stressed", "extremely stressed",
            "cant calm down", "struggling",
        ),
        confidence=0.95,
        exclusions=("not scared", "not panicking", "not overwhelm"),
    ),
    KeywordGroup(
        category=StressCategory.MODERATE,
        keywords=(
            "anxious", "worried", "nervous", "uneasy", "uncomfortable",
            "tense", "stressed", "somewhat", "a bit", "on edge",
            "not okay", "not ok", "not fine", "not good",
        ),
        confidence=0.85,
        exclusions=("not stressed", "not anxious", "not worried", "not nervous"),
    ),
    KeywordGroup(
        category=StressCategory.IN_TRANSIT,
        keywords=(
            "car", "train", "bus", "vehicle", "driving", "transit",
            "transportation", "taxi", "on the road",
        ),
        confidence=0.9,
    ),
    KeywordGroup(
        category=StressCategory.OUTDOOR_WORKER,
        keywords=(
            "outside", "outdoors", "outdoor", "construction",
            "working outside", "open space", "in the field",
        ),
        confidence=0.85,
    ),
    KeywordGroup(
        category=StressCategory.CAREGIVER,
        keywords=(
            "caregiver", "helping someone", "supporting", "care facility",
            "nursing", "taking care", "my kid", "my children",
        ),
        confidence=0.85,
    ),
    KeywordGroup(
        category=StressCategory.NONE,
        keywords=(
            "good", "fine", "okay", "ok", "alright", "relaxed", "calm",
            "better", "great", "exploring", "curious", "looking around",
            "just checking",
        ),
        confidence=0.9,
    ),
)


# =============================================================================
# YES / NO
# =============================================================================

# Hedges first so "not sure" is not read as "sure"
YES_NO_GROUPS: tuple[KeywordGroup, ...] = (
    KeywordGroup(
        category=YesNoCategory.MAYBE,
        keywords=(
            "maybe", "perhaps", "possibly", "not sure", "unsure",
            "dont know", "might",
        ),
        confidence=0.7,
    ),
    KeywordGroup(
        category=YesNoCategory.YES,
        keywords=(
            "yes", "yeah", "yep", "yup", "sure", "definitely", "absolutely",
            "correct", "right", "exactly", "of course", "ok", "okay",
            "please", "ready",
        ),
        confidence=0.9,
        exclusions=("not right", "not now", "not really", "not ready"),
    ),
    KeywordGroup(
        category=YesNoCategory.NO,
        keywords=(
            "no", "nope", "nah", "never", "negative", "wrong", "not really",
            "dont want", "dont think so", "skip", "not now", "not right",
            "not ready",
        ),
        confidence=0.9,
    ),
)


# =============================================================================
# ACTIVITY PREFERENCE
# =============================================================================

ACTIVITY_CONFIDENCE = 0.85

ACTIVITY_GROUPS: tuple[KeywordGroup, ...] = (
    KeywordGroup(ActivityPreference.BREATHING, ("breath", "breathing", "breathe"), ACTIVITY_CONFIDENCE),
    KeywordGroup(ActivityPreference.STRETCHING, ("stretch", "stretching", "exercise"), ACTIVITY_CONFIDENCE),
    KeywordGroup(ActivityPreference.MATCHING_CARDS, ("game", "match", "matching", "play", "card", "memory"), ACTIVITY_CONFIDENCE),
    KeywordGroup(ActivityPreference.SUDOKU, ("sudoku", "number", "puzzle", "logic"), ACTIVITY_CONFIDENCE),
    KeywordGroup(ActivityPreference.PUZZLE, ("jigsaw", "piece"), ACTIVITY_CONFIDENCE),
    KeywordGroup(ActivityPreference.PAINT, ("draw", "drawing", "creative", "art", "paint", "painting"), ACTIVITY_CONFIDENCE),
    KeywordGroup(ActivityPreference.GROUNDING, ("ground", "grounding", "5-4-3-2-1"), ACTIVITY_CONFIDENCE),
    KeywordGroup(ActivityPreference.MUSIC, ("music", "song", "listen", "audio", "sound"), ACTIVITY_CONFIDENCE),
    KeywordGroup(ActivityPreference.STORY, ("story", "tale", "narrative"), ACTIVITY_CONFIDENCE),
)

DECLINE_KEYWORDS: KeywordGroup = KeywordGroup(
    category=ActivityPreference.NO_ACTIVITY,
    keywords=("nothing", "none", "no thanks", "not now"),
    confidence=0.8,
)
