"""
Value Extractors

Pure functions pulling a free-form value (location, name, duration,
...) out of an utterance. Each extractor tries an ordered list of
strategies; the first strategy producing a non-empty value wins and
its tier sets the confidence.

ARCHITECTURE: Same contract as the classifiers: stateless, equal
results for equal input, clarification below the minimum confidence.

PRIVACY: Extracted names, places and phone numbers are personal
data. Never log extracted values.
"""

import re
from typing import Callable, Optional, Sequence

from calme.domain.models.parser_output import ExtractionResult
from calme.services.classification.keyword_rules import KeywordGroup, normalize


MIN_CONFIDENCE: dict[str, float] = {
    "extractLocation": 0.3,
    "extractName": 0.3,
    "extractDuration": 0.3,
    "extractAccessibilityNeeds": 0.15,
    "extractCommunicationPreference": 0.15,
    "extractContact": 0.3,
    "extractChangeRequest": 0.15,
}

LOCATION_PROMPT = "Where exactly are you right now? For example: at home, in a shelter, or somewhere else?"
NAME_PROMPT = "I didn't catch your name. What should I call you?"
DURATION_PROMPT = "How long does it take you to get there? For example: 30 seconds, 1 minute, 2 minutes?"
ACCESSIBILITY_PROMPT = "Do you need any special assistance during emergencies?"
COMMUNICATION_PROMPT = "Would you prefer voice instructions, visual text, or both?"
CONTACT_PROMPT = "What's their name and phone number?"
CHANGE_PROMPT = "What would you like to change: your name, safe space, timing, or calming preferences?"

# A strategy returns (value, method, confidence) or None
Strategy = Callable[[str], Optional[tuple[str, str, float]]]


def _run_strategies(
    utterance: str,
    strategies: Sequence[Strategy],
    information_type: str,
    min_confidence: float,
    prompt: str,
) -> ExtractionResult:
    """Apply strategies in order; the first non-empty value wins."""
    if not utterance.strip():
        return _no_value(information_type, prompt)

    for strategy in strategies:
        found = strategy(utterance)
        if found is None:
            continue
        value, method, confidence = found
        if not value:
            continue
        if confidence < min_confidence:
            return ExtractionResult(
                extracted_value=value,
                confidence=confidence,
                information_type=information_type,
                extraction_method=method,
                needs_clarification=True,
                clarification_prompt=prompt,
            )
        return ExtractionResult(
            extracted_value=value,
            confidence=confidence,
            information_type=information_type,
            extraction_method=method,
        )

    return _no_value(information_type, prompt)


def _no_value(information_type: str, prompt: str) -> ExtractionResult:
    return ExtractionResult(
        extracted_value="",
        confidence=0.0,
        information_type=information_type,
        extraction_method="none",
        needs_clarification=True,
        clarification_prompt=prompt,
    )


_TRAILING_PUNCTUATION = re.compile(r"^[\s\"'(]+|[\s\"'.,!?;:)]+$")


def _clean(value: str) -> str:
    return _TRAILING_PUNCTUATION.sub("", value)


# =============================================================================
# LOCATION
# =============================================================================

_NAMED_PLACE = re.compile(
    r"\b(?i:at|in|inside|near|by|to|from)\s+([A-Z][\w'-]*(?:\s+[A-Z][\w'-]*)*)"
)

_PREPOSITIONAL_PHRASE = re.compile(
    r"\b(?:at|in|inside|near|by|under|on)\s+(?P<place>.+?)"
    r"(?=\s+(?:at|in|on|near|by|with|and|but|because|so|right|now)\b|[,.!?;]|$)",
    re.I,
)

# Phrases after a preposition that are not places ("in a panic", "on my way")
_NON_LOCATION_HEADS: frozenset[str] = frozenset({
    "panic", "hurry", "trouble", "danger", "shock", "pain", "moment",
    "minute", "while", "time", "fact", "general", "case", "way", "fear",
    "tears", "bed", "touch",
})

LOCATION_NOUNS = KeywordGroup(
    category="location",
    keywords=(
        "miklat", "mamad", "safe room", "reinforced room", "protected room",
        "shelter", "bunker", "stairwell", "stairway", "staircase", "stairs",
        "basement", "home", "house", "apartment", "flat", "car", "vehicle",
        "bus", "train", "taxi", "office", "work", "school", "street",
        "park", "outside", "hallway", "corridor", "kitchen", "bedroom",
        "bathroom", "mall", "store", "hospital", "parking",
    ),
    confidence=0.8,
)

_ADDRESS = re.compile(
    r"\b\d+\w*\s+(?:[A-Za-z]+\s+){0,3}?(?:street|st|road|rd|avenue|ave|boulevard|blvd|lane|ln)\b",
    re.I,
)

_FILLERS: frozenset[str] = frozenset({
    "hmm", "hm", "um", "uh", "erm", "yes", "no", "ok", "okay", "idk",
    "what", "huh", "dunno", "?",
})


def _named_place(utterance: str) -> Optional[tuple[str, str, float]]:
    match = _NAMED_PLACE.search(utterance)
    if match is None:
        return None
    return _clean(match.group(1)), "named_place", 0.9


def _prepositional_phrase(utterance: str) -> Optional[tuple[str, str, float]]:
    for match in _PREPOSITIONAL_PHRASE.finditer(utterance):
        place = _clean(match.group("place"))
        words = place.lower().split()
        if words and words[-1] not in _NON_LOCATION_HEADS:
            return place, "prepositional_phrase", 0.85
    return None


def _location_noun(utterance: str) -> Optional[tuple[str, str, float]]:
    keyword = LOCATION_NOUNS.find(normalize(utterance))
    if keyword is None:
        return None
    return keyword, "location_noun", LOCATION_NOUNS.confidence


def _address(utterance: str) -> Optional[tuple[str, str, float]]:
    match = _ADDRESS.search(utterance)
    if match is None:
        return None
    return match.group(0), "address_pattern", 0.75


def _location_full_text(utterance: str) -> Optional[tuple[str, str, float]]:
    text = _clean(utterance)
    if not text:
        return None
    informative = len(text) > 3 and normalize(text) not in _FILLERS
    return text, "full_text", 0.5 if informative else 0.2


def extract_location(utterance: str) -> ExtractionResult:
    """
    Extract where the user is.

    Strategies: capitalized place name after a preposition (0.9),
    prepositional phrase (0.85), common location noun (0.8), street
    address (0.75), whole utterance (0.5, or 0.2 for filler).

    Args:
        utterance: Raw user text

    Returns:
        ExtractionResult with information_type "location"
    """
    return _run_strategies(
        utterance,
        (_named_place, _prepositional_phrase, _location_noun, _address, _location_full_text),
        "location",
        MIN_CONFIDENCE["extractLocation"],
        LOCATION_PROMPT,
    )


# =============================================================================
# NAME
# =============================================================================

_EXPLICIT_NAME = re.compile(r"\b(?:my name is|my names|call me|name is)\s+([A-Za-z][\w'-]*)", re.I)
_INTRODUCED_NAME = re.compile(r"\b(?i:i am|i'm|im|it's|its|this is)\s+([A-Z][\w'-]*)")
_CAPITALIZED = re.compile(r"\b[A-Z][\w'-]*")

_NOT_NAMES: frozenset[str] = frozenset({
    "i", "i'm", "im", "my", "call", "hi", "hello", "hey", "it's", "its",
    "this", "the", "yes", "no", "ok", "okay", "please", "just", "name",
    "me", "sure", "well",
})


def _explicit_name(utterance: str) -> Optional[tuple[str, str, float]]:
    match = _EXPLICIT_NAME.search(utterance) or _INTRODUCED_NAME.search(utterance)
    if match is None:
        return None
    return _clean(match.group(1)), "name_pattern", 0.9


def _capitalized_name(utterance: str) -> Optional[tuple[str, str, float]]:
    for match in _CAPITALIZED.finditer(utterance):
        word = _clean(match.group(0))
        if word.lower() not in _NOT_NAMES:
            return word, "capitalized_word", 0.8
    return None


def _name_full_text(utterance: str) -> Optional[tuple[str, str, float]]:
    text = _clean(utterance)
    if not text:
        return None
    words = text.split()
    plausible = len(words) <= 3 and normalize(text) not in _FILLERS
    return text, "full_text", 0.5 if plausible else 0.2


def extract_name(utterance: str) -> ExtractionResult:
    """
    Extract how the user wants to be addressed.

    Args:
        utterance: Raw user text

    Returns:
        ExtractionResult with information_type "name"
    """
    return _run_strategies(
        utterance,
        (_explicit_name, _capitalized_name, _name_full_text),
        "name",
        MIN_CONFIDENCE["extractName"],
        NAME_PROMPT,
    )


# =============================================================================
# DURATION
# =============================================================================

_NUMBER_WORDS: dict[str, int] = {
    "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10, "fifteen": 15,
    "twenty": 20, "thirty": 30, "forty": 40, "forty-five": 45, "sixty": 60,
}

_MINUTE_AND_HALF = re.compile(r"\b(?:a|one)\s+minute\s+and\s+a\s+half\b", re.I)
_HALF_MINUTE = re.compile(r"\b(?:half|½)\s*(?:a\s+)?minute\b", re.I)
_NUMERIC_DURATION = re.compile(
    r"(\d+(?:\.\d+)?)\s*(seconds?|secs?|s|minutes?|mins?|m)\b", re.I
)
_WORD_DURATION = re.compile(
    r"\b(" + "|".join(sorted(_NUMBER_WORDS, key=len, reverse=True)) + r")\s+(seconds?|minutes?)\b",
    re.I,
)


def _format_duration(amount: float, unit: str) -> str:
    unit = "second" if unit.lower().startswith("s") else "minute"
    number = int(amount) if float(amount).is_integer() else amount
    return f"{number} {unit}" + ("" if number == 1 else "s")


def _duration_pattern(utterance: str) -> Optional[tuple[str, str, float]]:
    if _MINUTE_AND_HALF.search(utterance):
        return "90 seconds", "duration_pattern", 0.9
    if _HALF_MINUTE.search(utterance):
        return "30 seconds", "duration_pattern", 0.9

    match = _NUMERIC_DURATION.search(utterance)
    if match is not None:
        return _format_duration(float(match.group(1)), match.group(2)), "duration_pattern", 0.9

    match = _WORD_DURATION.search(utterance)
    if match is not None:
        amount = _NUMBER_WORDS[match.group(1).lower()]
        return _format_duration(amount, match.group(2)), "duration_pattern", 0.9

    return None


def _duration_full_text(utterance: str) -> Optional[tuple[str, str, float]]:
    text = _clean(utterance)
    if not text:
        return None
    return text, "full_text", 0.5


def extract_duration(utterance: str) -> ExtractionResult:
    """
    Extract how long it takes the user to reach their safe space.

    Recognized durations are normalized ("half a minute" becomes
    "30 seconds", "2 min" becomes "2 minutes").

    Args:
        utterance: Raw user text

    Returns:
        ExtractionResult with information_type "duration"
    """
    return _run_strategies(
        utterance,
        (_duration_pattern, _duration_full_text),
        "duration",
        MIN_CONFIDENCE["extractDuration"],
        DURATION_PROMPT,
    )


# =============================================================================
# ACCESSIBILITY
# =============================================================================

# Exclusions drop a need the user says they do not have ("I can walk fine")
ACCESSIBILITY_GROUPS: tuple[KeywordGroup, ...] = (
    KeywordGroup(
        "mobility",
        ("wheelchair", "walk", "walking", "move", "mobility", "slow", "crutches", "extra time"),
        0.8,
        exclusions=("can walk", "walk fine", "walk normally", "can move", "no wheelchair"),
    ),
    KeywordGroup(
        "hearing",
        ("deaf", "hearing", "hard of hearing", "sound", "audio"),
        0.8,
        exclusions=("can hear", "hear fine", "hearing is fine", "hearing is good", "not deaf"),
    ),
    KeywordGroup(
        "vision",
        ("blind", "vision", "see", "visual", "sight"),
        0.8,
        exclusions=("can see", "see fine", "vision is fine", "eyesight is fine", "not blind"),
    ),
    KeywordGroup(
        "cognitive",
        ("simple words", "simple language", "keep it simple", "confused", "repeat",
         "step by step", "instructions"),
        0.8,
    ),
    KeywordGroup("medical", ("medication", "medicine", "medical", "condition", "oxygen"), 0.8),
    KeywordGroup("dependents", ("children", "kid", "baby", "elderly", "pet", "family", "dependent"), 0.8),
)


def _accessibility_needs(utterance: str) -> Optional[tuple[str, str, float]]:
    normalized = normalize(utterance)
    needs = [group.category for group in ACCESSIBILITY_GROUPS if group.find(normalized)]
    if not needs:
        return "none", "keyword_default", 0.8
    return ", ".join(needs), "keyword_multi_label", 0.8


def extract_accessibility_needs(utterance: str) -> ExtractionResult:
    """
    Extract accessibility needs as a comma-separated label list.

    Every matching need is reported; "none" when nothing matches.

    Args:
        utterance: Raw user text

    Returns:
        ExtractionResult with information_type "accessibility"
    """
    return _run_strategies(
        utterance,
        (_accessibility_needs,),
        "accessibility",
        MIN_CONFIDENCE["extractAccessibilityNeeds"],
        ACCESSIBILITY_PROMPT,
    )


# =============================================================================
# COMMUNICATION PREFERENCE
# =============================================================================

COMMUNICATION_GROUPS: tuple[KeywordGroup, ...] = (
    KeywordGroup("audio", ("voice", "audio", "sound", "speak", "talk", "hear"), 0.8),
    KeywordGroup("visual", ("text", "visual", "read", "screen", "written"), 0.8),
    KeywordGroup("both", ("both", "either", "all"), 0.8),
)


def _communication_preference(utterance: str) -> Optional[tuple[str, str, float]]:
    normalized = normalize(utterance)
    for group in COMMUNICATION_GROUPS:
        if group.find(normalized):
            return group.category, "keyword", group.confidence
    return "both", "keyword_default", 0.5


def extract_communication_preference(utterance: str) -> ExtractionResult:
    """
    Extract audio, visual or both.

    Args:
        utterance: Raw user text

    Returns:
        ExtractionResult with information_type "communication"
    """
    return _run_strategies(
        utterance,
        (_communication_preference,),
        "communication",
        MIN_CONFIDENCE["extractCommunicationPreference"],
        COMMUNICATION_PROMPT,
    )


# =============================================================================
# EMERGENCY CONTACT
# =============================================================================

_PHONE = re.compile(r"\+?\d[\d\s().-]{6,}\d")


def _contact_with_phone(utterance: str) -> Optional[tuple[str, str, float]]:
    if _PHONE.search(utterance) is None:
        return None
    return _clean(utterance), "phone_pattern", 0.9


def _contact_full_text(utterance: str) -> Optional[tuple[str, str, float]]:
    text = _clean(utterance)
    if not text:
        return None
    return text, "full_text", 0.7


def extract_contact(utterance: str) -> ExtractionResult:
    """
    Extract an emergency contact (name and phone number).

    Args:
        utterance: Raw user text

    Returns:
        ExtractionResult with information_type "contact"
    """
    return _run_strategies(
        utterance,
        (_contact_with_phone, _contact_full_text),
        "contact",
        MIN_CONFIDENCE["extractContact"],
        CONTACT_PROMPT,
    )


# =============================================================================
# CHANGE REQUEST
# =============================================================================

CHANGE_GROUPS: tuple[KeywordGroup, ...] = (
    KeywordGroup("name", ("name", "call me"), 0.7),
    KeywordGroup("location", ("location", "space", "shelter", "room", "place"), 0.7),
    KeywordGroup("time", ("time", "timing", "duration", "long"), 0.7),
    KeywordGroup("accessibility", ("access", "accessibility", "assistance"), 0.7),
    KeywordGroup("calming", ("calm", "calming", "activity", "breathing"), 0.7),
)


def _change_request(utterance: str) -> Optional[tuple[str, str, float]]:
    normalized = normalize(utterance)
    for group in CHANGE_GROUPS:
        if group.find(normalized):
            return group.category, "keyword", group.confidence
    return "general", "keyword_default", 0.5


def extract_change_request(utterance: str) -> ExtractionResult:
    """
    Extract which part of the profile the user wants to change.

    Args:
        utterance: Raw user text

    Returns:
        ExtractionResult with information_type "change_request"
    """
    return _run_strategies(
        utterance,
        (_change_request,),
        "change_request",
        MIN_CONFIDENCE["extractChangeRequest"],
        CHANGE_PROMPT,
    )
