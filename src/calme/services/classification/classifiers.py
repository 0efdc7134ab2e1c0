"""
Semantic Classifiers

Pure functions turning an utterance into a ClassificationResult.
Every classifier runs the same three tiers in order:

1. Keyword priority: first matching group of an ordered table wins.
2. Linguistic fallback: sentiment score and tags mapped to buckets
   with fixed confidences.
3. Low-confidence fallback: below the parser's minimum confidence
   the result asks for clarification instead of guessing.

ARCHITECTURE: No classifier keeps state between calls. Identical
input yields equal results, so any number of sessions may call
these functions concurrently.

PRIVACY: Utterances are never logged by this module.
"""

from typing import Optional

from calme.domain.enums.categories import (
    ActivityPreference,
    SafetyCategory,
    StressCategory,
    YesNoCategory,
)
from calme.domain.models.parser_output import ClassificationResult
from calme.services.classification.keyword_rules import (
    ACTIVITY_GROUPS,
    DECLINE_KEYWORDS,
    SAFETY_GROUPS,
    STRESS_GROUPS,
    YES_NO_GROUPS,
    first_match,
    normalize,
)
from calme.services.classification.linguistic import LinguisticTag, analyze


# Minimum confidence per parser; below it the user is re-asked
MIN_CONFIDENCE: dict[str, float] = {
    "classifySafety": 0.3,
    "classifyStress": 0.3,
    "parseYesNo": 0.25,
    "parseActivityPreference": 0.3,
}

SAFETY_PROMPT = "I need to make sure - are you in a safe, protected space right now?"
STRESS_PROMPT = "I didn't quite understand. Are you feeling relaxed, somewhat stressed, or very stressed?"
YES_NO_PROMPT = "I need a yes or no answer to continue. Can you please clarify?"
ACTIVITY_PROMPT = "Would you like to try breathing exercises, stretching, or perhaps a matching game?"

# Reasoning prefixes name the tier that produced a result
TIER_KEYWORD = "keyword"
TIER_LINGUISTIC = "linguistic"
TIER_FALLBACK = "fallback"

# Exclusions of this group mark a negated danger phrase
_DANGER_GROUP = SAFETY_GROUPS[0]


def _candidate(category: str, confidence: float, tier: str, detail: str) -> ClassificationResult:
    return ClassificationResult(
        category=str(category),
        confidence=confidence,
        reasoning=f"{tier}: {detail}",
    )


def _settle(
    candidate: Optional[ClassificationResult],
    min_confidence: float,
    fallback_category: str,
    prompt: str,
) -> ClassificationResult:
    """Accept a candidate at or above the threshold, otherwise ask again."""
    if candidate is not None and candidate.confidence >= min_confidence:
        return candidate

    return ClassificationResult(
        category=str(fallback_category),
        confidence=candidate.confidence if candidate is not None else 0.0,
        reasoning=f"{TIER_FALLBACK}: below minimum confidence {min_confidence}",
        needs_clarification=True,
        clarification_prompt=prompt,
    )


def _keyword_candidate(groups, utterance: str) -> Optional[ClassificationResult]:
    match = first_match(groups, utterance)
    if match is None:
        return None
    return _candidate(match.category, match.confidence, TIER_KEYWORD, match.keyword)


def classify_safety(utterance: str) -> ClassificationResult:
    """
    Classify whether the user is in a protected space.

    SAFETY_CRITICAL: Danger phrases are checked before safe phrases.
    A bare negative answer ("not at all") to "are you safe?" is
    DANGER; a negated danger phrase ("I'm not hurt") is only UNSURE.

    Args:
        utterance: Raw user text

    Returns:
        DANGER, SAFE or UNSURE, or a clarification request
    """
    candidate = _keyword_candidate(SAFETY_GROUPS, utterance)

    if candidate is None:
        analysis = analyze(utterance)
        if _DANGER_GROUP.is_excluded(normalize(utterance)):
            candidate = _candidate(SafetyCategory.UNSURE, 0.6, TIER_LINGUISTIC, "negated danger")
        elif analysis.has(LinguisticTag.AFFIRMATIVE):
            candidate = _candidate(SafetyCategory.SAFE, 0.8, TIER_LINGUISTIC, "affirmative")
        elif analysis.has(LinguisticTag.NEGATIVE_ANSWER):
            candidate = _candidate(SafetyCategory.DANGER, 0.8, TIER_LINGUISTIC, "negative answer")
        elif analysis.has(LinguisticTag.DANGER_INDICATOR):
            candidate = _candidate(SafetyCategory.DANGER, 0.75, TIER_LINGUISTIC, "danger indicator")
        elif analysis.has(LinguisticTag.NEGATIVE_EMOTION) and analysis.score <= -3:
            candidate = _candidate(
                SafetyCategory.DANGER, 0.7, TIER_LINGUISTIC, f"sentiment {analysis.score}"
            )
        elif analysis.has(LinguisticTag.UNCERTAIN):
            candidate = _candidate(SafetyCategory.UNSURE, 0.6, TIER_LINGUISTIC, "uncertain")

    return _settle(candidate, MIN_CONFIDENCE["classifySafety"], SafetyCategory.UNSURE, SAFETY_PROMPT)


def classify_stress(utterance: str) -> ClassificationResult:
    """
    Classify the user's stress level or situational context.

    Linguistic buckets: score <= -3 (or a negative emotion or panic
    symptom cue) is high stress, a negative score is moderate, a
    non-negative score is no stress.

    Args:
        utterance: Raw user text

    Returns:
        A StressCategory value, or a clarification request
    """
    candidate = _keyword_candidate(STRESS_GROUPS, utterance)

    if candidate is None:
        analysis = analyze(utterance)
        if analysis.has_evidence:
            if (
                analysis.score <= -3
                or analysis.has(LinguisticTag.NEGATIVE_EMOTION)
                or analysis.has(LinguisticTag.PANIC_SYMPTOM)
            ):
                candidate = _candidate(
                    StressCategory.HIGH, 0.7, TIER_LINGUISTIC, f"sentiment {analysis.score}"
                )
            elif analysis.score < 0:
                candidate = _candidate(
                    StressCategory.MODERATE, 0.6, TIER_LINGUISTIC, f"sentiment {analysis.score}"
                )
            else:
                candidate = _candidate(
                    StressCategory.NONE, 0.6, TIER_LINGUISTIC, f"sentiment {analysis.score}"
                )

    return _settle(candidate, MIN_CONFIDENCE["classifyStress"], StressCategory.UNCERTAIN, STRESS_PROMPT)


def parse_yes_no(utterance: str) -> ClassificationResult:
    """
    Classify a yes/no answer.

    Args:
        utterance: Raw user text

    Returns:
        yes, no or maybe, or a clarification request
    """
    candidate = _keyword_candidate(YES_NO_GROUPS, utterance)

    if candidate is None:
        analysis = analyze(utterance)
        if analysis.has(LinguisticTag.AFFIRMATIVE):
            candidate = _candidate(YesNoCategory.YES, 0.8, TIER_LINGUISTIC, "affirmative")
        elif analysis.has(LinguisticTag.NEGATION):
            candidate = _candidate(YesNoCategory.NO, 0.6, TIER_LINGUISTIC, "negation")
        elif analysis.has(LinguisticTag.UNCERTAIN):
            candidate = _candidate(YesNoCategory.MAYBE, 0.6, TIER_LINGUISTIC, "uncertain")
        elif analysis.score >= 2:
            candidate = _candidate(YesNoCategory.YES, 0.5, TIER_LINGUISTIC, f"sentiment {analysis.score}")
        elif analysis.score <= -2:
            candidate = _candidate(YesNoCategory.NO, 0.5, TIER_LINGUISTIC, f"sentiment {analysis.score}")

    return _settle(candidate, MIN_CONFIDENCE["parseYesNo"], YesNoCategory.UNCLEAR, YES_NO_PROMPT)


def parse_activity_preference(utterance: str) -> ClassificationResult:
    """
    Classify which calming activity the user asks for.

    Args:
        utterance: Raw user text

    Returns:
        An activity name, no_activity, or a clarification request
    """
    candidate = _keyword_candidate(ACTIVITY_GROUPS, utterance)

    if candidate is None:
        keyword = DECLINE_KEYWORDS.find(normalize(utterance))
        if keyword is not None:
            candidate = _candidate(
                ActivityPreference.NO_ACTIVITY, DECLINE_KEYWORDS.confidence, TIER_KEYWORD, keyword
            )
        else:
            answer = parse_yes_no(utterance)
            if not answer.needs_clarification and answer.category == YesNoCategory.NO:
                candidate = _candidate(
                    ActivityPreference.NO_ACTIVITY, 0.8, TIER_LINGUISTIC, "declined"
                )

    return _settle(
        candidate,
        MIN_CONFIDENCE["parseActivityPreference"],
        ActivityPreference.UNCLEAR,
        ACTIVITY_PROMPT,
    )
