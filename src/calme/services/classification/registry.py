"""
Parser Registry

Read-only mapping from the parser-type keys stored in conversation
graphs to classifier functions.
"""

from types import MappingProxyType
from typing import Callable, Mapping

from calme.domain.models.parser_output import ClassificationResult, ExtractionResult, ParserResult
from calme.services.classification.classifiers import (
    TIER_FALLBACK,
    classify_safety,
    classify_stress,
    parse_activity_preference,
    parse_yes_no,
)
from calme.services.classification.extractors import (
    extract_accessibility_needs,
    extract_change_request,
    extract_communication_preference,
    extract_contact,
    extract_duration,
    extract_location,
    extract_name,
)


Parser = Callable[[str], ParserResult]

PARSERS: Mapping[str, Parser] = MappingProxyType({
    "classifySafety": classify_safety,
    "classifyStress": classify_stress,
    "extractLocation": extract_location,
    "parseYesNo": parse_yes_no,
    "parseActivityPreference": parse_activity_preference,
    "extractName": extract_name,
    "extractDuration": extract_duration,
    "extractAccessibilityNeeds": extract_accessibility_needs,
    "extractCommunicationPreference": extract_communication_preference,
    "extractContact": extract_contact,
    "extractChangeRequest": extract_change_request,
})

UNKNOWN_PARSER_PROMPT = "Sorry, I didn't get that. Could you say it another way?"


def run_parser(parser_type: str, utterance: str) -> ParserResult:
    """
    Run the parser registered under ``parser_type``.

    An unknown key yields a clarification result rather than an
    exception, so a data error never surfaces to the user as a crash.

    Args:
        parser_type: Key stored on a conversation node
        utterance: Raw user text

    Returns:
        The parser's result
    """
    parser = PARSERS.get(parser_type)
    if parser is None:
        return ClassificationResult(
            confidence=0.0,
            reasoning=f"{TIER_FALLBACK}: unknown parser '{parser_type}'",
            needs_clarification=True,
            clarification_prompt=UNKNOWN_PARSER_PROMPT,
        )
    return parser(utterance)


def result_tier(result: ParserResult) -> str:
    """Name of the tier or strategy that produced a result."""
    if result.needs_clarification:
        return TIER_FALLBACK
    if isinstance(result, ExtractionResult):
        return result.extraction_method or "unknown"
    reasoning = result.reasoning or ""
    return reasoning.split(":", 1)[0] or "unknown"
