"""
Classification Services

Rule-based semantic classifiers and value extractors, plus the
registry that maps graph parser keys to them.
"""

from calme.services.classification.classifiers import (
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
from calme.services.classification.linguistic import (
    LinguisticAnalysis,
    LinguisticAnalyzer,
    LinguisticTag,
)
from calme.services.classification.registry import PARSERS, result_tier, run_parser

__all__ = [
    "LinguisticAnalysis",
    "LinguisticAnalyzer",
    "LinguisticTag",
    "PARSERS",
    "classify_safety",
    "classify_stress",
    "extract_accessibility_needs",
    "extract_change_request",
    "extract_communication_preference",
    "extract_contact",
    "extract_duration",
    "extract_location",
    "extract_name",
    "parse_activity_preference",
    "parse_yes_no",
    "result_tier",
    "run_parser",
]
