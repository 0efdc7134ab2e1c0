"""
Parser Output Contract

Defines the typed results produced by the classifier library and
consumed by the dialogue engine. The engine depends on this shape
only, never on how a classifier reached its answer.

Results are frozen so identical inputs yield equal, hashable values.
"""

from dataclasses import dataclass
from typing import Optional, Union

from calme.domain.enums.categories import ResultKind


def _check_confidence(confidence: float) -> None:
    if not 0.0 <= confidence <= 1.0:
        raise ValueError(f"confidence must be within [0, 1], got {confidence}")


@dataclass(frozen=True)
class ClassificationResult:
    """
    Categorical answer of a classifier.

    Attributes:
        category: Category the utterance was mapped to
        confidence: Heuristic confidence (0.0-1.0)
        reasoning: Short explanation (matched keyword, bucket, ...)
        needs_clarification: Whether the user should be re-asked
        clarification_prompt: Question to re-ask with
    """

    category: Optional[str] = None
    confidence: float = 0.0
    reasoning: Optional[str] = None
    needs_clarification: bool = False
    clarification_prompt: Optional[str] = None

    def __post_init__(self) -> None:
        _check_confidence(self.confidence)

    @property
    def kind(self) -> ResultKind:
        return ResultKind.CLASSIFICATION

    @property
    def extracted_value(self) -> None:
        """Classifications never carry an extracted value."""
        return None

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "kind": self.kind.value,
            "category": self.category,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "needs_clarification": self.needs_clarification,
            "clarification_prompt": self.clarification_prompt,
        }


@dataclass(frozen=True)
class ExtractionResult:
    """
    Free-form value extracted from an utterance.

    Attributes:
        extracted_value: The extracted text (location, name, ...)
        confidence: Confidence tier of the strategy that produced it
        information_type: What was extracted (location, name, duration, ...)
        extraction_method: Name of the winning strategy
        needs_clarification: Whether the user should be re-asked
        clarification_prompt: Question to re-ask with
    """

    extracted_value: Optional[str] = None
    confidence: float = 0.0
    information_type: Optional[str] = None
    extraction_method: Optional[str] = None
    needs_clarification: bool = False
    clarification_prompt: Optional[str] = None

    def __post_init__(self) -> None:
        _check_confidence(self.confidence)

    @property
    def kind(self) -> ResultKind:
        return ResultKind.EXTRACTION

    @property
    def category(self) -> None:
        """Extractions never carry a category."""
        return None

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "kind": self.kind.value,
            "extracted_value": self.extracted_value,
            "confidence": self.confidence,
            "information_type": self.information_type,
            "extraction_method": self.extraction_method,
            "needs_clarification": self.needs_clarification,
            "clarification_prompt": self.clarification_prompt,
        }


ParserResult = Union[ClassificationResult, ExtractionResult]
