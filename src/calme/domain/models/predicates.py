"""
Transition Predicates

A small closed algebra over parser results, used by conditional
transitions. Predicates are plain frozen values evaluated by
structural dispatch: no expression strings are parsed while a
conversation is running.
"""

import operator
from dataclasses import dataclass
from typing import Callable, Union

from calme.domain.models.parser_output import ParserResult


@dataclass(frozen=True)
class CategoryIs:
    """True when the result's category equals ``category`` exactly."""

    category: str

    def evaluate(self, result: ParserResult) -> bool:
        return result.category is not None and result.category == self.category

    @property
    def is_tautology(self) -> bool:
        return False

    def describe(self) -> str:
        return f'category == "{self.category}"'


@dataclass(frozen=True)
class ValueContains:
    """True when the extracted value contains ``fragment`` (case-insensitive)."""

    fragment: str

    def evaluate(self, result: ParserResult) -> bool:
        value = result.extracted_value
        if not value:
            return False
        return self.fragment.lower() in value.lower()

    @property
    def is_tautology(self) -> bool:
        return False

    def describe(self) -> str:
        return f'extracted_value contains "{self.fragment}"'


_COMPARATORS: dict[str, Callable[[float, float], bool]] = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "==": operator.eq,
}


@dataclass(frozen=True)
class ConfidenceCompare:
    """Numeric comparison of the result's confidence against ``threshold``."""

    op: str
    threshold: float

    def __post_init__(self) -> None:
        if self.op not in _COMPARATORS:
            raise ValueError(
                f"Unsupported comparison '{self.op}', expected one of {sorted(_COMPARATORS)}"
            )

    def evaluate(self, result: ParserResult) -> bool:
        return _COMPARATORS[self.op](result.confidence, self.threshold)

    @property
    def is_tautology(self) -> bool:
        # Confidence always lies in [0, 1]
        if self.op == ">=":
            return self.threshold <= 0.0
        if self.op == "<=":
            return self.threshold >= 1.0
        if self.op == ">":
            return self.threshold < 0.0
        if self.op == "<":
            return self.threshold > 1.0
        return False

    def describe(self) -> str:
        return f"confidence {self.op} {self.threshold}"


@dataclass(frozen=True)
class Always:
    """Guaranteed-true predicate."""

    def evaluate(self, result: ParserResult) -> bool:
        return True

    @property
    def is_tautology(self) -> bool:
        return True

    def describe(self) -> str:
        return "always"


@dataclass(frozen=True, init=False)
class AnyOf:
    """
    Short-circuit OR of sub-predicates.

    Sub-predicates are evaluated in declaration order and evaluation
    stops at the first one that holds.
    """

    predicates: tuple["Predicate", ...]

    def __init__(self, *predicates: "Predicate") -> None:
        if not predicates:
            raise ValueError("AnyOf needs at least one predicate")
        object.__setattr__(self, "predicates", tuple(predicates))

    def evaluate(self, result: ParserResult) -> bool:
        return any(p.evaluate(result) for p in self.predicates)

    @property
    def is_tautology(self) -> bool:
        return any(p.is_tautology for p in self.predicates)

    def describe(self) -> str:
        return " or ".join(p.describe() for p in self.predicates)


Predicate = Union[CategoryIs, ValueContains, ConfidenceCompare, AnyOf, Always]
