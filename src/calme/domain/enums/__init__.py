"""Domain enums package."""

from calme.domain.enums.categories import (
    ActivityPreference,
    GraphId,
    NodeKind,
    ResultKind,
    SafeSpaceType,
    SafetyCategory,
    StressCategory,
    YesNoCategory,
)

__all__ = [
    "ActivityPreference",
    "GraphId",
    "NodeKind",
    "ResultKind",
    "SafeSpaceType",
    "SafetyCategory",
    "StressCategory",
    "YesNoCategory",
]
