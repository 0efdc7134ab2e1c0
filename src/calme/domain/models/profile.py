"""
User Profile Domain Model

Emergency profile collected during onboarding: how to address the
user, where their protected space is and what helps them calm down.

PRIVACY: Locations and contacts identify the user. The profile store
implementation is responsible for encryption at rest.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Optional

from calme.domain.enums.categories import SafeSpaceType


_DURATION_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(second|sec|s|minute|min|m)", re.I)

DEFAULT_TIME_TO_SAFETY_SECONDS = 60


def parse_duration_seconds(value: Optional[str]) -> Optional[int]:
    """
    Convert a captured duration ("30 seconds", "2 min") to seconds.

    Args:
        value: Duration text as produced by the duration extractor

    Returns:
        Whole seconds, or None when the text holds no duration
    """
    if not value:
        return None
    match = _DURATION_PATTERN.search(value)
    if not match:
        return None
    amount = float(match.group(1))
    if match.group(2).lower().startswith("m"):
        amount *= 60
    return int(round(amount))


def _split_list(value: Optional[str]) -> list[str]:
    if not value or value.strip().lower() == "none":
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _safe_space_type(value: Optional[str]) -> SafeSpaceType:
    text = (value or "").lower()
    if "miklat" in text or "shelter" in text or "bunker" in text:
        return SafeSpaceType.MIKLAT
    if "mamad" in text or "safe room" in text or "reinforced" in text:
        return SafeSpaceType.MAMAD
    if "stair" in text:
        return SafeSpaceType.STAIRWAY
    return SafeSpaceType.OTHER


@dataclass
class UserProfile:
    """
    Emergency profile of the (single) local user.

    Attributes:
        id: Profile identifier
        name: How the user wants to be addressed
        safe_space_type: Kind of designated protected space
        safe_space_location: Free-text description of that space
        time_to_reach_safety: Seconds needed to reach it
        backup_location: Alternative if the space is unavailable
        accessibility_needs: Needs such as mobility or hearing
        calming_preferences: Activities that help the user
        communication_preference: audio, visual or both
        emergency_contacts: People to notify once safe
        language: ISO 639-1 language code
        is_active: Whether this is the active profile
        onboarding_completed: Whether onboarding finished
    """

    id: str = "primary"
    name: str = "User"
    safe_space_type: SafeSpaceType = SafeSpaceType.OTHER
    safe_space_location: str = ""
    time_to_reach_safety: int = DEFAULT_TIME_TO_SAFETY_SECONDS
    backup_location: Optional[str] = None
    accessibility_needs: list[str] = field(default_factory=list)
    calming_preferences: list[str] = field(default_factory=list)
    communication_preference: str = "both"
    emergency_contacts: list[str] = field(default_factory=list)
    language: str = "en"
    created_at: datetime = field(default_factory=datetime.utcnow)
    last_updated: datetime = field(default_factory=datetime.utcnow)
    is_active: bool = True
    onboarding_completed: bool = False

    @classmethod
    def from_variables(
        cls,
        variables: Mapping[str, str],
        default_name: str = "User",
    ) -> "UserProfile":
        """
        Build a completed profile from onboarding session variables.

        Args:
            variables: Captured onboarding answers
            default_name: Name used when none was captured

        Returns:
            Profile marked as onboarding-completed
        """
        safe_space = variables.get("safeSpace", "")
        details = variables.get("safeSpaceDetails")
        seconds = parse_duration_seconds(variables.get("timeToSafety"))
        contact = variables.get("emergencyContact")
        calming = variables.get("calmingPreference")
        needs = _split_list(variables.get("accessibilityNeeds"))
        for need in _split_list(variables.get("accessibilityDetails")):
            if need not in needs:
                needs.append(need)

        return cls(
            name=variables.get("name") or default_name,
            safe_space_type=_safe_space_type(safe_space),
            safe_space_location=details or safe_space,
            time_to_reach_safety=seconds if seconds is not None else DEFAULT_TIME_TO_SAFETY_SECONDS,
            backup_location=variables.get("backupLocation"),
            accessibility_needs=needs,
            calming_preferences=[calming] if calming and calming != "no_activity" else [],
            communication_preference=variables.get("communicationPreference", "both"),
            emergency_contacts=[contact] if contact else [],
            onboarding_completed=True,
        )

    def greeting_variables(self) -> dict[str, str]:
        """Variables seeded into a main-flow session from this profile."""
        return {
            "name": self.name,
            "safeSpace": self.safe_space_location or self.safe_space_type.value,
        }

    def to_dict(self) -> dict:
        """Serialize profile to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "safe_space_type": self.safe_space_type.value,
            "safe_space_location": self.safe_space_location,
            "time_to_reach_safety": self.time_to_reach_safety,
            "backup_location": self.backup_location,
            "accessibility_needs": list(self.accessibility_needs),
            "calming_preferences": list(self.calming_preferences),
            "communication_preference": self.communication_preference,
            "emergency_contacts": list(self.emergency_contacts),
            "language": self.language,
            "created_at": self.created_at.isoformat(),
            "last_updated": self.last_updated.isoformat(),
            "is_active": self.is_active,
            "onboarding_completed": self.onboarding_completed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserProfile":
        """Create profile from dictionary."""
        now = datetime.utcnow()
        return cls(
            id=data.get("id", "primary"),
            name=data.get("name", "User"),
            safe_space_type=SafeSpaceType(data.get("safe_space_type", SafeSpaceType.OTHER.value)),
            safe_space_location=data.get("safe_space_location", ""),
            time_to_reach_safety=int(data.get("time_to_reach_safety", DEFAULT_TIME_TO_SAFETY_SECONDS)),
            backup_location=data.get("backup_location"),
            accessibility_needs=list(data.get("accessibility_needs", [])),
            calming_preferences=list(data.get("calming_preferences", [])),
            communication_preference=data.get("communication_preference", "both"),
            emergency_contacts=list(data.get("emergency_contacts", [])),
            language=data.get("language", "en"),
            created_at=datetime.fromisoformat(data["created_at"]) if "created_at" in data else now,
            last_updated=datetime.fromisoformat(data["last_updated"]) if "last_updated" in data else now,
            is_active=data.get("is_active", True),
            onboarding_completed=data.get("onboarding_completed", False),
        )
