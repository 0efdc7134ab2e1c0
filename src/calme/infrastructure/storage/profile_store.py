"""
Profile Store

Port through which the conversation layer persists the user's
emergency profile and activity history. Used only when onboarding
completes and when an activity finishes.

PRIVACY: Implementations must encrypt profiles at rest. The
in-memory store is for tests and embedding only.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from calme.config.logging_config import get_logger
from calme.domain.models.profile import UserProfile

logger = get_logger(__name__)


@dataclass(frozen=True)
class ActivityRecord:
    """
    One finished (or abandoned) activity.

    Attributes:
        profile_id: Profile the activity belongs to
        activity_name: Activity that ran
        completed: Whether the user completed it
        recorded_at: When the host reported it
    """

    profile_id: str
    activity_name: str
    completed: bool
    recorded_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "profile_id": self.profile_id,
            "activity_name": self.activity_name,
            "completed": self.completed,
            "recorded_at": self.recorded_at.isoformat(),
        }


class ProfileStore(ABC):
    """
    Abstract profile storage.

    Usage:
        store = InMemoryProfileStore()
        store.save_profile(profile)
        active = store.get_active_profile()
    """

    @abstractmethod
    def get_active_profile(self) -> Optional[UserProfile]:
        """
        Get the active profile.

        Returns:
            Active profile, or None before onboarding
        """
        pass

    @abstractmethod
    def save_profile(self, profile: UserProfile) -> None:
        """
        Store a profile and make it the active one.

        Args:
            profile: Profile to store
        """
        pass

    @abstractmethod
    def record_activity(self, profile_id: str, activity_name: str, completed: bool) -> None:
        """
        Append an activity outcome to the profile's history.

        Args:
            profile_id: Profile the activity belongs to
            activity_name: Activity that ran
            completed: Whether the user completed it
        """
        pass


class InMemoryProfileStore(ProfileStore):
    """Profile store kept in process memory."""

    def __init__(self, profile: Optional[UserProfile] = None) -> None:
        self._profiles: dict[str, UserProfile] = {}
        self._active_id: Optional[str] = None
        self._history: list[ActivityRecord] = []
        if profile is not None:
            self.save_profile(profile)

    def get_active_profile(self) -> Optional[UserProfile]:
        if self._active_id is None:
            return None
        return self._profiles.get(self._active_id)

    def save_profile(self, profile: UserProfile) -> None:
        for other in self._profiles.values():
            if other.id != profile.id:
                other.is_active = False
        profile.is_active = True
        profile.last_updated = datetime.utcnow()
        self._profiles[profile.id] = profile
        self._active_id = profile.id
        logger.info("profile_saved", profile_id=profile.id)

    def record_activity(self, profile_id: str, activity_name: str, completed: bool) -> None:
        self._history.append(
            ActivityRecord(profile_id=profile_id, activity_name=activity_name, completed=completed)
        )
        logger.debug(
            "activity_recorded",
            profile_id=profile_id,
            activity=activity_name,
            completed=completed,
        )

    def activity_history(self, profile_id: Optional[str] = None) -> list[ActivityRecord]:
        """Recorded activities, optionally for one profile only."""
        if profile_id is None:
            return list(self._history)
        return [record for record in self._history if record.profile_id == profile_id]
