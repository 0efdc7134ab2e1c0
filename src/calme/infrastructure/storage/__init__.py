"""Profile storage."""

from calme.infrastructure.storage.profile_store import (
    ActivityRecord,
    InMemoryProfileStore,
    ProfileStore,
)

__all__ = ["ActivityRecord", "InMemoryProfileStore", "ProfileStore"]
