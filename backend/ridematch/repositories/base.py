"""Persistence interface for the learning loop."""

from abc import ABC, abstractmethod
from datetime import datetime

from ridematch.schemas.feedback import GlobalFeatureWeight, RideFeedback
from ridematch.schemas.profile import UserPreferenceProfile
from ridematch.services.preference_service import AdjustmentMode, PreferenceField


class LearningRepository(ABC):
    """Abstract store for preference profiles, feedback and feature weights.

    Implementations must guarantee:
        - append_feedback is idempotent per ride_id (uniqueness in the store)
        - apply_adjustment is one atomic read-modify-write per user
        - update_feature_weight is one atomic read-modify-write per feature
    Recoverable failures are raised as PersistenceError.
    """

    @abstractmethod
    def get_profile(self, user_id: str) -> UserPreferenceProfile:
        """Return the user's profile, creating it with defaults if absent."""
        ...

    @abstractmethod
    def apply_adjustment(
        self,
        user_id: str,
        field: PreferenceField,
        value: float,
        weight: float,
        mode: AdjustmentMode,
        key: str | None = None,
    ) -> UserPreferenceProfile:
        """Apply one additive, clamped adjustment and return the new profile."""
        ...

    @abstractmethod
    def append_feedback(self, feedback: RideFeedback) -> bool:
        """Store a feedback record. Returns False if the ride was already recorded."""
        ...

    @abstractmethod
    def list_feedback(self, since: datetime, until: datetime | None = None) -> list[RideFeedback]:
        """Feedback created in [since, until), oldest first."""
        ...

    @abstractmethod
    def update_feature_weight(
        self,
        feature_name: str,
        accuracy_score: float,
        weight_adjustment: float,
    ) -> GlobalFeatureWeight:
        """Fold one sample into the feature's running means."""
        ...

    @abstractmethod
    def get_feature_weights(self) -> list[GlobalFeatureWeight]:
        ...
