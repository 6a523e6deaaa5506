"""In-process learning repository.

Used by tests and single-process deployments. Each profile and each feature
weight is guarded by its own lock, so updates to different keys never wait on
each other while updates to the same key serialize.
"""

import threading
from collections import defaultdict
from datetime import datetime

from ridematch.repositories.base import LearningRepository
from ridematch.schemas.feedback import GlobalFeatureWeight, RideFeedback
from ridematch.schemas.profile import UserPreferenceProfile
from ridematch.services.preference_service import adjust_profile


class KeyedLocks:
    """Lazily created lock per key."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = defaultdict(threading.Lock)

    def __call__(self, key: str) -> threading.Lock:
        with self._guard:
            return self._locks[key]


class InMemoryLearningRepository(LearningRepository):
    def __init__(self):
        self._profiles: dict[str, UserPreferenceProfile] = {}
        self._feedback: dict[str, RideFeedback] = {}
        self._weights: dict[str, GlobalFeatureWeight] = {}
        self._profile_locks = KeyedLocks()
        self._weight_locks = KeyedLocks()
        self._feedback_lock = threading.Lock()

    def get_profile(self, user_id: str) -> UserPreferenceProfile:
        with self._profile_locks(user_id):
            return self._get_or_create(user_id)

    def _get_or_create(self, user_id: str) -> UserPreferenceProfile:
        profile = self._profiles.get(user_id)
        if profile is None:
            profile = UserPreferenceProfile.defaults(user_id)
            self._profiles[user_id] = profile
        return profile

    def apply_adjustment(self, user_id, field, value, weight, mode, key=None) -> UserPreferenceProfile:
        with self._profile_locks(user_id):
            profile = adjust_profile(self._get_or_create(user_id), field, value, weight, mode, key)
            self._profiles[user_id] = profile
            return profile

    def append_feedback(self, feedback: RideFeedback) -> bool:
        with self._feedback_lock:
            if feedback.ride_id in self._feedback:
                return False
            self._feedback[feedback.ride_id] = feedback
            return True

    def list_feedback(self, since: datetime, until: datetime | None = None) -> list[RideFeedback]:
        with self._feedback_lock:
            records = list(self._feedback.values())
        return sorted(
            (f for f in records if f.created_at >= since and (until is None or f.created_at < until)),
            key=lambda f: f.created_at,
        )

    def update_feature_weight(self, feature_name, accuracy_score, weight_adjustment) -> GlobalFeatureWeight:
        with self._weight_locks(feature_name):
            current = self._weights.get(feature_name) or GlobalFeatureWeight(feature_name=feature_name)
            count = current.sample_count
            updated = GlobalFeatureWeight(
                feature_name=feature_name,
                weight_adjustment=(current.weight_adjustment * count + weight_adjustment) / (count + 1),
                accuracy_score=(current.accuracy_score * count + accuracy_score) / (count + 1),
                sample_count=count + 1,
            )
            self._weights[feature_name] = updated
            return updated

    def get_feature_weights(self) -> list[GlobalFeatureWeight]:
        return sorted(self._weights.values(), key=lambda w: w.feature_name)
