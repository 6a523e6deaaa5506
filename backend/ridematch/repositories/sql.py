"""SQLAlchemy-backed learning repository.

Concurrency is handled by the database:
    - ride_feedback.ride_id is UNIQUE; inserts use ON CONFLICT DO NOTHING
    - profile adjustments lock the user's row (SELECT ... FOR UPDATE) for
      the duration of one read-modify-write transaction
    - feature weights are folded in with a single INSERT ... ON CONFLICT
      DO UPDATE statement, so the incremental mean is computed in SQL
"""

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ridematch.errors import PersistenceError
from ridematch.models.global_feature_weight import GlobalFeatureWeightRow
from ridematch.models.ride_feedback import RideFeedbackRow
from ridematch.models.user_preference_profile import UserPreferenceProfileRow
from ridematch.repositories.base import LearningRepository
from ridematch.schemas.feedback import GlobalFeatureWeight, RideFeedback
from ridematch.schemas.profile import UserPreferenceProfile
from ridematch.services.preference_service import adjust_profile

logger = logging.getLogger(__name__)


def _profile_from_row(row: UserPreferenceProfileRow) -> UserPreferenceProfile:
    return UserPreferenceProfile(
        user_id=row.user_id,
        preferred_rating_range=(row.preferred_rating_min, row.preferred_rating_max),
        preferred_car_size=row.preferred_car_size,
        car_size_estimate=row.car_size_estimate,
        average_ride_distance_km=row.average_ride_distance_km,
        time_of_day_affinity=dict(row.time_of_day_affinity or {}),
        driver_loyalty=dict(row.driver_loyalty or {}),
        price_sensitivity=row.price_sensitivity,
        feedback_count=row.feedback_count or 0,
        last_updated_at=row.last_updated_at,
    )


def _profile_columns(profile: UserPreferenceProfile) -> dict:
    return {
        "preferred_rating_min": profile.preferred_rating_range[0],
        "preferred_rating_max": profile.preferred_rating_range[1],
        "preferred_car_size": profile.preferred_car_size,
        "car_size_estimate": profile.car_size_estimate,
        "average_ride_distance_km": profile.average_ride_distance_km,
        "time_of_day_affinity": dict(profile.time_of_day_affinity),
        "driver_loyalty": dict(profile.driver_loyalty),
        "price_sensitivity": profile.price_sensitivity,
        "feedback_count": profile.feedback_count,
        "last_updated_at": profile.last_updated_at,
    }


class SqlLearningRepository(LearningRepository):
    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _transaction(self, action: str):
        try:
            yield
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.warning("Persistence failure during %s: %s", action, e)
            raise PersistenceError(f"{action} failed") from e
        except Exception:
            self.session.rollback()
            raise

    def _insert(self, table):
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert(table)
        if dialect == "sqlite":
            return sqlite_insert(table)
        raise PersistenceError(f"Unsupported database dialect: {dialect}")

    # --- Profiles ---

    def _ensure_profile(self, user_id: str) -> None:
        defaults = UserPreferenceProfile.defaults(user_id)
        stmt = (
            self._insert(UserPreferenceProfileRow)
            .values(id=uuid.uuid4(), user_id=user_id, **_profile_columns(defaults))
            .on_conflict_do_nothing(index_elements=["user_id"])
        )
        self.session.execute(stmt)

    def get_profile(self, user_id: str) -> UserPreferenceProfile:
        with self._transaction("get_profile"):
            self._ensure_profile(user_id)
            row = self.session.execute(
                select(UserPreferenceProfileRow)
                .where(UserPreferenceProfileRow.user_id == user_id)
                .execution_options(populate_existing=True)
            ).scalar_one()
            return _profile_from_row(row)

    def apply_adjustment(self, user_id, field, value, weight, mode, key=None) -> UserPreferenceProfile:
        with self._transaction("apply_adjustment"):
            self._ensure_profile(user_id)
            row = self.session.execute(
                select(UserPreferenceProfileRow)
                .where(UserPreferenceProfileRow.user_id == user_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            ).scalar_one()

            profile = adjust_profile(_profile_from_row(row), field, value, weight, mode, key)
            for column, column_value in _profile_columns(profile).items():
                setattr(row, column, column_value)
            self.session.flush()
            return profile

    # --- Feedback ---

    def append_feedback(self, feedback: RideFeedback) -> bool:
        with self._transaction("append_feedback"):
            stmt = (
                self._insert(RideFeedbackRow)
                .values(id=uuid.uuid4(), **feedback.model_dump())
                .on_conflict_do_nothing(index_elements=["ride_id"])
            )
            result = self.session.execute(stmt)
            return result.rowcount == 1

    def list_feedback(self, since: datetime, until: datetime | None = None) -> list[RideFeedback]:
        with self._transaction("list_feedback"):
            query = select(RideFeedbackRow).where(RideFeedbackRow.created_at >= since)
            if until is not None:
                query = query.where(RideFeedbackRow.created_at < until)
            rows = self.session.execute(query.order_by(RideFeedbackRow.created_at.asc())).scalars().all()
            return [RideFeedback.model_validate(row) for row in rows]

    # --- Feature weights ---

    def update_feature_weight(self, feature_name, accuracy_score, weight_adjustment) -> GlobalFeatureWeight:
        table = GlobalFeatureWeightRow
        with self._transaction("update_feature_weight"):
            stmt = self._insert(table).values(
                id=uuid.uuid4(),
                feature_name=feature_name,
                weight_adjustment=weight_adjustment,
                accuracy_score=accuracy_score,
                sample_count=1,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["feature_name"],
                set_={
                    "weight_adjustment": (
                        (table.weight_adjustment * table.sample_count + stmt.excluded.weight_adjustment)
                        / (table.sample_count + 1)
                    ),
                    "accuracy_score": (
                        (table.accuracy_score * table.sample_count + stmt.excluded.accuracy_score)
                        / (table.sample_count + 1)
                    ),
                    "sample_count": table.sample_count + 1,
                    "updated_at": func.now(),
                },
            )
            self.session.execute(stmt)

            row = self.session.execute(
                select(table)
                .where(table.feature_name == feature_name)
                .execution_options(populate_existing=True)
            ).scalar_one()
            return GlobalFeatureWeight.model_validate(row)

    def get_feature_weights(self) -> list[GlobalFeatureWeight]:
        with self._transaction("get_feature_weights"):
            rows = self.session.execute(
                select(GlobalFeatureWeightRow).order_by(GlobalFeatureWeightRow.feature_name)
            ).scalars().all()
            return [GlobalFeatureWeight.model_validate(row) for row in rows]
