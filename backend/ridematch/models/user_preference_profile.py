"""User preference profile model — one learned preference vector per user."""

from sqlalchemy import Column, DateTime, Float, Integer, String

from ridematch.models.base import Base, JSONType, TimestampMixin, UUIDMixin


class UserPreferenceProfileRow(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "user_preference_profiles"

    user_id = Column(String(64), unique=True, nullable=False)

    preferred_rating_min = Column(Float, nullable=False)
    preferred_rating_max = Column(Float, nullable=False)
    preferred_car_size = Column(Integer, nullable=False)
    car_size_estimate = Column(Float)
    average_ride_distance_km = Column(Float, nullable=False)
    price_sensitivity = Column(Float, nullable=False)

    # bucket -> affinity [0.0, 1.0]
    time_of_day_affinity = Column(JSONType, nullable=False, default=dict)
    # driver id -> loyalty [0, 100]
    driver_loyalty = Column(JSONType, nullable=False, default=dict)

    feedback_count = Column(Integer, server_default="0", nullable=False, default=0)
    last_updated_at = Column(DateTime(timezone=True))
