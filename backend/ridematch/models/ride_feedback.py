"""Ride feedback model — append-only audit trail of completed rides."""

from sqlalchemy import Boolean, Column, DateTime, Float, Index, Integer, String, Text, UniqueConstraint

from ridematch.models.base import Base, JSONType, UUIDMixin


class RideFeedbackRow(UUIDMixin, Base):
    __tablename__ = "ride_feedback"

    ride_id = Column(String(64), nullable=False)
    user_id = Column(String(64), nullable=False)
    driver_id = Column(String(64), nullable=False)

    user_rating = Column(Integer, nullable=False)
    ai_score = Column(Integer, nullable=False)
    was_recommended = Column(Boolean, nullable=False)
    selected_position = Column(Integer, nullable=False)
    satisfaction = Column(String(20), nullable=False)  # very_satisfied .. very_dissatisfied
    price_acceptance = Column(String(20), nullable=False)  # too_expensive, fair, good_value
    time_acceptance = Column(String(20), nullable=False)  # too_long, acceptable, very_fast
    context_factors = Column(JSONType, nullable=False, default=list)
    feedback_text = Column(Text)

    driver_rating = Column(Float)
    driver_seat_capacity = Column(Integer)
    ride_distance_km = Column(Float)
    ride_requested_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("ride_id", name="uq_ride_feedback_ride"),
        Index("idx_ride_feedback_created", "created_at"),
        Index("idx_ride_feedback_user", "user_id"),
    )
