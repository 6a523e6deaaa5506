"""Initial schema — user_preference_profiles, ride_feedback, global_feature_weights.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Preference profiles (one row per user, locked FOR UPDATE on adjustment)
    op.create_table(
        "user_preference_profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", sa.String(64), unique=True, nullable=False),
        sa.Column("preferred_rating_min", sa.Float, nullable=False),
        sa.Column("preferred_rating_max", sa.Float, nullable=False),
        sa.Column("preferred_car_size", sa.Integer, nullable=False),
        sa.Column("car_size_estimate", sa.Float),
        sa.Column("average_ride_distance_km", sa.Float, nullable=False),
        sa.Column("price_sensitivity", sa.Float, nullable=False),
        sa.Column("time_of_day_affinity", postgresql.JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("driver_loyalty", postgresql.JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("feedback_count", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("last_updated_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Ride feedback (append-only, idempotent per ride)
    op.create_table(
        "ride_feedback",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("ride_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("driver_id", sa.String(64), nullable=False),
        sa.Column("user_rating", sa.Integer, nullable=False),
        sa.Column("ai_score", sa.Integer, nullable=False),
        sa.Column("was_recommended", sa.Boolean, nullable=False),
        sa.Column("selected_position", sa.Integer, nullable=False),
        sa.Column("satisfaction", sa.String(20), nullable=False),
        sa.Column("price_acceptance", sa.String(20), nullable=False),
        sa.Column("time_acceptance", sa.String(20), nullable=False),
        sa.Column("context_factors", postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("feedback_text", sa.Text),
        sa.Column("driver_rating", sa.Float),
        sa.Column("driver_seat_capacity", sa.Integer),
        sa.Column("ride_distance_km", sa.Float),
        sa.Column("ride_requested_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("ride_id", name="uq_ride_feedback_ride"),
    )
    op.create_index("idx_ride_feedback_created", "ride_feedback", ["created_at"])
    op.create_index("idx_ride_feedback_user", "ride_feedback", ["user_id"])

    # Global feature weights (incremental means per feature)
    op.create_table(
        "global_feature_weights",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("feature_name", sa.String(32), unique=True, nullable=False),
        sa.Column("weight_adjustment", sa.Float, nullable=False, server_default=sa.text("0")),
        sa.Column("accuracy_score", sa.Float, nullable=False, server_default=sa.text("0")),
        sa.Column("sample_count", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("global_feature_weights")
    op.drop_index("idx_ride_feedback_user", table_name="ride_feedback")
    op.drop_index("idx_ride_feedback_created", table_name="ride_feedback")
    op.drop_table("ride_feedback")
    op.drop_table("user_preference_profiles")
