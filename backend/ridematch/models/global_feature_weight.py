"""Global feature weight model — running means per scoring feature."""

from sqlalchemy import Column, Float, Integer, String

from ridematch.models.base import Base, TimestampMixin, UUIDMixin


class GlobalFeatureWeightRow(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "global_feature_weights"

    feature_name = Column(String(32), unique=True, nullable=False)
    weight_adjustment = Column(Float, nullable=False, default=0.0)
    accuracy_score = Column(Float, nullable=False, default=0.0)
    sample_count = Column(Integer, nullable=False, default=0)
