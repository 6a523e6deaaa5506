import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ridematch.models.base import Base
from ridematch.repositories.memory import InMemoryLearningRepository
from ridematch.repositories.sql import SqlLearningRepository
from ridematch.services.pricing_service import LoyaltyDiscountPolicy, PricingService
from ridematch.services.scoring_service import ScoringEngine
from ridematch.services.weather import FixedWeatherProvider


@pytest.fixture
def pricing():
    """Deterministic pricing: sunny weather, never a loyalty discount."""
    return PricingService(FixedWeatherProvider("sunny"), LoyaltyDiscountPolicy(0.0))


@pytest.fixture
def engine(pricing):
    return ScoringEngine(pricing)


@pytest.fixture
def memory_repo():
    return InMemoryLearningRepository()


@pytest.fixture
def sql_session():
    db_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(db_engine)
    Session = sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)
    with Session() as session:
        yield session
    db_engine.dispose()


@pytest.fixture
def sql_repo(sql_session):
    return SqlLearningRepository(sql_session)
