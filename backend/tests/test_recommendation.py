import pytest

from factories import PICKUP, WEEKDAY_NOON, WEEKDAY_RUSH, make_driver, make_request
from ridematch.errors import EngineUnavailableError, InvalidTripRequestError, PersistenceError
from ridematch.repositories.memory import InMemoryLearningRepository
from ridematch.schemas.suggestion import NoDriversMatched, RankedSuggestions
from ridematch.schemas.trip import GeoPoint, TripRequest
from ridematch.services.recommendation_service import RecommendationService


class UnavailableRepository(InMemoryLearningRepository):
    def get_profile(self, user_id):
        raise PersistenceError("database is down")


@pytest.fixture
def service(memory_repo, pricing):
    return RecommendationService(memory_repo, pricing, max_suggestions=5, cold_start_threshold=3)


def _warm_up(repo, user_id="rider-1", rides=3):
    for _ in range(rides):
        repo.apply_adjustment(user_id, "feedback_count", 1, 1.0, "adjust")


def test_ranked_and_capped(service):
    drivers = [make_driver(f"d{i}", km=0.5 + i) for i in range(8)]
    result = service.suggest(make_request(at=WEEKDAY_NOON), drivers)

    assert isinstance(result, RankedSuggestions)
    assert [s.driver.id for s in result.suggestions] == ["d0", "d1", "d2", "d3", "d4"]
    assert result.total_drivers == 8
    assert result.eligible_drivers == 8
    assert result.pricing_context.context_factors == ["Off-peak hours - lower pricing"]


def test_no_drivers_matched_is_a_result_not_an_error(service):
    result = service.suggest(make_request(), [make_driver(available=False)])
    assert isinstance(result, NoDriversMatched)
    assert result.suggestions == []
    assert result.total_drivers == 1


def test_empty_pool(service):
    assert isinstance(service.suggest(make_request(), []), NoDriversMatched)


def test_new_riders_get_anonymous_scoring(memory_repo, service):
    _warm_up(memory_repo, rides=2)
    result = service.suggest(make_request(at=WEEKDAY_RUSH), [make_driver(km=3.0)])

    assert result.personalized is False
    assert result.preferences is None
    assert result.suggestions[0].score == 82


def test_personalized_after_enough_feedback(memory_repo, service):
    _warm_up(memory_repo)
    memory_repo.apply_adjustment("rider-1", "driver_loyalty", 10, 1.0, "loyalty_update", key="driver-1")

    result = service.suggest(make_request(at=WEEKDAY_RUSH), [make_driver(km=3.0)])

    assert result.personalized is True
    assert result.preferences.preferred_rating_range == (4.5, 5.0)
    # 0.35*70 + 0.25*100 + 0.15*100 + 0.15*10 + 0.10*70 = 73
    assert result.suggestions[0].score == 73


def test_personalization_can_be_disabled(memory_repo, service):
    _warm_up(memory_repo)
    result = service.suggest(make_request(at=WEEKDAY_RUSH), [make_driver(km=3.0)], personalized=False)
    assert result.personalized is False


def test_personal_constraints_apply_once_warm(memory_repo, service):
    _warm_up(memory_repo)
    drivers = [make_driver("good", rating=4.8), make_driver("meh", rating=4.2), make_driver("far", km=25.0)]

    result = service.suggest(make_request(), drivers)

    assert [s.driver.id for s in result.suggestions] == ["good"]
    assert result.eligible_drivers == 1


@pytest.mark.parametrize("passengers", [0, -2])
def test_bad_passenger_count_is_rejected(service, passengers):
    request = make_request().model_copy(update={"passenger_count": passengers})
    with pytest.raises(InvalidTripRequestError):
        service.suggest(request, [make_driver()])


def test_non_finite_pickup_is_rejected(service):
    bad_pickup = GeoPoint.model_construct(latitude=float("nan"), longitude=PICKUP.longitude)
    request = TripRequest.model_construct(
        pickup=bad_pickup,
        destination=None,
        passenger_count=1,
        requesting_user_id="rider-1",
        preferred_rating=None,
        request_time=WEEKDAY_NOON,
    )
    with pytest.raises(InvalidTripRequestError):
        service.suggest(request, [make_driver()])


def test_store_outage_is_engine_unavailable(pricing):
    service = RecommendationService(UnavailableRepository(), pricing)
    with pytest.raises(EngineUnavailableError):
        service.suggest(make_request(), [make_driver()])
