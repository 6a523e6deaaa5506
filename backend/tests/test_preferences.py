import pytest

from ridematch.schemas.profile import UserPreferenceProfile
from ridematch.services.preference_service import adjust_profile


@pytest.fixture
def profile():
    return UserPreferenceProfile.defaults("rider-1")


def test_defaults(profile):
    assert profile.preferred_rating_range == (4.5, 5.0)
    assert profile.preferred_car_size == 4
    assert profile.average_ride_distance_km == 8.5
    assert profile.price_sensitivity == 0.6
    assert profile.time_of_day_affinity == {"morning": 0.7, "afternoon": 0.5, "evening": 0.8, "night": 0.3}
    assert profile.driver_loyalty == {}
    assert profile.feedback_count == 0


def test_rating_range_must_be_ordered():
    with pytest.raises(ValueError):
        UserPreferenceProfile(user_id="rider-1", preferred_rating_range=(4.8, 4.2))


def test_adjustment_returns_a_copy(profile):
    updated = adjust_profile(profile, "price_sensitivity", 0.1, 1.0, "adjust")
    assert profile.price_sensitivity == 0.6
    assert updated.price_sensitivity == pytest.approx(0.7)
    assert updated.last_updated_at is not None


def test_reinforce_rating_moves_range_toward_observation():
    profile = UserPreferenceProfile(user_id="rider-1", preferred_rating_range=(4.0, 4.4))
    updated = adjust_profile(profile, "preferred_rating", 4.7, 1.0, "reinforce")
    low, high = updated.preferred_rating_range
    # midpoint 4.2 moves 10% of the way to 4.7; width is kept
    assert (low + high) / 2 == pytest.approx(4.25)
    assert high - low == pytest.approx(0.4)


def test_penalize_rating_moves_range_away():
    profile = UserPreferenceProfile(user_id="rider-1", preferred_rating_range=(4.0, 4.4))
    updated = adjust_profile(profile, "preferred_rating", 3.2, 0.5, "penalize")
    low, high = updated.preferred_rating_range
    assert (low + high) / 2 == pytest.approx(4.25)


def test_rating_range_stays_within_scale(profile):
    updated = profile
    for _ in range(50):
        updated = adjust_profile(updated, "preferred_rating", 5.0, 1.0, "reinforce")
    low, high = updated.preferred_rating_range
    assert high <= 5.0
    assert low <= high


def test_car_size_nudge():
    profile = UserPreferenceProfile(user_id="rider-1", preferred_car_size=4)
    assert adjust_profile(profile, "preferred_car_size", 7, 1.0, "reinforce").preferred_car_size == 6
    assert adjust_profile(profile, "preferred_car_size", 7, 0.2, "reinforce").preferred_car_size == 4


def test_small_car_size_nudges_accumulate(profile):
    # satisfied rides with a 5-seater: 4 -> 4.35 -> 4.5775
    once = adjust_profile(profile, "preferred_car_size", 5, 0.7, "reinforce")
    assert once.preferred_car_size == 4
    assert once.car_size_estimate == pytest.approx(4.35)

    twice = adjust_profile(once, "preferred_car_size", 5, 0.7, "reinforce")
    assert twice.preferred_car_size == 5
    assert twice.car_size_estimate == pytest.approx(4.5775)


def test_car_size_estimate_clamps(profile):
    big = profile.model_copy(update={"car_size_estimate": 7.9, "preferred_car_size": 8})
    updated = adjust_profile(big, "preferred_car_size", 1, 1.0, "penalize")
    assert updated.car_size_estimate == 8.0
    assert updated.preferred_car_size == 8


def test_price_sensitivity_clamps(profile):
    high = profile.model_copy(update={"price_sensitivity": 0.95})
    assert adjust_profile(high, "price_sensitivity", 0.1, 1.0, "adjust").price_sensitivity == 1.0
    low = profile.model_copy(update={"price_sensitivity": 0.02})
    assert adjust_profile(low, "price_sensitivity", -0.05, 1.0, "adjust").price_sensitivity == 0.0


def test_loyalty_update_is_additive_and_bounded(profile):
    updated = adjust_profile(profile, "driver_loyalty", 10, 1.0, "loyalty_update", key="driver-1")
    updated = adjust_profile(updated, "driver_loyalty", 7, 1.0, "loyalty_update", key="driver-1")
    assert updated.driver_loyalty == {"driver-1": 17.0}

    # Negative signals cannot push below zero; one event moves at most 10 points
    updated = adjust_profile(updated, "driver_loyalty", -50, 1.0, "loyalty_update", key="driver-1")
    assert updated.driver_loyalty["driver-1"] == 7.0
    updated = adjust_profile(updated, "driver_loyalty", -10, 1.0, "loyalty_update", key="driver-1")
    assert updated.driver_loyalty["driver-1"] == 0.0


def test_time_affinity_adjust(profile):
    updated = adjust_profile(profile, "time_of_day_affinity", 0.05, 1.0, "adjust", key="night")
    assert updated.time_of_day_affinity["night"] == pytest.approx(0.35)
    assert updated.time_of_day_affinity["morning"] == 0.7


def test_average_distance_reinforce(profile):
    updated = adjust_profile(profile, "average_ride_distance_km", 18.5, 1.0, "reinforce")
    assert updated.average_ride_distance_km == pytest.approx(10.5)


def test_feedback_count(profile):
    assert adjust_profile(profile, "feedback_count", 1, 1.0, "adjust").feedback_count == 1


@pytest.mark.parametrize(
    "field,mode,key",
    [
        ("price_sensitivity", "reinforce", None),
        ("driver_loyalty", "adjust", "driver-1"),
        ("driver_loyalty", "loyalty_update", None),
        ("nickname", "adjust", None),
    ],
)
def test_invalid_adjustments_are_rejected(profile, field, mode, key):
    with pytest.raises(ValueError):
        adjust_profile(profile, field, 1.0, 1.0, mode, key=key)
