import math

import pytest

from factories import PICKUP, point_at_km
from ridematch.schemas.trip import GeoPoint
from ridematch.services.geo import bearing_degrees, distance_km


def test_distance_to_self_is_zero():
    assert distance_km(PICKUP, PICKUP) == 0.0


def test_distance_along_meridian():
    assert distance_km(PICKUP, point_at_km(3.0)) == pytest.approx(3.0, abs=1e-9)


def test_distance_is_symmetric():
    a = GeoPoint(latitude=10.7769, longitude=106.7009)
    b = GeoPoint(latitude=21.0285, longitude=105.8542)
    assert distance_km(a, b) == pytest.approx(distance_km(b, a))


def test_known_city_pair():
    # Ho Chi Minh City -> Hanoi, roughly 1140 km great-circle
    hcmc = GeoPoint(latitude=10.7769, longitude=106.7009)
    hanoi = GeoPoint(latitude=21.0285, longitude=105.8542)
    assert 1130 < distance_km(hcmc, hanoi) < 1150


def test_non_finite_input_propagates_nan():
    bad = GeoPoint.model_construct(latitude=math.nan, longitude=0.0)
    assert math.isnan(distance_km(PICKUP, bad))


def test_bearing_due_north_and_east():
    assert bearing_degrees(PICKUP, point_at_km(5.0)) == pytest.approx(0.0, abs=1e-6)
    east = GeoPoint(latitude=PICKUP.latitude, longitude=PICKUP.longitude + 0.1)
    assert bearing_degrees(PICKUP, east) == pytest.approx(90.0, abs=0.1)
