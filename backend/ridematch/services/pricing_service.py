"""Contextual pricing — dynamic price estimates from time, demand and weather.

Multipliers are applied in a fixed order and compound:

    base      = 20000 + distance_km * 8000
    dynamic   = base * time * weather * demand
              * 0.9  if distance_km > 15      (long-distance discount)
              * 0.95 with probability p        (loyalty discount)

Weekday rush hour deliberately applies both a time multiplier (1.5) and a
demand multiplier (1.4).
"""

import logging
import math
import random

from ridematch.config import get_settings
from ridematch.schemas.suggestion import PriceEstimate, PricingContext, WeatherCondition
from ridematch.schemas.trip import TripRequest
from ridematch.services.time_windows import is_rush_hour, is_weekend
from ridematch.services.weather import WeatherProvider, build_weather_provider

logger = logging.getLogger(__name__)

BASE_FARE = 20000
PER_KM = 8000

WEEKEND_LATE_NIGHT_MULTIPLIER = 1.3
WEEKEND_DAY_MULTIPLIER = 0.9
RUSH_HOUR_TIME_MULTIPLIER = 1.5
RUSH_HOUR_DEMAND_MULTIPLIER = 1.4
OFF_PEAK_MULTIPLIER = 0.8

WEATHER_MULTIPLIERS: dict[WeatherCondition, float] = {
    "sunny": 1.0,
    "rain": 1.4,
    "storm": 1.8,
}
WEATHER_FACTORS: dict[WeatherCondition, str] = {
    "rain": "Rainy weather - increased demand",
    "storm": "Storm conditions - premium rates",
}

LONG_DISTANCE_KM = 15
LONG_DISTANCE_MULTIPLIER = 0.9
LOYALTY_DISCOUNT_MULTIPLIER = 0.95


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class LoyaltyDiscountPolicy:
    """Decides whether a trip gets the 5% loyalty discount.

    The probability is injectable so tests can pin it to 0 or 1.
    """

    def __init__(self, probability: float, rng: random.Random | None = None):
        if not 0.0 <= probability <= 1.0:
            raise ValueError("loyalty discount probability must be within [0, 1]")
        self.probability = probability
        self.rng = rng or random.Random()

    def applies(self) -> bool:
        if self.probability <= 0.0:
            return False
        if self.probability >= 1.0:
            return True
        return self.rng.random() < self.probability


class PricingService:
    def __init__(
        self,
        weather_provider: WeatherProvider | None = None,
        loyalty_discount: LoyaltyDiscountPolicy | None = None,
    ):
        self.weather_provider = weather_provider or build_weather_provider()
        self.loyalty_discount = loyalty_discount or LoyaltyDiscountPolicy(
            get_settings().loyalty_discount_probability
        )

    def context_for(self, request: TripRequest) -> PricingContext:
        """Compute the time, demand and weather multipliers for a request."""
        hour = request.request_time.hour
        factors: list[str] = []
        time_multiplier = 1.0
        demand_multiplier = 1.0

        if is_weekend(request.request_time):
            if hour >= 22 or hour <= 4:
                time_multiplier = WEEKEND_LATE_NIGHT_MULTIPLIER
                factors.append("Weekend late night - premium pricing")
            else:
                time_multiplier = WEEKEND_DAY_MULTIPLIER
                factors.append("Weekend daytime - relaxed pricing")
        elif is_rush_hour(hour):
            time_multiplier = RUSH_HOUR_TIME_MULTIPLIER
            demand_multiplier = RUSH_HOUR_DEMAND_MULTIPLIER
            factors.append("Rush hour - high demand")
        elif 10 <= hour <= 16:
            time_multiplier = OFF_PEAK_MULTIPLIER
            factors.append("Off-peak hours - lower pricing")

        weather = self.weather_provider.current_condition(request.pickup, request.request_time)
        if weather in WEATHER_FACTORS:
            factors.append(WEATHER_FACTORS[weather])

        return PricingContext(
            time_multiplier=time_multiplier,
            demand_multiplier=demand_multiplier,
            weather=weather,
            weather_multiplier=WEATHER_MULTIPLIERS[weather],
            context_factors=factors,
        )

    def price(
        self,
        request: TripRequest,
        distance_km: float,
        context: PricingContext | None = None,
    ) -> PriceEstimate:
        """Dynamic price estimate for a trip of the given pickup distance."""
        if context is None:
            context = self.context_for(request)

        base_price = BASE_FARE + distance_km * PER_KM
        price_factors = list(context.context_factors)

        dynamic_price = base_price
        dynamic_price *= context.time_multiplier
        dynamic_price *= context.weather_multiplier
        dynamic_price *= context.demand_multiplier

        if distance_km > LONG_DISTANCE_KM:
            dynamic_price *= LONG_DISTANCE_MULTIPLIER
            price_factors.append("Long distance discount (10%)")

        if self.loyalty_discount.applies():
            dynamic_price *= LOYALTY_DISCOUNT_MULTIPLIER
            price_factors.append("Loyalty discount (5%)")

        savings_percent = None
        if dynamic_price < base_price:
            savings_percent = round_half_up((1 - dynamic_price / base_price) * 100)

        return PriceEstimate(
            base_price=round_half_up(base_price),
            dynamic_price=round_half_up(dynamic_price),
            price_factors=price_factors,
            savings_percent=savings_percent,
        )
