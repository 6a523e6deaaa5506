"""Weather providers used by contextual pricing.

Pricing only needs a coarse condition (sunny / rain / storm). Providers are
swappable: a fixed provider for tests, a seedable simulation, and a live
provider backed by the Open-Meteo current-weather API.
"""

import logging
import random
from abc import ABC, abstractmethod
from datetime import datetime

import httpx

from ridematch.config import get_settings
from ridematch.schemas.suggestion import WeatherCondition
from ridematch.schemas.trip import GeoPoint

logger = logging.getLogger(__name__)

# WMO weather interpretation codes
_STORM_CODES = {95, 96, 99}
_RAIN_CODES = set(range(51, 68)) | set(range(71, 78)) | set(range(80, 87))


def condition_from_wmo_code(code: int) -> WeatherCondition:
    """Map a WMO weather code to the pricing condition."""
    if code in _STORM_CODES:
        return "storm"
    if code in _RAIN_CODES:
        return "rain"
    return "sunny"


class WeatherProvider(ABC):
    """Source of the current weather condition at a location."""

    @abstractmethod
    def current_condition(self, location: GeoPoint, at: datetime) -> WeatherCondition:
        ...


class FixedWeatherProvider(WeatherProvider):
    """Always reports the same condition."""

    def __init__(self, condition: WeatherCondition = "sunny"):
        self.condition = condition

    def current_condition(self, location: GeoPoint, at: datetime) -> WeatherCondition:
        return self.condition


class SimulatedWeatherProvider(WeatherProvider):
    """Random weather, mostly sunny (3:1:1 sunny/rain/storm)."""

    CONDITIONS: tuple[WeatherCondition, ...] = ("sunny", "sunny", "sunny", "rain", "storm")

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def current_condition(self, location: GeoPoint, at: datetime) -> WeatherCondition:
        return self.rng.choice(self.CONDITIONS)


class OpenMeteoWeatherProvider(WeatherProvider):
    """Live weather from Open-Meteo.

    Falls back to "sunny" (no surcharge) when the API cannot be reached, so a
    weather outage never blocks a recommendation.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        settings = get_settings()
        self.base_url = base_url or settings.weather_api_url
        self.timeout = timeout if timeout is not None else settings.weather_timeout
        self.transport = transport

    def current_condition(self, location: GeoPoint, at: datetime) -> WeatherCondition:
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.get(
                    self.base_url,
                    params={
                        "latitude": location.latitude,
                        "longitude": location.longitude,
                        "current": "weather_code",
                    },
                )
                response.raise_for_status()
                code = int(response.json()["current"]["weather_code"])
                return condition_from_wmo_code(code)

        except httpx.HTTPError as e:
            logger.warning("Weather lookup failed for %s,%s: %s", location.latitude, location.longitude, e)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Unexpected weather payload: %s", e)
        return "sunny"


def build_weather_provider() -> WeatherProvider:
    """Create the provider selected in settings."""
    settings = get_settings()
    if settings.weather_provider == "open_meteo":
        return OpenMeteoWeatherProvider()
    if settings.weather_provider == "fixed":
        return FixedWeatherProvider(settings.weather_fixed_condition)
    return SimulatedWeatherProvider()
