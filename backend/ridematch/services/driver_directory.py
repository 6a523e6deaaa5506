"""Driver directory clients — look up a driver's current attributes."""

import logging
from abc import ABC, abstractmethod

import httpx

from ridematch.config import get_settings
from ridematch.schemas.trip import Driver

logger = logging.getLogger(__name__)


class DriverDirectory(ABC):
    @abstractmethod
    def get_driver(self, driver_id: str) -> Driver | None:
        ...


class InMemoryDriverDirectory(DriverDirectory):
    def __init__(self, drivers: list[Driver] | None = None):
        self._drivers = {d.id: d for d in drivers or []}

    def add(self, driver: Driver) -> None:
        self._drivers[driver.id] = driver

    def get_driver(self, driver_id: str) -> Driver | None:
        return self._drivers.get(driver_id)


class HttpDriverDirectory(DriverDirectory):
    """Reads drivers from `GET {base_url}/drivers/{id}`.

    Lookups are best effort: errors are logged and reported as "unknown
    driver" so that learning can skip the attribute-based steps.
    """

    def __init__(self, base_url: str, timeout: float | None = None, transport: httpx.BaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else get_settings().driver_directory_timeout
        self.transport = transport

    def get_driver(self, driver_id: str) -> Driver | None:
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.get(f"{self.base_url}/drivers/{driver_id}")
                if response.status_code == 404:
                    return None
                response.raise_for_status()
                return Driver.model_validate(response.json())

        except httpx.HTTPError as e:
            logger.warning("Driver directory lookup failed for %s: %s", driver_id, e)
        except ValueError as e:  # includes pydantic ValidationError
            logger.warning("Invalid driver payload for %s: %s", driver_id, e)
        return None


def build_driver_directory() -> DriverDirectory | None:
    settings = get_settings()
    if settings.driver_directory_url:
        return HttpDriverDirectory(settings.driver_directory_url)
    return None
