"""Driver directory and dispatch policy.

Dispatch goes through ``select_driver(pickup_location)`` only, so a
proximity or availability based matcher can replace ``RandomDriverSelector``
without touching request handling.
"""
import random
from typing import Iterable, Optional, Protocol, Sequence, Tuple

from ride_api.schemas import Driver, PickupLocation
from shared.logger import get_logger

logger = get_logger(__name__)

DEFAULT_FLEET: Tuple[Driver, ...] = (
    Driver(name="Bucephalus", color="Golden", gender="Male"),
    Driver(name="Shadowfax", color="White", gender="Male"),
    Driver(name="Rocinante", color="Yellow", gender="Female"),
)


class DriverDirectory(Protocol):
    def list_available(self) -> Sequence[Driver]:
        ...


class DriverSelector(Protocol):
    def select_driver(self, pickup_location: PickupLocation) -> Driver:
        ...


class StaticDriverDirectory:
    """Read-only roster held in memory."""

    def __init__(self, roster: Iterable[Driver] = DEFAULT_FLEET):
        self._roster = tuple(roster)
        if not self._roster:
            raise ValueError("Driver roster must not be empty")

    def list_available(self) -> Sequence[Driver]:
        return self._roster


class RandomDriverSelector:
    """Uniform random choice over the directory; the pickup location is ignored."""

    def __init__(self, directory: DriverDirectory, rng: Optional[random.Random] = None):
        """
        Args:
            directory: Source of candidate drivers
            rng: Random source for selection (not used for ride ids)
        """
        self.directory = directory
        self.rng = rng or random.Random()

    def select_driver(self, pickup_location: PickupLocation) -> Driver:
        drivers = self.directory.list_available()
        driver = self.rng.choice(drivers)
        logger.debug(
            "driver_selected",
            driver=driver.name,
            candidates=len(drivers),
            latitude=pickup_location.latitude,
            longitude=pickup_location.longitude,
        )
        return driver
