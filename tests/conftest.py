import random
from datetime import datetime, timezone

import pytest

from ride_api.fleet import DEFAULT_FLEET, RandomDriverSelector, StaticDriverDirectory
from ride_api.handler import RideRequestHandler

FIXED_TIME = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
VALID_BODY = '{"PickupLocation":{"Latitude":47.61,"Longitude":-122.28}}'


class RecordingStore:
    """In-memory ride store that counts write attempts."""

    def __init__(self, error=None):
        self.error = error
        self.attempts = 0
        self.records = []

    async def put(self, record):
        self.attempts += 1
        if self.error is not None:
            raise self.error
        self.records.append(record)


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def selector():
    return RandomDriverSelector(StaticDriverDirectory(DEFAULT_FLEET), rng=random.Random(7))


@pytest.fixture
def handler(selector, store):
    return RideRequestHandler(selector=selector, store=store, clock=lambda: FIXED_TIME)
