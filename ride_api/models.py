"""Data models for ride persistence."""
from datetime import datetime
from typing import Any, Dict

from ride_api.schemas import Driver


class RideRecord:
    """Ride record written once to the ride store."""

    def __init__(
        self,
        ride_id: str,
        user: str,
        driver: Driver,
        request_time: datetime,
    ):
        self.ride_id = ride_id
        self.user = user
        self.driver = driver
        self.request_time = request_time

    def to_dynamodb_item(self) -> Dict[str, Any]:
        """Convert to DynamoDB item format."""
        return {
            "RideId": self.ride_id,
            "User": self.user,
            "Unicorn": self.driver.to_wire(),
            "UnicornName": self.driver.name,
            "RequestTime": self.request_time.isoformat(),
        }
