"""Pydantic schemas for the ride API wire format."""
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field

ETA = "30 seconds"


class PickupLocation(BaseModel):
    """Where the rider wants to be picked up."""
    model_config = ConfigDict(populate_by_name=True)

    latitude: float = Field(..., alias="Latitude", description="Latitude in degrees, expected in [-90, 90]")
    longitude: float = Field(..., alias="Longitude", description="Longitude in degrees, expected in [-180, 180]")


class RideRequest(BaseModel):
    """Request body for POST /ride."""
    model_config = ConfigDict(populate_by_name=True)

    pickup_location: PickupLocation = Field(..., alias="PickupLocation")


class Driver(BaseModel):
    """A roster entry. Serialized under the ``Unicorn`` key on the wire."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., alias="Name")
    color: str = Field(..., alias="Color")
    gender: str = Field(..., alias="Gender")

    def to_wire(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True)


class RideResponse(BaseModel):
    """Response body for a ride that was recorded."""
    model_config = ConfigDict(populate_by_name=True)

    ride_id: str = Field(..., alias="RideId", description="URL-safe ride identifier")
    unicorn: Driver = Field(..., alias="Unicorn", description="Assigned driver")
    eta: str = Field(default=ETA, alias="Eta", description="Estimated time to pickup")
    rider: str = Field(..., alias="Rider", description="Verified rider identity")


class ErrorResponse(BaseModel):
    """Error envelope returned for every failed request."""
    model_config = ConfigDict(populate_by_name=True)

    error: str = Field(..., alias="Error", description="Failure message")
    reference: str = Field(..., alias="Reference", description="Correlation id for tracing")
