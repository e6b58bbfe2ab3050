"""Ride request handler.

Takes one authenticated ride request, picks a driver, records the ride and
builds the JSON response. Transport concerns (HTTP, API Gateway events) live
in ``ride_api.main`` and ``ride_api.lambda_function``.
"""
import base64
import json
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Protocol, Union
from uuid import uuid4

import structlog
from pydantic import ValidationError

from ride_api.exceptions import AuthorizationMissing, MalformedRequest, RideRequestError
from ride_api.fleet import DriverSelector
from ride_api.models import RideRecord
from ride_api.schemas import ErrorResponse, PickupLocation, RideRequest, RideResponse
from shared.logger import get_logger

logger = get_logger(__name__)

RIDE_ID_BYTES = 16
CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}


class RideStore(Protocol):
    async def put(self, record: RideRecord) -> None:
        ...


@dataclass
class HandlerResponse:
    """Transport-neutral response: status code, JSON body and headers."""
    status_code: int
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=lambda: dict(CORS_HEADERS))


def to_url_string(raw: bytes) -> str:
    """Encode bytes as URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_pickup_location(body: Union[str, bytes, None]) -> PickupLocation:
    """
    Parse a request body into its pickup location.

    Raises:
        MalformedRequest: If the body is empty, not JSON, or fails validation
    """
    if body is None or not body.strip():
        raise MalformedRequest("Request body is required")
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedRequest(f"Request body is not valid JSON: {e}")
    if not isinstance(payload, dict):
        raise MalformedRequest("Request body must be a JSON object")
    try:
        return RideRequest.model_validate(payload).pickup_location
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise MalformedRequest(f"Invalid ride request: {problems}")


class RideRequestHandler:
    """Assigns a driver to a ride request and records the ride."""

    def __init__(
        self,
        selector: DriverSelector,
        store: RideStore,
        id_source: Callable[[int], bytes] = secrets.token_bytes,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            selector: Dispatch policy, called once per request
            store: Ride store receiving exactly one write per successful request
            id_source: Cryptographically secure byte source for ride ids
            clock: Returns the current UTC time for RequestTime
        """
        self.selector = selector
        self.store = store
        self.id_source = id_source
        self.clock = clock

    def new_ride_id(self) -> str:
        return to_url_string(self.id_source(RIDE_ID_BYTES))

    async def handle(
        self,
        body: Union[str, bytes, None],
        identity: Optional[str],
        request_id: Optional[str] = None,
    ) -> HandlerResponse:
        """
        Handle one ride request. Never raises; failures become error envelopes.

        Args:
            body: Raw JSON request body
            identity: Verified rider identity, None when no authorization context exists
            request_id: Correlation id echoed on errors; generated when absent

        Returns:
            HandlerResponse with status 201 on success, 4xx/5xx otherwise
        """
        reference = request_id or str(uuid4())
        with structlog.contextvars.bound_contextvars(request_id=reference):
            try:
                return await self._handle(body, identity)
            except RideRequestError as e:
                logger.error(
                    "ride_request_failed",
                    error_type=type(e).__name__,
                    status_code=e.status_code,
                    error=e.message,
                )
                return self._error(e.status_code, e.message, reference)
            except Exception as e:
                logger.exception("ride_request_unexpected_error", error=str(e))
                return self._error(500, str(e), reference)

    async def _handle(self, body: Union[str, bytes, None], identity: Optional[str]) -> HandlerResponse:
        if not isinstance(identity, str) or not identity:
            raise AuthorizationMissing()

        ride_id = self.new_ride_id()
        with structlog.contextvars.bound_contextvars(ride_id=ride_id):
            return await self._assign(ride_id, body, identity)

    async def _assign(self, ride_id: str, body: Union[str, bytes, None], identity: str) -> HandlerResponse:
        pickup_location = parse_pickup_location(body)
        driver = self.selector.select_driver(pickup_location)

        record = RideRecord(
            ride_id=ride_id,
            user=identity,
            driver=driver,
            request_time=self.clock(),
        )
        # Nothing after the write may fail
        response_body = RideResponse(ride_id=ride_id, unicorn=driver, rider=identity).model_dump(by_alias=True)
        await self.store.put(record)

        logger.info(
            "ride_recorded",
            rider=identity,
            driver=driver.name,
            latitude=pickup_location.latitude,
            longitude=pickup_location.longitude,
        )
        return HandlerResponse(status_code=201, body=response_body)

    @staticmethod
    def _error(status_code: int, message: str, reference: str) -> HandlerResponse:
        envelope = ErrorResponse(error=message, reference=reference)
        return HandlerResponse(status_code=status_code, body=envelope.model_dump(by_alias=True))
