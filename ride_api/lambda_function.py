"""API Gateway proxy entry point for the ride handler."""
import asyncio
import base64
import json
import os
from typing import Any, Dict, Optional, Union

from ride_api.fleet import RandomDriverSelector, StaticDriverDirectory
from ride_api.handler import RideRequestHandler
from ride_api.storage import DynamoDBRideStore
from shared.auth import identity_from_claims
from shared.logger import configure_logging, get_logger

configure_logging(environment=os.getenv("ENVIRONMENT", "production"))
logger = get_logger(__name__)

DYNAMODB_TABLE = os.getenv("DYNAMODB_TABLE", "Rides")
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")

ride_handler = RideRequestHandler(
    selector=RandomDriverSelector(StaticDriverDirectory()),
    store=DynamoDBRideStore(table_name=DYNAMODB_TABLE, region_name=AWS_REGION),
)


def identity_from_event(event: Dict[str, Any]) -> Optional[str]:
    """Return the authorizer's username claim, or None without an authorizer."""
    authorizer = (event.get("requestContext") or {}).get("authorizer")
    if not authorizer:
        return None
    return identity_from_claims(authorizer.get("claims"))


def body_from_event(event: Dict[str, Any]) -> Optional[Union[str, bytes]]:
    body = event.get("body")
    if body is not None and event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True)
        except ValueError as e:
            # Left as-is; the handler reports it as malformed JSON
            logger.warning("body_base64_decode_failed", error=str(e))
    return body


def lambda_handler(
    event: Dict[str, Any],
    context: Any,
    handler: Optional[RideRequestHandler] = None,
) -> Dict[str, Any]:
    """
    Handle an API Gateway proxy event for POST /ride.

    Args:
        event: Proxy integration event
        context: Lambda context; its aws_request_id is the error reference
        handler: Override for the module-level handler

    Returns:
        Proxy integration response dict
    """
    handler = handler or ride_handler
    request_id = getattr(context, "aws_request_id", None)
    result = asyncio.run(
        handler.handle(body_from_event(event), identity_from_event(event), request_id=request_id)
    )
    return {
        "statusCode": result.status_code,
        "body": json.dumps(result.body),
        "headers": result.headers,
    }
