"""Ride API service."""
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from ride_api.fleet import RandomDriverSelector, StaticDriverDirectory
from ride_api.handler import RideRequestHandler
from ride_api.storage import DynamoDBRideStore
from shared.auth import get_current_claims, identity_from_claims
from shared.logger import configure_logging, get_logger

configure_logging(environment=os.getenv("ENVIRONMENT", "development"))
logger = get_logger(__name__)

# Configuration
DYNAMODB_TABLE = os.getenv("DYNAMODB_TABLE", "Rides")
DYNAMODB_CREATE_TABLE = os.getenv("DYNAMODB_CREATE_TABLE", "false").lower() == "true"
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
AWS_PROFILE = os.getenv("AWS_PROFILE")

ride_store = DynamoDBRideStore(
    table_name=DYNAMODB_TABLE,
    region_name=AWS_REGION,
    aws_profile=AWS_PROFILE,
)
ride_handler = RideRequestHandler(
    selector=RandomDriverSelector(StaticDriverDirectory()),
    store=ride_store,
)


def get_ride_handler() -> RideRequestHandler:
    return ride_handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    if DYNAMODB_CREATE_TABLE:
        try:
            await ride_store.ensure_table_exists()
        except Exception as e:
            logger.error("ride_api_startup_failed", error=str(e))
            raise
    logger.info("ride_api_started", table_name=DYNAMODB_TABLE)

    yield

    logger.info("ride_api_shutdown")


app = FastAPI(
    title="Ride Request API",
    description="API for requesting a ride and getting a driver assigned",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/metrics", make_asgi_app())


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "ride_api"}


@app.post("/ride")
async def request_ride(
    request: Request,
    claims: Optional[Dict[str, Any]] = Depends(get_current_claims),
    handler: RideRequestHandler = Depends(get_ride_handler),
) -> JSONResponse:
    """
    Request a ride.

    The body is passed to the handler unparsed so malformed JSON produces the
    same error envelope as every other failure.
    """
    body = await request.body()
    result = await handler.handle(
        body,
        identity_from_claims(claims),
        request_id=request.headers.get("X-Request-ID"),
    )
    return JSONResponse(
        status_code=result.status_code,
        content=result.body,
        headers=result.headers,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
