"""DynamoDB ride store."""
import os
import time
from typing import Optional

import aioboto3
from botocore.exceptions import ClientError
from prometheus_client import Counter, Histogram

from ride_api.exceptions import StorageFailure
from ride_api.models import RideRecord
from shared.logger import get_logger

logger = get_logger(__name__)

# Prometheus metrics
ride_writes = Counter(
    "ride_store_writes_total",
    "Ride store write operations",
    ["table", "status"]
)

ride_write_duration = Histogram(
    "ride_store_write_seconds",
    "Ride store write latency",
    ["table"]
)


def _error_message(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Message") or str(exc)
    return str(exc)


class DynamoDBRideStore:
    """Async DynamoDB writer for ride records."""

    def __init__(
        self,
        table_name: str,
        region_name: str = "us-east-1",
        aws_profile: Optional[str] = None,
    ):
        """
        Initialize the ride store.

        Args:
            table_name: DynamoDB table name
            region_name: AWS region
            aws_profile: AWS profile name (optional)
        """
        self.table_name = table_name
        self.region_name = region_name
        self.aws_profile = aws_profile or os.getenv("AWS_PROFILE")
        self.session = None

    async def _get_session(self):
        """Get or create the aioboto3 session."""
        if self.session is None:
            session_kwargs = {"region_name": self.region_name}
            if self.aws_profile:
                session_kwargs["profile_name"] = self.aws_profile
            self.session = aioboto3.Session(**session_kwargs)
        return self.session

    async def ensure_table_exists(self) -> None:
        """Create the rides table if it doesn't exist (idempotent)."""
        session = await self._get_session()
        async with session.client("dynamodb") as dynamodb:
            try:
                await dynamodb.describe_table(TableName=self.table_name)
                logger.info("dynamodb_table_exists", table_name=self.table_name)
            except ClientError as e:
                if e.response["Error"]["Code"] != "ResourceNotFoundException":
                    raise
                try:
                    await dynamodb.create_table(
                        TableName=self.table_name,
                        KeySchema=[{"AttributeName": "RideId", "KeyType": "HASH"}],
                        AttributeDefinitions=[{"AttributeName": "RideId", "AttributeType": "S"}],
                        BillingMode="PAY_PER_REQUEST",
                    )
                    logger.info("dynamodb_table_created", table_name=self.table_name)
                except ClientError as create_error:
                    logger.error(
                        "dynamodb_table_creation_failed",
                        table_name=self.table_name,
                        error=str(create_error),
                    )
                    raise

    async def put(self, record: RideRecord) -> None:
        """
        Write a ride record. Attempted once, never retried here.

        Args:
            record: Ride record to persist

        Raises:
            StorageFailure: On any failure of the write (rejected, unreachable, or unexpected)
        """
        start_time = time.time()
        try:
            session = await self._get_session()
            async with session.resource("dynamodb") as dynamodb:
                table = await dynamodb.Table(self.table_name)
                await table.put_item(Item=record.to_dynamodb_item())
        except Exception as e:
            duration = time.time() - start_time
            ride_write_duration.labels(table=self.table_name).observe(duration)
            ride_writes.labels(table=self.table_name, status="error").inc()
            logger.error(
                "dynamodb_write_failed",
                ride_id=record.ride_id,
                table_name=self.table_name,
                error=str(e),
            )
            raise StorageFailure(_error_message(e)) from e

        duration = time.time() - start_time
        ride_write_duration.labels(table=self.table_name).observe(duration)
        ride_writes.labels(table=self.table_name, status="success").inc()
        logger.info(
            "ride_written_to_dynamodb",
            ride_id=record.ride_id,
            table_name=self.table_name,
            duration_ms=round(duration * 1000, 2),
        )
