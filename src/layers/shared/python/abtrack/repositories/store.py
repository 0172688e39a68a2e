"""Store aggregate that owns the DynamoDB handle for the pipeline.

Built once per process and passed to every component. Each entity group is
a typed repository attribute; nothing in the pipeline opens its own
connection.
"""

import os
from typing import Any

import boto3
import structlog

from abtrack.repositories.assignment import VariantAssignmentRepository
from abtrack.repositories.base import DEFAULT_TABLE_NAME
from abtrack.repositories.conversion import GoalConversionRepository
from abtrack.repositories.daily_stat import ExperimentDailyStatRepository
from abtrack.repositories.event import EventRepository
from abtrack.repositories.experiment import ExperimentRepository
from abtrack.repositories.live_log import LiveLogRepository
from abtrack.repositories.visitor import VisitorRepository

logger = structlog.get_logger()


class TrackingStore:
    """Repositories for every entity the ingestion pipeline touches.

    Usable as a context manager; leaving the block releases the underlying
    client connection pool.
    """

    def __init__(
        self,
        table_name: str | None = None,
        region_name: str | None = None,
        dynamodb: Any = None,
    ):
        """Initialize the store.

        Args:
            table_name: DynamoDB table name. Defaults to TABLE_NAME env var.
            region_name: Optional AWS region override.
            dynamodb: Optional pre-built boto3 DynamoDB resource.
        """
        self.table_name = table_name or os.environ.get("TABLE_NAME", DEFAULT_TABLE_NAME)
        if dynamodb is None:
            kwargs = {"region_name": region_name} if region_name else {}
            dynamodb = boto3.resource("dynamodb", **kwargs)
        self.dynamodb = dynamodb
        self.table = dynamodb.Table(self.table_name)

        self.visitors = VisitorRepository(self.table_name, self.table)
        self.events = EventRepository(self.table_name, self.table)
        self.assignments = VariantAssignmentRepository(self.table_name, self.table)
        self.experiments = ExperimentRepository(self.table_name, self.table)
        self.conversions = GoalConversionRepository(self.table_name, self.table)
        self.daily_stats = ExperimentDailyStatRepository(self.table_name, self.table)
        self.live_logs = LiveLogRepository(self.table_name, self.table)

    def close(self) -> None:
        """Release the client connection pool."""
        self.dynamodb.meta.client.close()
        logger.debug("Tracking store closed", table_name=self.table_name)

    def __enter__(self) -> "TrackingStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
