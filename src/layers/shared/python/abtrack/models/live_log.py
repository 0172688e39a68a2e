"""Live log model: short-lived, human-facing audit entries.

Expired rows are removed by DynamoDB TTL on the ``ttl`` attribute.

DynamoDB keys:
    PK: EXPERIMENT#{experiment_id}#LOGS
    SK: LOG#{id}
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import Field

from abtrack.models.base import BaseModel, utc_now

LIVE_LOG_TTL = timedelta(hours=24)


class LiveLogType(str, Enum):
    """Kinds of live log entries."""

    VISITOR_ASSIGNED = "VISITOR_ASSIGNED"
    GOAL_CONVERSION = "GOAL_CONVERSION"


def _default_expiry() -> datetime:
    return utc_now() + LIVE_LOG_TTL


class LiveLog(BaseModel):
    """Audit entry shown on the live experiment dashboard."""

    experiment_id: str
    visitor_id: str  # client visitor id, as shown to humans
    variant_id: str | None = None
    log_type: LiveLogType
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
    expires_at: datetime = Field(default_factory=_default_expiry)

    @property
    def ttl(self) -> int:
        """Expiry as epoch seconds for DynamoDB TTL."""
        return int(self.expires_at.timestamp())

    def get_pk(self) -> str:
        """Get the partition key."""
        return f"EXPERIMENT#{self.experiment_id}#LOGS"

    def get_sk(self) -> str:
        """Get the sort key."""
        return f"LOG#{self.id}"
