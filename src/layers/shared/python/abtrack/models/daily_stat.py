"""Per-experiment, per-UTC-day aggregate counters.

DynamoDB keys:
    PK: EXPERIMENT#{experiment_id}
    SK: DAY#{YYYY-MM-DD}
"""

from datetime import date, datetime, timezone
from enum import Enum

from abtrack.models.base import BaseModel


class StatField(str, Enum):
    """Counter a daily stat touch increments."""

    IMPRESSIONS = "impressions"
    CONVERSIONS = "conversions"


def utc_day(moment: datetime) -> date:
    """Truncate a datetime to its UTC calendar date.

    Naive datetimes are taken as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).date()


class ExperimentDailyStat(BaseModel):
    """Running impressions, conversions and revenue for one experiment-day."""

    experiment_id: str
    day: date
    impressions: int = 0
    conversions: int = 0
    revenue: float = 0

    def get_pk(self) -> str:
        """Get the partition key."""
        return f"EXPERIMENT#{self.experiment_id}"

    def get_sk(self) -> str:
        """Get the sort key."""
        return f"DAY#{self.day.isoformat()}"
