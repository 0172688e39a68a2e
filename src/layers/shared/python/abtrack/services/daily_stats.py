"""Daily statistic aggregation.

Touches are side effects of assignments and conversions. A failed touch is
logged and reported as False; it never propagates to, or undoes, the write
that triggered it.
"""

from datetime import date, datetime

import structlog

from abtrack.models.daily_stat import StatField, utc_day
from abtrack.repositories.daily_stat import ExperimentDailyStatRepository
from abtrack.utils.exceptions import AggregateUpdateError

logger = structlog.get_logger()


class DailyStatAggregator:
    """Maintains per-experiment, per-UTC-day counters."""

    def __init__(self, daily_stats: ExperimentDailyStatRepository):
        self.daily_stats = daily_stats

    def touch(
        self,
        experiment_id: str,
        occurred_at: datetime,
        field: StatField,
        revenue: float | None = None,
    ) -> bool:
        """Increment a counter in the experiment's bucket for the event's UTC day.

        Args:
            experiment_id: Experiment ID.
            occurred_at: Event timestamp; bucketed by its UTC calendar date.
            field: Counter to increment.
            revenue: Conversion value, added to revenue when positive.

        Returns:
            True if the bucket was updated.
        """
        day = utc_day(occurred_at)
        try:
            self._increment(experiment_id, day, field, revenue)
        except AggregateUpdateError as e:
            logger.error("Daily stat update error", **e.details)
            return False
        return True

    def _increment(self, experiment_id: str, day: date, field: StatField, revenue: float | None) -> None:
        try:
            self.daily_stats.increment(experiment_id, day, field, revenue)
        except Exception as e:
            raise AggregateUpdateError(experiment_id, day.isoformat(), original_error=str(e)) from e
