"""Repository for per-experiment daily statistics.

Each touch is one UpdateItem: ADD creates the row with the counter at the
increment value when absent, and the other counters are seeded to zero with
if_not_exists.
"""

from datetime import date
from decimal import Decimal
from typing import Any

from abtrack.models.base import utc_now
from abtrack.models.daily_stat import ExperimentDailyStat, StatField
from abtrack.repositories.base import BaseRepository


class ExperimentDailyStatRepository(BaseRepository[ExperimentDailyStat]):
    """Repository for ExperimentDailyStat rows."""

    def __init__(self, table_name: str | None = None, table: Any = None):
        super().__init__(ExperimentDailyStat, table_name, table)

    def get_day(self, experiment_id: str, day: date) -> ExperimentDailyStat | None:
        """Get one experiment-day row."""
        return self.get(pk=f"EXPERIMENT#{experiment_id}", sk=f"DAY#{day.isoformat()}")

    def list_days(self, experiment_id: str, limit: int = 90) -> list[ExperimentDailyStat]:
        """List an experiment's daily rows, oldest first."""
        stats, _ = self.query(
            pk=f"EXPERIMENT#{experiment_id}",
            sk_begins_with="DAY#",
            limit=limit,
        )
        return stats

    def increment(
        self,
        experiment_id: str,
        day: date,
        field: StatField,
        revenue: float | None = None,
    ) -> ExperimentDailyStat:
        """Increment one counter for an experiment-day, creating the row if absent.

        Revenue is added only for conversion touches carrying a positive value.

        Args:
            experiment_id: Experiment ID.
            day: UTC calendar date.
            field: Counter to increment.
            revenue: Optional conversion value.

        Returns:
            The row as stored after the update.
        """
        field = StatField(field)
        other = StatField.CONVERSIONS if field == StatField.IMPRESSIONS else StatField.IMPRESSIONS
        now = utc_now().isoformat()

        add_values: dict[str, Any] = {field.value: 1}
        set_if_absent: dict[str, Any] = {
            "id": f"{experiment_id}#{day.isoformat()}",
            "experiment_id": experiment_id,
            "day": day.isoformat(),
            "version": 1,
            "created_at": now,
            other.value: 0,
        }
        if field == StatField.CONVERSIONS and revenue and revenue > 0:
            add_values["revenue"] = Decimal(str(revenue))
        else:
            set_if_absent["revenue"] = 0

        attributes = self.update_attributes(
            pk=f"EXPERIMENT#{experiment_id}",
            sk=f"DAY#{day.isoformat()}",
            set_values={"updated_at": now},
            set_if_absent=set_if_absent,
            add_values=add_values,
            return_values="ALL_NEW",
        )
        return ExperimentDailyStat.from_dynamodb(attributes)
