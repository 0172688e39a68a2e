"""Repository for goal conversion records."""

from typing import Any

from abtrack.models.conversion import GoalConversion
from abtrack.repositories.base import BaseRepository


class GoalConversionRepository(BaseRepository[GoalConversion]):
    """Repository for GoalConversion records."""

    def __init__(self, table_name: str | None = None, table: Any = None):
        super().__init__(GoalConversion, table_name, table)

    def append(self, conversion: GoalConversion) -> GoalConversion:
        """Write a new conversion row."""
        return self.create(conversion)

    def list_by_experiment(self, experiment_id: str, limit: int = 100) -> list[GoalConversion]:
        """List conversions credited to an experiment."""
        conversions, _ = self.query(
            pk=f"EXPERIMENT#{experiment_id}",
            sk_begins_with="CONVERSION#",
            limit=limit,
        )
        return conversions
