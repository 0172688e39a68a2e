"""Goal conversion model.

DynamoDB keys:
    PK: EXPERIMENT#{experiment_id}
    SK: CONVERSION#{id}
"""

from typing import Any

from pydantic import Field

from abtrack.models.base import BaseModel


class GoalConversion(BaseModel):
    """One conversion credited to one (goal, experiment, variant, visitor)."""

    goal_id: str
    experiment_id: str
    variant_id: str
    visitor_id: str  # Visitor.id
    value: float | None = None
    currency: str
    conversion_data: dict[str, Any] = Field(default_factory=dict)

    def get_pk(self) -> str:
        """Get the partition key."""
        return f"EXPERIMENT#{self.experiment_id}"

    def get_sk(self) -> str:
        """Get the sort key."""
        return f"CONVERSION#{self.id}"
