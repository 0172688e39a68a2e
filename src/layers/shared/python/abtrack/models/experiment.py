"""Experiment, variant and experiment-goal models.

These rows are authored by the admin side of the platform. The ingestion
pipeline only increments their counters.

DynamoDB keys:
    Experiment      PK: EXPERIMENT#{id}              SK: META
    Variant         PK: EXPERIMENT#{experiment_id}   SK: VARIANT#{id}
    ExperimentGoal  PK: EXPERIMENT#{experiment_id}   SK: GOAL#{goal_id}
"""

from enum import Enum

from pydantic import Field

from abtrack.models.base import BaseModel


class ExperimentStatus(str, Enum):
    """Experiment lifecycle status."""

    DRAFT = "DRAFT"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"


class Experiment(BaseModel):
    """An A/B experiment with population and conversion totals."""

    project_id: str
    name: str
    status: ExperimentStatus = ExperimentStatus.DRAFT
    traffic_allocation: int = 100
    url_pattern: str | None = None

    total_visitors: int = 0
    total_conversions: int = 0

    def get_pk(self) -> str:
        """Get the partition key."""
        return f"EXPERIMENT#{self.id}"

    def get_sk(self) -> str:
        """Get the sort key."""
        return "META"


class Variant(BaseModel):
    """One arm of an experiment."""

    experiment_id: str
    name: str
    is_control: bool = False
    traffic_weight: int = 50
    changes: list[dict] = Field(default_factory=list)

    visitors: int = 0
    conversions: int = 0

    def get_pk(self) -> str:
        """Get the partition key."""
        return f"EXPERIMENT#{self.experiment_id}"

    def get_sk(self) -> str:
        """Get the sort key."""
        return f"VARIANT#{self.id}"


class ExperimentGoal(BaseModel):
    """Pairing of a goal with an experiment it is measured on."""

    experiment_id: str
    goal_id: str
    is_primary: bool = False

    conversions: int = 0

    def get_pk(self) -> str:
        """Get the partition key."""
        return f"EXPERIMENT#{self.experiment_id}"

    def get_sk(self) -> str:
        """Get the sort key."""
        return f"GOAL#{self.goal_id}"
