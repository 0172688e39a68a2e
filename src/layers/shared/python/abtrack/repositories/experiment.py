"""Repository for experiment, variant and experiment-goal counters.

Counter updates are atomic ADD operations. Experiment and variant rows must
already exist; incrementing a missing one is an error, never an implicit
create.
"""

from typing import Any

import structlog
from botocore.exceptions import ClientError

from abtrack.models.base import utc_now
from abtrack.models.experiment import Experiment, ExperimentGoal, Variant
from abtrack.repositories.base import BaseRepository, is_conditional_check_failure
from abtrack.utils.exceptions import NotFoundError

logger = structlog.get_logger()


class ExperimentRepository(BaseRepository[Experiment]):
    """Repository for Experiment rows and their child counters."""

    def __init__(self, table_name: str | None = None, table: Any = None):
        super().__init__(Experiment, table_name, table)

    # -------------------------------------------------------------------------
    # Reads and admin-side writes (seed data, tests)
    # -------------------------------------------------------------------------

    def get_by_id(self, experiment_id: str) -> Experiment | None:
        """Get an experiment by ID."""
        return self.get(pk=f"EXPERIMENT#{experiment_id}", sk="META")

    def get_variant(self, experiment_id: str, variant_id: str) -> Variant | None:
        """Get one variant of an experiment."""
        item = self._get_raw(f"EXPERIMENT#{experiment_id}", f"VARIANT#{variant_id}")
        return Variant.from_dynamodb(item) if item else None

    def get_experiment_goal(self, experiment_id: str, goal_id: str) -> ExperimentGoal | None:
        """Get the pairing of a goal with an experiment."""
        item = self._get_raw(f"EXPERIMENT#{experiment_id}", f"GOAL#{goal_id}")
        return ExperimentGoal.from_dynamodb(item) if item else None

    def save_experiment(self, experiment: Experiment) -> Experiment:
        """Write an experiment row."""
        return self.put(experiment)

    def save_variant(self, variant: Variant) -> Variant:
        """Write a variant row."""
        return self.put(variant)

    def save_experiment_goal(self, experiment_goal: ExperimentGoal) -> ExperimentGoal:
        """Write an experiment-goal pairing row."""
        return self.put(experiment_goal)

    def _get_raw(self, pk: str, sk: str) -> dict | None:
        try:
            response = self.table.get_item(Key=self._build_key(pk, sk))
        except ClientError as e:
            logger.error("DynamoDB get_item failed", error=str(e), pk=pk, sk=sk)
            raise
        return response.get("Item")

    # -------------------------------------------------------------------------
    # Atomic counters
    # -------------------------------------------------------------------------

    def increment_variant_visitors(self, experiment_id: str, variant_id: str) -> None:
        """Count one more unique visitor assigned to a variant."""
        self._increment(
            f"EXPERIMENT#{experiment_id}", f"VARIANT#{variant_id}", "visitors", "Variant", variant_id
        )

    def increment_variant_conversions(self, experiment_id: str, variant_id: str) -> None:
        """Count one more conversion for a variant."""
        self._increment(
            f"EXPERIMENT#{experiment_id}", f"VARIANT#{variant_id}", "conversions", "Variant", variant_id
        )

    def increment_total_visitors(self, experiment_id: str) -> None:
        """Count one more unique visitor for an experiment."""
        self._increment(
            f"EXPERIMENT#{experiment_id}", "META", "total_visitors", "Experiment", experiment_id
        )

    def increment_total_conversions(self, experiment_id: str) -> None:
        """Count one more conversion for an experiment."""
        self._increment(
            f"EXPERIMENT#{experiment_id}", "META", "total_conversions", "Experiment", experiment_id
        )

    def increment_goal_conversions(self, experiment_id: str, goal_id: str) -> bool:
        """Count one more conversion on an experiment-goal pairing.

        A goal that is not paired with the experiment matches no row, and
        the update is skipped.

        Returns:
            True if a pairing was incremented.
        """
        try:
            self._increment(
                f"EXPERIMENT#{experiment_id}", f"GOAL#{goal_id}", "conversions", "ExperimentGoal", goal_id
            )
        except NotFoundError:
            logger.debug(
                "No experiment goal pairing to increment",
                experiment_id=experiment_id,
                goal_id=goal_id,
            )
            return False
        return True

    def _increment(
        self,
        pk: str,
        sk: str,
        counter: str,
        resource_type: str,
        resource_id: str,
    ) -> None:
        try:
            self.update_attributes(
                pk=pk,
                sk=sk,
                set_values={"updated_at": utc_now().isoformat()},
                add_values={counter: 1},
                condition_expression="attribute_exists(PK)",
            )
        except ClientError as e:
            if is_conditional_check_failure(e):
                raise NotFoundError(resource_type, resource_id)
            logger.error(
                "Failed to increment counter",
                pk=pk,
                sk=sk,
                counter=counter,
                error=str(e),
            )
            raise
