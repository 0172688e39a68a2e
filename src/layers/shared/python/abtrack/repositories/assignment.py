"""Repository for sticky variant assignments.

Uniqueness of (visitor, experiment) is enforced by the table itself: the
assignment's key is derived from the pair and creation is conditional on
the key being absent.
"""

from typing import Any

import structlog

from abtrack.models.assignment import VariantAssignment
from abtrack.repositories.base import BaseRepository
from abtrack.utils.exceptions import ConflictError

logger = structlog.get_logger()


class VariantAssignmentRepository(BaseRepository[VariantAssignment]):
    """Repository for VariantAssignment records."""

    def __init__(self, table_name: str | None = None, table: Any = None):
        super().__init__(VariantAssignment, table_name, table)

    def get_assignment(self, visitor_db_id: str, experiment_id: str) -> VariantAssignment | None:
        """Find the assignment for a (visitor, experiment) pair."""
        return self.get(pk=f"VISITOR#{visitor_db_id}", sk=f"ASSIGNMENT#{experiment_id}")

    def create_if_absent(self, assignment: VariantAssignment) -> bool:
        """Create the assignment unless the pair is already assigned.

        Returns:
            True if this call created the row, False if one already existed
            (including when a concurrent writer won the race).
        """
        try:
            self.create(assignment)
        except ConflictError:
            logger.debug(
                "Assignment already exists",
                visitor_id=assignment.visitor_id,
                experiment_id=assignment.experiment_id,
            )
            return False
        return True

    def list_by_visitor(self, visitor_db_id: str) -> list[VariantAssignment]:
        """List every experiment assignment held by a visitor."""
        assignments, _ = self.query(
            pk=f"VISITOR#{visitor_db_id}",
            sk_begins_with="ASSIGNMENT#",
        )
        return assignments
