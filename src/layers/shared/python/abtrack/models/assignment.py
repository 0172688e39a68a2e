"""Sticky variant assignment model.

At most one row per (visitor, experiment); written once, never updated.

DynamoDB keys:
    PK: VISITOR#{visitor_id}
    SK: ASSIGNMENT#{experiment_id}
"""

from abtrack.models.base import BaseModel


class VariantAssignment(BaseModel):
    """A visitor's permanent pairing to one variant of one experiment."""

    visitor_id: str  # Visitor.id
    experiment_id: str
    variant_id: str

    def get_pk(self) -> str:
        """Get the partition key."""
        return f"VISITOR#{self.visitor_id}"

    def get_sk(self) -> str:
        """Get the sort key."""
        return f"ASSIGNMENT#{self.experiment_id}"
