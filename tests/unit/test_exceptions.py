"""Tests for pipeline exceptions."""

from abtrack.utils.exceptions import (
    AbtrackError,
    ConflictError,
    DecodeError,
    NotFoundError,
    PersistenceError,
)


class TestExceptions:
    """Tests for the error taxonomy."""

    def test_to_dict(self):
        """Test conversion for structured logging."""
        error = NotFoundError("Variant", "var-1")

        assert error.to_dict() == {
            "error": True,
            "error_code": "NOT_FOUND",
            "message": "Variant with ID 'var-1' not found",
            "details": {"resource_type": "Variant", "resource_id": "var-1"},
        }

    def test_to_dict_without_details(self):
        """Test that empty details are omitted."""
        error = AbtrackError("Something broke")

        assert error.to_dict() == {
            "error": True,
            "error_code": "INTERNAL_ERROR",
            "message": "Something broke",
        }

    def test_persistence_hierarchy(self):
        """Test that storage errors share a base class."""
        assert isinstance(NotFoundError("Experiment", "exp-1"), PersistenceError)
        assert isinstance(ConflictError(conflict_type="VariantAssignment"), PersistenceError)

    def test_decode_stage(self):
        """Test that decode errors carry the failing stage."""
        error = DecodeError("bad body", stage="json")

        assert error.stage == "json"
        assert error.to_dict()["details"] == {"stage": "json"}
