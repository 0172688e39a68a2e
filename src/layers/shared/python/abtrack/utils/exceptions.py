"""Custom exception classes for the ingestion pipeline."""


class AbtrackError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict | None = None,
    ):
        """Initialize AbtrackError.

        Args:
            message: Human-readable error message.
            error_code: Machine-readable error code.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "INTERNAL_ERROR"
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert exception to dictionary for logging."""
        result = {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class DecodeError(AbtrackError):
    """Raised when a delivered record body cannot be decoded."""

    def __init__(self, message: str = "Record could not be decoded", stage: str | None = None):
        """Initialize DecodeError.

        Args:
            message: Error message.
            stage: Decoding stage that failed (base64, utf-8, json).
        """
        self.stage = stage
        super().__init__(
            message=message,
            error_code="DECODE_ERROR",
            details={"stage": stage} if stage else None,
        )


class ValidationError(AbtrackError):
    """Raised when a decoded event fails validation."""

    def __init__(
        self,
        message: str = "Validation failed",
        errors: list[dict] | None = None,
    ):
        """Initialize ValidationError.

        Args:
            message: Error message.
            errors: List of validation errors with field and message.
        """
        self.errors = errors or []
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details={"errors": self.errors},
        )

    @classmethod
    def from_pydantic(cls, exc: Exception) -> "ValidationError":
        """Create ValidationError from Pydantic ValidationError."""
        errors = []
        if hasattr(exc, "errors"):
            for error in exc.errors():
                errors.append(
                    {
                        "field": ".".join(str(loc) for loc in error.get("loc", [])),
                        "message": error.get("msg", "Invalid value"),
                        "type": error.get("type", "unknown"),
                    }
                )
        return cls(message="Event failed schema validation", errors=errors)


class PersistenceError(AbtrackError):
    """Raised when a storage operation fails while handling an event."""

    def __init__(
        self,
        message: str = "Storage operation failed",
        error_code: str = "PERSISTENCE_ERROR",
        details: dict | None = None,
    ):
        """Initialize PersistenceError."""
        super().__init__(message=message, error_code=error_code, details=details)


class NotFoundError(PersistenceError):
    """Raised when a row that must exist is missing."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        message: str | None = None,
    ):
        """Initialize NotFoundError.

        Args:
            resource_type: Type of resource (e.g., "Experiment", "Variant").
            resource_id: ID of the resource that was not found.
            message: Optional custom message.
        """
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            message=message or f"{resource_type} with ID '{resource_id}' not found",
            error_code="NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class ConflictError(PersistenceError):
    """Raised when a conditional write loses (item already exists)."""

    def __init__(
        self,
        message: str = "Resource conflict",
        conflict_type: str | None = None,
    ):
        """Initialize ConflictError."""
        super().__init__(
            message=message,
            error_code="CONFLICT",
            details={"conflict_type": conflict_type} if conflict_type else None,
        )


class AggregateUpdateError(AbtrackError):
    """Raised when a daily statistic touch fails after the primary write."""

    def __init__(self, experiment_id: str, day: str, original_error: str | None = None):
        """Initialize AggregateUpdateError."""
        super().__init__(
            message=f"Daily stat update failed for experiment '{experiment_id}' on {day}",
            error_code="AGGREGATE_UPDATE_ERROR",
            details={
                "experiment_id": experiment_id,
                "day": day,
                "original_error": original_error,
            },
        )
