"""Utility functions and helpers."""

from abtrack.utils.exceptions import (
    AbtrackError,
    AggregateUpdateError,
    ConflictError,
    DecodeError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

__all__ = [
    "AbtrackError",
    "AggregateUpdateError",
    "ConflictError",
    "DecodeError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
]
