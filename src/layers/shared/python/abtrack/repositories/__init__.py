"""Repository classes for DynamoDB data access."""

from abtrack.repositories.assignment import VariantAssignmentRepository
from abtrack.repositories.base import BaseRepository
from abtrack.repositories.conversion import GoalConversionRepository
from abtrack.repositories.daily_stat import ExperimentDailyStatRepository
from abtrack.repositories.event import EventRepository
from abtrack.repositories.experiment import ExperimentRepository
from abtrack.repositories.live_log import LiveLogRepository
from abtrack.repositories.store import TrackingStore
from abtrack.repositories.visitor import VisitorRepository

__all__ = [
    "BaseRepository",
    "EventRepository",
    "ExperimentDailyStatRepository",
    "ExperimentRepository",
    "GoalConversionRepository",
    "LiveLogRepository",
    "TrackingStore",
    "VariantAssignmentRepository",
    "VisitorRepository",
]
