"""Pydantic models for ingestion entities."""

from abtrack.models.assignment import VariantAssignment
from abtrack.models.base import BaseModel, TimestampMixin, generate_ulid, utc_now
from abtrack.models.conversion import GoalConversion
from abtrack.models.daily_stat import ExperimentDailyStat, StatField, utc_day
from abtrack.models.event import (
    AttributedExperiment,
    Event,
    EventType,
    IncomingEvent,
    StoredEventType,
)
from abtrack.models.experiment import (
    Experiment,
    ExperimentGoal,
    ExperimentStatus,
    Variant,
)
from abtrack.models.live_log import LIVE_LOG_TTL, LiveLog, LiveLogType
from abtrack.models.visitor import DeviceType, Visitor

__all__ = [
    # Base
    "BaseModel",
    "TimestampMixin",
    "generate_ulid",
    "utc_now",
    # Visitor
    "DeviceType",
    "Visitor",
    # Event
    "AttributedExperiment",
    "Event",
    "EventType",
    "IncomingEvent",
    "StoredEventType",
    # Experiment
    "Experiment",
    "ExperimentGoal",
    "ExperimentStatus",
    "Variant",
    # Assignment
    "VariantAssignment",
    # Conversion
    "GoalConversion",
    # Daily stat
    "ExperimentDailyStat",
    "StatField",
    "utc_day",
    # Live log
    "LIVE_LOG_TTL",
    "LiveLog",
    "LiveLogType",
]
