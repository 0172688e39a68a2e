"""Event models.

``IncomingEvent`` is the payload the client SDK emits; ``Event`` is the
append-only row written for every ingested occurrence.

DynamoDB keys (Event):
    PK: VISITOR#{visitor_id}
    SK: EVENT#{id}
    GSI1PK: PROJECT#{project_id}#EVENTS
    GSI1SK: {id}
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field

from abtrack.models.base import BaseModel, utc_now

logger = structlog.get_logger()


class EventType(str, Enum):
    """Event types emitted by the client SDK."""

    SESSION_START = "SESSION_START"
    EXPERIMENT_VIEW = "EXPERIMENT_VIEW"
    GOAL_CONVERSION = "GOAL_CONVERSION"
    CUSTOM_EVENT = "CUSTOM_EVENT"
    PAGE_VIEW = "PAGE_VIEW"
    CLICK = "CLICK"
    FORM_SUBMIT = "FORM_SUBMIT"


class StoredEventType(str, Enum):
    """Event types written to Event rows that differ from the incoming ones."""

    PAGE_VIEW = "PAGE_VIEW"
    EXPERIMENT_VIEW = "EXPERIMENT_VIEW"
    CUSTOM = "CUSTOM"


class AttributedExperiment(PydanticBaseModel):
    """An experiment/variant pair a conversion is credited to."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    experiment_id: str = Field(alias="experimentId")
    experiment_name: str | None = Field(default=None, alias="experimentName")
    variant_id: str = Field(alias="variantId")
    variant_name: str | None = Field(default=None, alias="variantName")


class IncomingEvent(PydanticBaseModel):
    """Event object decoded from a delivered record.

    Correlation fields are optional here so that an incomplete event can be
    reported as dropped instead of failing schema validation. Unknown fields
    are kept and passed through opaquely.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    project_id: str | None = Field(default=None, alias="projectId")
    visitor_id: str | None = Field(default=None, alias="visitorId")
    session_id: str | None = Field(default=None, alias="sessionId")
    timestamp: str | None = None
    event_type: str | None = Field(default=None, alias="eventType")
    url: str | None = None

    # Experiment view
    experiment_id: str | None = Field(default=None, alias="experimentId")
    experiment_name: str | None = Field(default=None, alias="experimentName")
    variant_id: str | None = Field(default=None, alias="variantId")
    variant_name: str | None = Field(default=None, alias="variantName")
    is_control: bool | None = Field(default=None, alias="isControl")

    # Goal conversion
    goal_id: str | None = Field(default=None, alias="goalId")
    goal_name: str | None = Field(default=None, alias="goalName")
    goal_type: str | None = Field(default=None, alias="goalType")
    attributed_experiments: list[AttributedExperiment] | None = Field(
        default=None, alias="attributedExperiments"
    )

    # Custom event
    event_name: str | None = Field(default=None, alias="eventName")

    # Revenue
    value: float | None = None
    currency: str | None = None

    # Context
    user_agent: str | None = Field(default=None, alias="userAgent")
    referrer: str | None = None

    def missing_fields(self) -> list[str]:
        """Names of the required correlation fields that are absent."""
        required = {
            "projectId": self.project_id,
            "visitorId": self.visitor_id,
            "eventType": self.event_type,
        }
        return [name for name, value in required.items() if not value]

    def occurred_at(self) -> datetime:
        """Parse the event timestamp as an aware UTC datetime.

        Naive timestamps are taken as UTC. A missing or unparseable
        timestamp falls back to the processing time.
        """
        if self.timestamp:
            try:
                parsed = datetime.fromisoformat(self.timestamp.replace("Z", "+00:00"))
            except ValueError:
                logger.warning("Unparseable event timestamp", timestamp=self.timestamp)
            else:
                if parsed.tzinfo is None:
                    return parsed.replace(tzinfo=timezone.utc)
                return parsed.astimezone(timezone.utc)
        return utc_now()

    def payload(self) -> dict[str, Any]:
        """The event as the client sent it, including pass-through fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Event(BaseModel):
    """Append-only record of one ingested occurrence."""

    project_id: str
    visitor_id: str  # Visitor.id, not the client visitor id
    event_type: str
    event_name: str | None = None
    experiment_id: str | None = None
    variant_id: str | None = None
    page_url: str | None = None
    event_data: dict[str, Any] = Field(default_factory=dict)

    def get_pk(self) -> str:
        """Get the partition key."""
        return f"VISITOR#{self.visitor_id}"

    def get_sk(self) -> str:
        """Get the sort key."""
        return f"EVENT#{self.id}"

    def get_gsi1_keys(self) -> dict[str, str]:
        """Get GSI1 keys for listing events by project."""
        return {
            "GSI1PK": f"PROJECT#{self.project_id}#EVENTS",
            "GSI1SK": self.id,
        }
