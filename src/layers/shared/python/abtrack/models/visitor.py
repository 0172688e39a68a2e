"""Visitor model for anonymous visitor tracking.

One row per (project, visitor) pair. Created on the first event seen for the
pair; every later event bumps last_seen and page_views. Classification and
acquisition fields are first-touch and never overwritten.

DynamoDB keys:
    PK: PROJECT#{project_id}
    SK: VISITOR#{visitor_id}
"""

from datetime import datetime
from enum import Enum

from abtrack.models.base import BaseModel


class DeviceType(str, Enum):
    """Device class derived from the user agent."""

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


class Visitor(BaseModel):
    """Visitor identified by the SDK's first-party visitor id.

    ``id`` is the durable surrogate key referenced by assignments, events and
    conversions; ``visitor_id`` is the id sent by the client.
    """

    project_id: str
    visitor_id: str

    # Classification (first-touch)
    user_agent: str | None = None
    device_type: DeviceType = DeviceType.DESKTOP
    browser: str = "other"
    os: str = "other"

    # Acquisition (first-touch)
    referrer: str | None = None
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None

    # Engagement counters
    visit_count: int = 1
    page_views: int = 1

    first_seen: datetime | None = None
    last_seen: datetime | None = None

    def get_pk(self) -> str:
        """Get the partition key."""
        return f"PROJECT#{self.project_id}"

    def get_sk(self) -> str:
        """Get the sort key."""
        return f"VISITOR#{self.visitor_id}"
