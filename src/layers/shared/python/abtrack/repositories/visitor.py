"""Visitor repository for anonymous visitor tracking.

Uses DynamoDB UpdateItem with if_not_exists for atomic upserts, so
first-touch fields are set only on the visitor's first event and the
page view counter never loses increments under concurrent writers.
"""

from datetime import datetime
from typing import Any

import structlog
from botocore.exceptions import ClientError

from abtrack.models.base import generate_ulid, utc_now
from abtrack.models.visitor import Visitor
from abtrack.repositories.base import BaseRepository

logger = structlog.get_logger()

MAX_USER_AGENT_LENGTH = 500


class VisitorRepository(BaseRepository[Visitor]):
    """Repository for Visitor records in DynamoDB."""

    def __init__(self, table_name: str | None = None, table: Any = None):
        super().__init__(Visitor, table_name, table)

    def get_by_visitor_id(self, project_id: str, visitor_id: str) -> Visitor | None:
        """Get a visitor by project and client visitor ID."""
        return self.get(pk=f"PROJECT#{project_id}", sk=f"VISITOR#{visitor_id}")

    def upsert(
        self,
        project_id: str,
        visitor_id: str,
        seen_at: datetime,
        user_agent: str | None = None,
        device_type: str = "desktop",
        browser: str = "other",
        os: str = "other",
        referrer: str | None = None,
        utm_source: str | None = None,
        utm_medium: str | None = None,
        utm_campaign: str | None = None,
    ) -> Visitor:
        """Create the visitor or record another event for it.

        On create the counters start at 1 and first_seen = last_seen =
        seen_at. On update only last_seen and page_views change;
        visit_count is left alone.

        Args:
            project_id: Project ID.
            visitor_id: Client visitor ID.
            seen_at: Event timestamp.
            user_agent: Raw user agent string.
            device_type: Classified device type.
            browser: Classified browser.
            os: Classified operating system.
            referrer: HTTP referrer.
            utm_source: UTM source parameter.
            utm_medium: UTM medium parameter.
            utm_campaign: UTM campaign parameter.

        Returns:
            The visitor as stored after the update.
        """
        seen = seen_at.isoformat()
        now = utc_now().isoformat()

        first_touch = {
            "id": generate_ulid(),
            "project_id": project_id,
            "visitor_id": visitor_id,
            "user_agent": (user_agent or "")[:MAX_USER_AGENT_LENGTH],
            "device_type": device_type,
            "browser": browser,
            "os": os,
            "referrer": referrer,
            "utm_source": utm_source,
            "utm_medium": utm_medium,
            "utm_campaign": utm_campaign,
            "first_seen": seen,
            "visit_count": 1,
            "version": 1,
            "created_at": now,
        }

        try:
            attributes = self.update_attributes(
                pk=f"PROJECT#{project_id}",
                sk=f"VISITOR#{visitor_id}",
                set_values={"last_seen": seen, "updated_at": now},
                set_if_absent={k: v for k, v in first_touch.items() if v is not None},
                add_values={"page_views": 1},
                return_values="ALL_NEW",
            )
        except ClientError as e:
            logger.exception(
                "Failed to upsert visitor",
                project_id=project_id,
                visitor_id=visitor_id,
                error=str(e),
            )
            raise

        return Visitor.from_dynamodb(attributes)

    def increment_visit_count(self, project_id: str, visitor_id: str) -> None:
        """Atomically increment the visit counter of an existing visitor."""
        try:
            self.update_attributes(
                pk=f"PROJECT#{project_id}",
                sk=f"VISITOR#{visitor_id}",
                set_values={"updated_at": utc_now().isoformat()},
                add_values={"visit_count": 1},
                condition_expression="attribute_exists(PK)",
            )
        except ClientError as e:
            logger.error(
                "Failed to increment visitor visit count",
                project_id=project_id,
                visitor_id=visitor_id,
                error=str(e),
            )
            raise
