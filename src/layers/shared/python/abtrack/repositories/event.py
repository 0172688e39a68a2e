"""Repository for append-only Event rows."""

from typing import Any

from abtrack.models.event import Event
from abtrack.repositories.base import BaseRepository


class EventRepository(BaseRepository[Event]):
    """Repository for ingested events."""

    def __init__(self, table_name: str | None = None, table: Any = None):
        super().__init__(Event, table_name, table)

    def append(self, event: Event) -> Event:
        """Write a new event row. Event ids are ULIDs, so rows never collide."""
        return self.create(event, extra_attributes=event.get_gsi1_keys())

    def list_by_visitor(self, visitor_db_id: str, limit: int = 100) -> list[Event]:
        """List a visitor's events, oldest first."""
        events, _ = self.query(
            pk=f"VISITOR#{visitor_db_id}",
            sk_begins_with="EVENT#",
            limit=limit,
        )
        return events

    def list_by_project(
        self,
        project_id: str,
        limit: int = 100,
        last_key: dict | None = None,
    ) -> tuple[list[Event], dict | None]:
        """List a project's events, newest first."""
        return self.query(
            pk=f"PROJECT#{project_id}#EVENTS",
            index_name="GSI1",
            limit=limit,
            scan_forward=False,
            last_key=last_key,
        )
