"""Repository for live log entries."""

from typing import Any

from abtrack.models.live_log import LiveLog
from abtrack.repositories.base import BaseRepository


class LiveLogRepository(BaseRepository[LiveLog]):
    """Repository for LiveLog records (TTL-bound)."""

    def __init__(self, table_name: str | None = None, table: Any = None):
        super().__init__(LiveLog, table_name, table)

    def append(self, entry: LiveLog) -> LiveLog:
        """Write a new live log entry with its TTL attribute."""
        return self.create(entry, extra_attributes={"ttl": entry.ttl})

    def list_recent(self, experiment_id: str, limit: int = 50) -> list[LiveLog]:
        """List an experiment's live log entries, newest first."""
        entries, _ = self.query(
            pk=f"EXPERIMENT#{experiment_id}#LOGS",
            sk_begins_with="LOG#",
            limit=limit,
            scan_forward=False,
        )
        return entries
