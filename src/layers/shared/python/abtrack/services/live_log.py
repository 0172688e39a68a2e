"""Best-effort live log emission for the real-time experiment dashboard."""

from typing import Any

import structlog

from abtrack.models.live_log import LiveLog, LiveLogType
from abtrack.repositories.live_log import LiveLogRepository

logger = structlog.get_logger()


class LiveLogEmitter:
    """Appends ephemeral audit entries; failures are logged and swallowed."""

    def __init__(self, live_logs: LiveLogRepository):
        self.live_logs = live_logs

    def emit(
        self,
        experiment_id: str,
        visitor_id: str,
        log_type: LiveLogType,
        message: str,
        variant_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> LiveLog | None:
        """Write one live log entry expiring 24 hours from now.

        Returns:
            The written entry, or None if the write failed.
        """
        entry = LiveLog(
            experiment_id=experiment_id,
            visitor_id=visitor_id,
            variant_id=variant_id,
            log_type=log_type,
            message=message,
            details={k: v for k, v in (details or {}).items() if v is not None},
        )
        try:
            return self.live_logs.append(entry)
        except Exception as e:
            logger.warning(
                "Live log write failed",
                experiment_id=experiment_id,
                log_type=entry.log_type,
                error=str(e),
            )
            return None
