"""Firehose transformation handler for SDK tracking events.

Receives batches of base64 records from the tracking delivery stream, applies
each event to visitor state, assignments, conversions and daily statistics,
and returns a per-record result so Firehose can redeliver only the records
that could not be decoded.
"""

import os
from typing import Any

import structlog

from abtrack.repositories.store import TrackingStore
from abtrack.services.ingestion import EventIngestionService

logger = structlog.get_logger()

STAGE = os.environ.get("STAGE", "dev")

# Built once per Lambda container at cold start and reused across invocations.
store = TrackingStore()
service = EventIngestionService(store)


def handler(event: dict[str, Any], context: Any) -> dict:
    """Process a Firehose transformation batch.

    Args:
        event: Firehose event with ``records``.
        context: Lambda context.

    Returns:
        ``{"records": [...]}`` with one entry per input record, in order.
    """
    records = event.get("records", [])

    logger.info(
        "Processing tracking records",
        record_count=len(records),
        stage=STAGE,
        request_id=getattr(context, "aws_request_id", None),
    )

    result = service.process_batch(records)
    return result.to_firehose()
