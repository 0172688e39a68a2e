"""Event ingestion service.

Turns delivered batch records into visitor state, assignments, conversions
and daily statistics. Outcome policy:

- A record whose body cannot be decoded is failed and echoed back for
  redelivery.
- A decoded record is always accepted. Each of its events gets its own
  result: processed, dropped (invalid, nothing written), skipped (valid but
  nothing to record) or failed (a storage error abandoned the rest of that
  event's effects).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from abtrack.models.event import IncomingEvent
from abtrack.repositories.store import TrackingStore
from abtrack.services.assignment_tracker import AssignmentTracker
from abtrack.services.batch_decoder import decode_record_data
from abtrack.services.conversion_attributor import ConversionAttributor
from abtrack.services.daily_stats import DailyStatAggregator
from abtrack.services.event_router import EventRouter
from abtrack.services.identity import VisitorIdentityResolver
from abtrack.services.live_log import LiveLogEmitter
from abtrack.utils.exceptions import (
    AbtrackError,
    DecodeError,
    ValidationError,
)

logger = structlog.get_logger()


class RecordOutcome(str, Enum):
    """Per-record result, valued as Firehose transformation results."""

    ACCEPTED = "Ok"
    FAILED = "ProcessingFailed"


class EventStatus(str, Enum):
    """Per-event result."""

    PROCESSED = "processed"
    DROPPED = "dropped"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class EventResult:
    """Result of handling one decoded event."""

    status: EventStatus
    event_type: str | None = None
    reason: str | None = None


@dataclass
class RecordResult:
    """Result of handling one delivered record."""

    record_id: str
    outcome: RecordOutcome
    data: Any
    events: list[EventResult] = field(default_factory=list)
    error: str | None = None

    def count(self, status: EventStatus) -> int:
        """Number of this record's events with the given status."""
        return sum(1 for result in self.events if result.status == status)

    def to_firehose(self) -> dict[str, Any]:
        """Firehose transformation record: id, result and original data."""
        return {
            "recordId": self.record_id,
            "result": self.outcome.value,
            "data": self.data,
        }


@dataclass
class BatchResult:
    """Results for a whole delivered batch, in input order."""

    records: list[RecordResult] = field(default_factory=list)

    @property
    def accepted(self) -> int:
        return sum(1 for r in self.records if r.outcome == RecordOutcome.ACCEPTED)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.records if r.outcome == RecordOutcome.FAILED)

    def event_totals(self) -> dict[str, int]:
        """Event counts by status across all records."""
        return {status.value: sum(r.count(status) for r in self.records) for status in EventStatus}

    def to_firehose(self) -> dict[str, Any]:
        """Firehose transformation response."""
        return {"records": [record.to_firehose() for record in self.records]}


class EventIngestionService:
    """Wires the pipeline components over one TrackingStore."""

    def __init__(self, store: TrackingStore, default_currency: str | None = None):
        """Initialize the service.

        Args:
            store: Store owning the table handle; shared, not closed here.
            default_currency: Fallback conversion currency.
        """
        self.store = store
        daily_stats = DailyStatAggregator(store.daily_stats)
        live_log = LiveLogEmitter(store.live_logs)

        self.identity = VisitorIdentityResolver(store.visitors)
        self.router = EventRouter(
            visitors=store.visitors,
            events=store.events,
            assignment_tracker=AssignmentTracker(
                assignments=store.assignments,
                experiments=store.experiments,
                events=store.events,
                daily_stats=daily_stats,
                live_log=live_log,
            ),
            conversion_attributor=ConversionAttributor(
                conversions=store.conversions,
                experiments=store.experiments,
                daily_stats=daily_stats,
                live_log=live_log,
                default_currency=default_currency,
            ),
        )

    def process_batch(self, records: list[dict[str, Any]]) -> BatchResult:
        """Process every record of a delivered batch.

        Records are independent: one record's failure never affects another.

        Args:
            records: Firehose records with ``recordId`` and base64 ``data``.

        Returns:
            One RecordResult per input record, in the same order.
        """
        result = BatchResult()
        for record in records:
            is_mapping = isinstance(record, dict)
            record_id = record.get("recordId") if is_mapping else None
            data = record.get("data") if is_mapping else None
            try:
                record_result = self.process_record(record)
            except Exception as e:
                logger.exception(
                    "Record processing error",
                    record_id=record_id,
                    error=str(e),
                )
                record_result = RecordResult(
                    record_id=record_id,
                    outcome=RecordOutcome.FAILED,
                    data=data,
                    error=str(e),
                )
            result.records.append(record_result)

        logger.info(
            "Batch processed",
            record_count=len(result.records),
            accepted=result.accepted,
            failed=result.failed,
            events=result.event_totals(),
        )
        return result

    def process_record(self, record: dict[str, Any]) -> RecordResult:
        """Decode one record and process its events in payload order."""
        record_id = record.get("recordId")
        data = record.get("data")

        try:
            raw_events = decode_record_data(data)
        except DecodeError as e:
            logger.error(
                "Invalid record body",
                record_id=record_id,
                stage=e.stage,
                error=e.message,
            )
            return RecordResult(
                record_id=record_id,
                outcome=RecordOutcome.FAILED,
                data=data,
                error=e.message,
            )

        results = [self.process_event(raw) for raw in raw_events]

        return RecordResult(
            record_id=record_id,
            outcome=RecordOutcome.ACCEPTED,
            data=data,
            events=results,
        )

    def process_event(self, raw: Any) -> EventResult:
        """Validate, resolve and route one decoded event.

        Never raises: every outcome is reported as an EventResult.
        """
        try:
            event = self._validate(raw)
        except ValidationError as e:
            event_type = raw.get("eventType") if isinstance(raw, dict) else None
            logger.warning(
                "Dropping invalid event",
                event_type=event_type,
                reason=e.message,
                **e.details,
            )
            return EventResult(EventStatus.DROPPED, event_type=event_type, reason=e.message)

        if self.router.is_noop(event):
            logger.debug("Skipping no-op event", event_type=event.event_type, visitor_id=event.visitor_id)
            return EventResult(EventStatus.SKIPPED, event_type=event.event_type, reason="Nothing to record")

        try:
            visitor = self.identity.resolve(event)
            self.router.route(visitor, event)
        except Exception as e:
            # The rest of this event is abandoned; the record stays accepted.
            error = e.to_dict() if isinstance(e, AbtrackError) else {"error": True, "message": str(e)}
            logger.exception(
                "Event processing error",
                event_type=event.event_type,
                project_id=event.project_id,
                visitor_id=event.visitor_id,
                **error,
            )
            return EventResult(
                EventStatus.FAILED, event_type=event.event_type, reason=error["message"]
            )

        return EventResult(EventStatus.PROCESSED, event_type=event.event_type)

    def _validate(self, raw: Any) -> IncomingEvent:
        if not isinstance(raw, dict):
            raise ValidationError(f"Event is not an object: {type(raw).__name__}")

        try:
            event = IncomingEvent.model_validate(raw)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e)

        missing = event.missing_fields()
        if missing:
            raise ValidationError(
                "Missing required fields",
                errors=[{"field": name, "message": "Field required"} for name in missing],
            )
        return event
