"""Dispatch of resolved events to their handlers.

Events of one record are routed one at a time, in payload order; a later
event (a conversion) may depend on rows written by an earlier one (the
assignment it is attributed to).
"""

from collections.abc import Callable

import structlog

from abtrack.models.event import Event, EventType, IncomingEvent, StoredEventType
from abtrack.models.visitor import Visitor
from abtrack.repositories.event import EventRepository
from abtrack.repositories.visitor import VisitorRepository
from abtrack.services.assignment_tracker import AssignmentTracker
from abtrack.services.conversion_attributor import ConversionAttributor

logger = structlog.get_logger()


class EventRouter:
    """Routes each event to exactly one handler by its declared type."""

    def __init__(
        self,
        visitors: VisitorRepository,
        events: EventRepository,
        assignment_tracker: AssignmentTracker,
        conversion_attributor: ConversionAttributor,
    ):
        self.visitors = visitors
        self.events = events
        self.assignment_tracker = assignment_tracker
        self.conversion_attributor = conversion_attributor

        self._handlers: dict[str, Callable[[Visitor, IncomingEvent], None]] = {
            EventType.SESSION_START.value: self.handle_session_start,
            EventType.EXPERIMENT_VIEW.value: self.handle_experiment_view,
            EventType.GOAL_CONVERSION.value: self.handle_goal_conversion,
            EventType.CUSTOM_EVENT.value: self.handle_custom_event,
        }

    def is_noop(self, event: IncomingEvent) -> bool:
        """Whether routing the event would write nothing at all.

        Such events are skipped before the visitor is resolved.
        """
        if event.event_type == EventType.GOAL_CONVERSION.value:
            return not self.conversion_attributor.is_attributable(event)
        return False

    def route(self, visitor: Visitor, event: IncomingEvent) -> str:
        """Run the handler for the event's type.

        Unrecognized types go to the generic handler.

        Returns:
            Name of the handler that ran.
        """
        handler = self._handlers.get(event.event_type, self.handle_generic_event)
        handler(visitor, event)
        return handler.__name__

    def handle_session_start(self, visitor: Visitor, event: IncomingEvent) -> None:
        """Count a new visit and record it as a page view."""
        # The visitor row created by this same event already counts this visit.
        if visitor.page_views > 1:
            self.visitors.increment_visit_count(visitor.project_id, visitor.visitor_id)

        self.events.append(
            Event(
                project_id=event.project_id,
                visitor_id=visitor.id,
                event_type=StoredEventType.PAGE_VIEW.value,
                page_url=event.url,
                event_data={
                    "sessionId": event.session_id,
                    "referrer": event.referrer,
                    "isSessionStart": True,
                },
            )
        )

    def handle_experiment_view(self, visitor: Visitor, event: IncomingEvent) -> None:
        """Track the view and the sticky assignment it may create."""
        self.assignment_tracker.track_view(visitor, event)

    def handle_goal_conversion(self, visitor: Visitor, event: IncomingEvent) -> None:
        """Attribute the conversion to its experiments."""
        self.conversion_attributor.record(visitor, event)

    def handle_custom_event(self, visitor: Visitor, event: IncomingEvent) -> None:
        """Record a named custom event, tagged with its first attribution."""
        first = event.attributed_experiments[0] if event.attributed_experiments else None

        self.events.append(
            Event(
                project_id=event.project_id,
                visitor_id=visitor.id,
                experiment_id=first.experiment_id if first else None,
                variant_id=first.variant_id if first else None,
                event_type=StoredEventType.CUSTOM.value,
                event_name=event.event_name,
                page_url=event.url,
                event_data=event.payload(),
            )
        )

    def handle_generic_event(self, visitor: Visitor, event: IncomingEvent) -> None:
        """Record any other event under its original type."""
        self.events.append(
            Event(
                project_id=event.project_id,
                visitor_id=visitor.id,
                event_type=event.event_type,
                page_url=event.url,
                event_data=event.payload(),
            )
        )
