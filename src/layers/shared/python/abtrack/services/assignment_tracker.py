"""Sticky experiment assignment tracking.

Each (visitor, experiment) pair moves from unassigned to assigned exactly
once, on its first EXPERIMENT_VIEW. Only that transition touches the
population counters, so they count unique visitors rather than views. Every
view, first or repeat, still appends an Event row and a live log entry.
"""

from dataclasses import dataclass

import structlog

from abtrack.models.assignment import VariantAssignment
from abtrack.models.daily_stat import StatField
from abtrack.models.event import Event, IncomingEvent, StoredEventType
from abtrack.models.live_log import LiveLogType
from abtrack.models.visitor import Visitor
from abtrack.repositories.assignment import VariantAssignmentRepository
from abtrack.repositories.event import EventRepository
from abtrack.repositories.experiment import ExperimentRepository
from abtrack.services.daily_stats import DailyStatAggregator
from abtrack.services.live_log import LiveLogEmitter

logger = structlog.get_logger()


@dataclass
class AssignmentOutcome:
    """What handling one experiment view did."""

    tracked: bool
    first_view: bool = False


class AssignmentTracker:
    """Handles EXPERIMENT_VIEW events."""

    def __init__(
        self,
        assignments: VariantAssignmentRepository,
        experiments: ExperimentRepository,
        events: EventRepository,
        daily_stats: DailyStatAggregator,
        live_log: LiveLogEmitter,
    ):
        self.assignments = assignments
        self.experiments = experiments
        self.events = events
        self.daily_stats = daily_stats
        self.live_log = live_log

    def track_view(self, visitor: Visitor, event: IncomingEvent) -> AssignmentOutcome:
        """Record an experiment view and assign the visitor on first view.

        A view without both experimentId and variantId is ignored.

        Args:
            visitor: Resolved visitor.
            event: The EXPERIMENT_VIEW event.

        Returns:
            Whether the view was tracked and whether it created the assignment.
        """
        experiment_id = event.experiment_id
        variant_id = event.variant_id

        if not experiment_id or not variant_id:
            logger.debug(
                "Experiment view without experiment or variant",
                visitor_id=event.visitor_id,
            )
            return AssignmentOutcome(tracked=False)

        # A lost creation race reads as False here and takes the repeat path.
        first_view = self.assignments.create_if_absent(
            VariantAssignment(
                visitor_id=visitor.id,
                experiment_id=experiment_id,
                variant_id=variant_id,
            )
        )

        if first_view:
            self.experiments.increment_variant_visitors(experiment_id, variant_id)
            self.experiments.increment_total_visitors(experiment_id)
            self.daily_stats.touch(experiment_id, event.occurred_at(), StatField.IMPRESSIONS)
            logger.info(
                "Visitor assigned",
                experiment_id=experiment_id,
                variant_id=variant_id,
                visitor_id=event.visitor_id,
            )

        self.events.append(
            Event(
                project_id=event.project_id,
                visitor_id=visitor.id,
                experiment_id=experiment_id,
                variant_id=variant_id,
                event_type=StoredEventType.EXPERIMENT_VIEW.value,
                page_url=event.url,
            )
        )

        self.live_log.emit(
            experiment_id=experiment_id,
            visitor_id=event.visitor_id,
            variant_id=variant_id,
            log_type=LiveLogType.VISITOR_ASSIGNED,
            message=f"Visitor assigned to {event.variant_name or variant_id}",
            details={"isControl": event.is_control, "url": event.url},
        )

        return AssignmentOutcome(tracked=True, first_view=first_view)
