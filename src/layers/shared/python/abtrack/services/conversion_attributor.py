"""Goal conversion attribution.

The client decides which experiments a conversion is credited to and sends
them as ``attributedExperiments``. Each attribution is applied on its own,
with its own row and full set of counter increments, even when two of them
name the same experiment.
"""

import os

import structlog

from abtrack.models.conversion import GoalConversion
from abtrack.models.daily_stat import StatField
from abtrack.models.event import IncomingEvent
from abtrack.models.live_log import LiveLogType
from abtrack.models.visitor import Visitor
from abtrack.repositories.conversion import GoalConversionRepository
from abtrack.repositories.experiment import ExperimentRepository
from abtrack.services.daily_stats import DailyStatAggregator
from abtrack.services.live_log import LiveLogEmitter

logger = structlog.get_logger()

FALLBACK_CURRENCY = "TRY"


class ConversionAttributor:
    """Handles GOAL_CONVERSION events."""

    def __init__(
        self,
        conversions: GoalConversionRepository,
        experiments: ExperimentRepository,
        daily_stats: DailyStatAggregator,
        live_log: LiveLogEmitter,
        default_currency: str | None = None,
    ):
        """Initialize the attributor.

        Args:
            conversions: Conversion repository.
            experiments: Experiment counter repository.
            daily_stats: Daily stat aggregator.
            live_log: Live log emitter.
            default_currency: Currency used when the event names none.
                Defaults to DEFAULT_CURRENCY env var, then TRY.
        """
        self.conversions = conversions
        self.experiments = experiments
        self.daily_stats = daily_stats
        self.live_log = live_log
        self.default_currency = default_currency or os.environ.get(
            "DEFAULT_CURRENCY", FALLBACK_CURRENCY
        )

    def is_attributable(self, event: IncomingEvent) -> bool:
        """Whether the event names a goal and at least one attribution."""
        return bool(event.goal_id and event.attributed_experiments)

    def record(self, visitor: Visitor, event: IncomingEvent) -> int:
        """Record a conversion against every attributed experiment.

        Without a goalId or with no attributions nothing is written.

        Args:
            visitor: Resolved visitor.
            event: The GOAL_CONVERSION event.

        Returns:
            Number of GoalConversion rows written.
        """
        if not self.is_attributable(event):
            logger.debug(
                "Conversion without goal or attributions",
                goal_id=event.goal_id,
                visitor_id=event.visitor_id,
            )
            return 0

        occurred_at = event.occurred_at()
        value = event.value or None
        recorded = 0

        for attribution in event.attributed_experiments:
            experiment_id = attribution.experiment_id
            variant_id = attribution.variant_id

            self.conversions.append(
                GoalConversion(
                    goal_id=event.goal_id,
                    experiment_id=experiment_id,
                    variant_id=variant_id,
                    visitor_id=visitor.id,
                    value=value,
                    currency=event.currency or self.default_currency,
                    conversion_data={
                        "url": event.url,
                        "timestamp": event.timestamp,
                        "goalType": event.goal_type,
                    },
                )
            )
            recorded += 1

            self.experiments.increment_variant_conversions(experiment_id, variant_id)
            self.experiments.increment_total_conversions(experiment_id)
            self.experiments.increment_goal_conversions(experiment_id, event.goal_id)
            self.daily_stats.touch(experiment_id, occurred_at, StatField.CONVERSIONS, revenue=value)

            self.live_log.emit(
                experiment_id=experiment_id,
                visitor_id=event.visitor_id,
                variant_id=variant_id,
                log_type=LiveLogType.GOAL_CONVERSION,
                message=f'Goal "{event.goal_name or event.goal_id}" converted',
                details={"goalType": event.goal_type, "value": value, "url": event.url},
            )

        logger.info(
            "Conversion recorded",
            goal_id=event.goal_id,
            visitor_id=event.visitor_id,
            attributions=recorded,
            value=value,
        )
        return recorded
