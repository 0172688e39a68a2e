"""Ingestion pipeline components."""

from abtrack.services.assignment_tracker import AssignmentOutcome, AssignmentTracker
from abtrack.services.batch_decoder import decode_record_data
from abtrack.services.conversion_attributor import ConversionAttributor
from abtrack.services.daily_stats import DailyStatAggregator
from abtrack.services.event_router import EventRouter
from abtrack.services.identity import (
    CampaignParams,
    VisitorIdentityResolver,
    detect_browser,
    detect_device_type,
    detect_os,
    extract_campaign_params,
)
from abtrack.services.ingestion import (
    BatchResult,
    EventIngestionService,
    EventResult,
    EventStatus,
    RecordOutcome,
    RecordResult,
)
from abtrack.services.live_log import LiveLogEmitter

__all__ = [
    "AssignmentOutcome",
    "AssignmentTracker",
    "BatchResult",
    "CampaignParams",
    "ConversionAttributor",
    "DailyStatAggregator",
    "EventIngestionService",
    "EventResult",
    "EventRouter",
    "EventStatus",
    "LiveLogEmitter",
    "RecordOutcome",
    "RecordResult",
    "VisitorIdentityResolver",
    "decode_record_data",
    "detect_browser",
    "detect_device_type",
    "detect_os",
    "extract_campaign_params",
]
