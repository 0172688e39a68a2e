"""Visitor identity resolution.

Maps (project, visitor) to a durable Visitor row, classifying the device,
browser and OS from the user agent and pulling UTM campaign parameters from
the visited URL.
"""

import re
from dataclasses import dataclass
from urllib.parse import parse_qs, urlsplit

import structlog

from abtrack.models.event import IncomingEvent
from abtrack.models.visitor import DeviceType, Visitor
from abtrack.repositories.visitor import VisitorRepository

logger = structlog.get_logger()

MOBILE_PATTERN = re.compile(r"Mobi|Android", re.IGNORECASE)
TABLET_PATTERN = re.compile(r"Tablet|iPad", re.IGNORECASE)


@dataclass
class CampaignParams:
    """UTM parameters parsed from a visited URL."""

    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None


def detect_device_type(user_agent: str) -> DeviceType:
    """Classify the device from a user agent string."""
    if MOBILE_PATTERN.search(user_agent):
        return DeviceType.MOBILE
    if TABLET_PATTERN.search(user_agent):
        return DeviceType.TABLET
    return DeviceType.DESKTOP


def detect_browser(user_agent: str) -> str:
    """Classify the browser from a user agent string.

    Rules are checked in order and the first match wins. Edge user agents
    also carry a Chrome token, so the Chrome rule excludes "Edg".
    """
    if "Chrome" in user_agent and "Edg" not in user_agent:
        return "chrome"
    if "Firefox" in user_agent:
        return "firefox"
    if "Safari" in user_agent and "Chrome" not in user_agent:
        return "safari"
    if "Edg" in user_agent:
        return "edge"
    if "Opera" in user_agent or "OPR" in user_agent:
        return "opera"
    return "other"


def detect_os(user_agent: str) -> str:
    """Classify the operating system from a user agent string."""
    if "Windows" in user_agent:
        return "windows"
    if "Mac OS" in user_agent:
        return "mac"
    if "Linux" in user_agent and "Android" not in user_agent:
        return "linux"
    if "Android" in user_agent:
        return "android"
    if "iPhone" in user_agent or "iPad" in user_agent or "iOS" in user_agent:
        return "ios"
    return "other"


def extract_campaign_params(url: str | None) -> CampaignParams:
    """Read utm_source, utm_medium and utm_campaign from a URL.

    Anything that is not an absolute URL yields empty params.
    """
    if not url:
        return CampaignParams()

    try:
        parts = urlsplit(url)
    except ValueError:
        logger.debug("Unparseable event URL", url=url)
        return CampaignParams()

    if not parts.scheme or not parts.netloc:
        return CampaignParams()

    query = parse_qs(parts.query)

    def first(name: str) -> str | None:
        values = query.get(name)
        return values[0] if values else None

    return CampaignParams(
        utm_source=first("utm_source"),
        utm_medium=first("utm_medium"),
        utm_campaign=first("utm_campaign"),
    )


class VisitorIdentityResolver:
    """Creates or updates the Visitor row for each incoming event."""

    def __init__(self, visitors: VisitorRepository):
        self.visitors = visitors

    def resolve(self, event: IncomingEvent) -> Visitor:
        """Produce the visitor for an event's (project, visitor) key.

        Args:
            event: A validated incoming event (correlation fields present).

        Returns:
            The stored visitor after this event was applied.
        """
        user_agent = event.user_agent or ""
        campaign = extract_campaign_params(event.url)

        return self.visitors.upsert(
            project_id=event.project_id,
            visitor_id=event.visitor_id,
            seen_at=event.occurred_at(),
            user_agent=user_agent,
            device_type=detect_device_type(user_agent).value,
            browser=detect_browser(user_agent),
            os=detect_os(user_agent),
            referrer=event.referrer,
            utm_source=campaign.utm_source,
            utm_medium=campaign.utm_medium,
            utm_campaign=campaign.utm_campaign,
        )
