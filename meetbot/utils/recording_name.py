"""
Human-readable names for uploaded recordings.
"""

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from meetbot.models import MeetingProvider

RECORDING_NAME_PREFIXES = {
    MeetingProvider.GOOGLE: "Google Meet Recording",
    MeetingProvider.MICROSOFT: "Microsoft Teams Recording",
    MeetingProvider.ZOOM: "Zoom Recording",
    MeetingProvider.TELEMOST: "Yandex Telemost Recording",
}


def get_recording_name_prefix(provider: MeetingProvider) -> str:
    return RECORDING_NAME_PREFIXES.get(provider, "Recording")


def build_recording_name(
    provider: MeetingProvider,
    timezone: str = "UTC",
    when: Optional[datetime] = None,
) -> str:
    """
    Name a recording after its provider and local start time.

    Unknown timezone names fall back to UTC.
    """
    try:
        tz = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError):
        tz = ZoneInfo("UTC")
    moment = (when or datetime.now(tz)).astimezone(tz)
    return f"{get_recording_name_prefix(provider)} {moment.strftime('%Y-%m-%d %H:%M')}"
