"""
Meeting handlers: browser surface, admission and provider bots.
"""

from .admission import AdmissionRace
from .session import MeetingSession
from .surface import CapabilitySurface, PlaywrightSurface
from .telemost_handler import TelemostBot

__all__ = [
    "AdmissionRace",
    "CapabilitySurface",
    "MeetingSession",
    "PlaywrightSurface",
    "TelemostBot",
]
