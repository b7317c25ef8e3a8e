"""
Core module exports.
"""

from .exceptions import (
    MeetingBotException,
    AdmissionFailure,
    UnsupportedSessionFailure,
    CaptureFailure,
    UploadFailure,
    BrowserLaunchError,
)
from .logging import logger, get_logger, setup_logging

__all__ = [
    "MeetingBotException",
    "AdmissionFailure",
    "UnsupportedSessionFailure",
    "CaptureFailure",
    "UploadFailure",
    "BrowserLaunchError",
    "logger",
    "get_logger",
    "setup_logging",
]
