"""
Custom exceptions for the Meeting Bot.
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class MeetingBotException(Exception):
    """Base exception for Meeting Bot errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class AdmissionFailure(MeetingBotException):
    """
    Raised when the bot is not let into the meeting.

    Carries the page text captured at the moment the wait ended so the
    reporter can tell a denial from a timeout.
    """

    def __init__(
        self,
        message: str,
        body_text: Optional[str] = None,
        retryable: bool = False,
        retry_count: int = 0,
    ):
        super().__init__(message, {"retryable": retryable, "retry_count": retry_count})
        self.body_text = body_text or ""
        self.retryable = retryable
        self.retry_count = retry_count


class UnsupportedSessionFailure(MeetingBotException):
    """Raised when the meeting cannot be joined in its current state."""

    def __init__(self, message: str, page_status: Optional[str] = None):
        super().__init__(message, {"page_status": page_status})
        self.page_status = page_status


class CaptureFailure(MeetingBotException):
    """Raised when a required UI step or the media capture itself fails."""
    pass


class UploadFailure(MeetingBotException):
    """Raised when the recording finished but could not be uploaded."""
    pass


class BrowserLaunchError(MeetingBotException):
    """Raised when Chromium does not come up in time."""
    pass


# HTTP Exceptions for API responses
class HTTPBadRequest(HTTPException):
    """400 Bad Request"""
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class HTTPConflict(HTTPException):
    """409 Conflict"""
    def __init__(self, detail: str = "Resource conflict"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)
