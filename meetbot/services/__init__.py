"""
Backend-facing services: status/log reporting and diagnostics.
"""

from .bot_service import BotService
from .bug_service import BugService
from .error_reporter import (
    classify_admission_failure,
    classify_unsupported_session_failure,
    handle_admission_failure,
    handle_unsupported_session_failure,
)

__all__ = [
    "BotService",
    "BugService",
    "classify_admission_failure",
    "classify_unsupported_session_failure",
    "handle_admission_failure",
    "handle_unsupported_session_failure",
]
