"""
Maps session failures onto the backend's log taxonomy and reports them.
"""

from __future__ import annotations

from typing import Optional

from meetbot.constants import REQUEST_DENIED_PHRASES
from meetbot.core.exceptions import AdmissionFailure, UnsupportedSessionFailure
from meetbot.core.logging import get_logger
from meetbot.models import MeetingProvider
from .bot_service import BotService

logger = get_logger("error_reporter")

WAITING_AT_LOBBY = "WaitingAtLobby"
UNSUPPORTED_MEETING = "UnsupportedMeeting"

USER_DENIED_REQUEST = "UserDeniedRequest"
TIMEOUT = "Timeout"
REQUIRES_SIGN_IN = "RequiresSignIn"

SIGN_IN_PAGE = "SIGN_IN_PAGE"


def classify_admission_failure(provider: MeetingProvider, body_text: Optional[str]) -> str:
    """Denied if the page shows the provider's denial phrase, otherwise a timeout."""
    phrase = REQUEST_DENIED_PHRASES.get(provider)
    if phrase and body_text and phrase in body_text:
        return USER_DENIED_REQUEST
    return TIMEOUT


def classify_unsupported_session_failure(error: UnsupportedSessionFailure) -> Optional[str]:
    """Only the sign-in gate has a category; anything else goes unreported."""
    if error.page_status == SIGN_IN_PAGE:
        return REQUIRES_SIGN_IN
    return None


async def handle_admission_failure(
    bot_service: BotService,
    error: AdmissionFailure,
    *,
    provider: MeetingProvider,
    token: str,
    event_id: Optional[str] = None,
    bot_id: Optional[str] = None,
) -> bool:
    sub_category = classify_admission_failure(provider, error.body_text)
    return await _report(
        bot_service,
        error,
        provider=provider,
        token=token,
        event_id=event_id,
        bot_id=bot_id,
        category=WAITING_AT_LOBBY,
        sub_category=sub_category,
    )


async def handle_unsupported_session_failure(
    bot_service: BotService,
    error: UnsupportedSessionFailure,
    *,
    provider: MeetingProvider,
    token: str,
    event_id: Optional[str] = None,
    bot_id: Optional[str] = None,
) -> Optional[bool]:
    sub_category = classify_unsupported_session_failure(error)
    if not sub_category:
        logger.debug(f"Unsupported session without a reportable cause: {error.page_status}")
        return None
    return await _report(
        bot_service,
        error,
        provider=provider,
        token=token,
        event_id=event_id,
        bot_id=bot_id,
        category=UNSUPPORTED_MEETING,
        sub_category=sub_category,
    )


async def _report(
    bot_service: BotService,
    error: Exception,
    *,
    provider: MeetingProvider,
    token: str,
    event_id: Optional[str],
    bot_id: Optional[str],
    category: str,
    sub_category: str,
) -> bool:
    try:
        return await bot_service.add_bot_log(
            token=token,
            provider=provider,
            level="error",
            message=str(error),
            category=category,
            sub_category=sub_category,
            event_id=event_id,
            bot_id=bot_id,
        )
    except Exception as e:
        logger.error(f"Failed to report {category}/{sub_category}: {e}")
        return False
