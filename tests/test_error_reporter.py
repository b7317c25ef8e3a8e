from meetbot import constants
from meetbot.core.exceptions import AdmissionFailure, UnsupportedSessionFailure
from meetbot.models import MeetingProvider
from meetbot.services.error_reporter import (
    REQUIRES_SIGN_IN,
    SIGN_IN_PAGE,
    TIMEOUT,
    UNSUPPORTED_MEETING,
    USER_DENIED_REQUEST,
    WAITING_AT_LOBBY,
    classify_admission_failure,
    classify_unsupported_session_failure,
    handle_admission_failure,
    handle_unsupported_session_failure,
)

from conftest import RecordingBotService


def test_denial_phrase_means_user_denied():
    body = "Someone in call denied your request to join"

    assert classify_admission_failure(MeetingProvider.GOOGLE, body) == USER_DENIED_REQUEST


def test_denial_phrase_of_another_provider_is_a_timeout():
    body = "Someone in call denied your request to join"

    assert classify_admission_failure(MeetingProvider.TELEMOST, body) == TIMEOUT
    assert classify_admission_failure(MeetingProvider.TELEMOST, None) == TIMEOUT


def test_only_sign_in_page_is_classified():
    assert classify_unsupported_session_failure(UnsupportedSessionFailure("x", SIGN_IN_PAGE)) == REQUIRES_SIGN_IN
    assert classify_unsupported_session_failure(UnsupportedSessionFailure("x", "BROWSER_UNSUPPORTED")) is None


async def test_admission_failure_reported_as_error_log():
    service = RecordingBotService()
    error = AdmissionFailure("could not enter", body_text="Доступ запрещен")

    assert await handle_admission_failure(service, error, provider=MeetingProvider.TELEMOST, token="t")

    log, = service.logs
    assert log == {
        "level": "error",
        "message": "could not enter",
        "category": WAITING_AT_LOBBY,
        "sub_category": USER_DENIED_REQUEST,
    }


async def test_unclassified_unsupported_session_is_not_reported():
    service = RecordingBotService()
    error = UnsupportedSessionFailure("odd page", page_status="UNKNOWN")

    assert await handle_unsupported_session_failure(service, error, provider=MeetingProvider.TELEMOST, token="t") is None
    assert service.logs == []


async def test_sign_in_reported_under_unsupported_meeting():
    service = RecordingBotService()
    error = UnsupportedSessionFailure("sign in", page_status=SIGN_IN_PAGE)

    await handle_unsupported_session_failure(service, error, provider=MeetingProvider.TELEMOST, token="t")

    assert service.logs[0]["category"] == UNSUPPORTED_MEETING
    assert service.logs[0]["sub_category"] == REQUIRES_SIGN_IN


async def test_reporter_failure_is_swallowed():
    service = RecordingBotService(fail_logs=True)

    result = await handle_admission_failure(
        service, AdmissionFailure("late"), provider=MeetingProvider.TELEMOST, token="t"
    )

    assert result is False


def test_every_provider_has_exactly_its_denial_phrase():
    assert set(constants.REQUEST_DENIED_PHRASES) == set(MeetingProvider)
    defined = {value for name, value in vars(constants).items() if name.endswith("_REQUEST_DENIED")}
    assert defined == set(constants.REQUEST_DENIED_PHRASES.values())
