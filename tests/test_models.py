import pytest

from meetbot.models import BotStatus, DetectionState, MeetingProvider, Session, StatusHistory


def test_status_history_appends_in_order():
    history = StatusHistory()
    history.push(BotStatus.PROCESSING)
    history.push(BotStatus.JOINED)
    history.push(BotStatus.FINISHED)

    assert history.to_list() == ["processing", "joined", "finished"]
    assert history.is_terminal


def test_status_history_rejects_push_after_terminal():
    history = StatusHistory([BotStatus.PROCESSING, BotStatus.FAILED])

    with pytest.raises(ValueError):
        history.push(BotStatus.JOINED)


def test_downgrade_replaces_trailing_finished():
    history = StatusHistory([BotStatus.PROCESSING, BotStatus.JOINED, BotStatus.FINISHED])
    history.downgrade_finished()

    assert history.to_list() == ["processing", "joined", "failed"]
    assert BotStatus.FINISHED not in history


@pytest.mark.parametrize("tokens", [
    [],
    [BotStatus.PROCESSING],
    [BotStatus.PROCESSING, BotStatus.FAILED],
])
def test_downgrade_only_allowed_on_trailing_finished(tokens):
    history = StatusHistory(tokens)

    with pytest.raises(ValueError):
        history.downgrade_finished()
    assert history.to_list() == [t.value for t in tokens]


def test_session_secret_is_not_serialized():
    session = Session(provider=MeetingProvider.TELEMOST)
    data = session.to_dict()

    assert session.session_secret not in data.values()
    assert data["provider"] == "telemost"
    assert data["status"] == []


def test_sessions_get_distinct_secrets():
    assert Session(MeetingProvider.ZOOM).session_secret != Session(MeetingProvider.ZOOM).session_secret


def test_detection_state_resets_on_success_and_disables_at_threshold():
    state = DetectionState(max_failures=3)

    assert state.record_failure()
    assert state.record_failure()
    state.record_success()
    assert state.failures == 0

    state.record_failure()
    state.record_failure()
    assert state.record_failure() is False
    assert not state.active
