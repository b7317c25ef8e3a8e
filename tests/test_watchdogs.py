import asyncio

import pytest

from meetbot.models import DismissResult, PageState
from meetbot.recording.watchdogs import (
    LONE_PARTICIPANT,
    PAGE_INVALID,
    SILENCE,
    LoneParticipantWatchdog,
    ModalDismissalLoop,
    PageValidityWatchdog,
    SilenceWatchdog,
    TerminationGuard,
    find_page_problem,
)

from conftest import FakeProbe

DOMAIN = "telemost.yandex.ru"
REMOVED = ("You've been removed from the meeting", "Connection lost")


class Triggers:
    def __init__(self):
        self.reasons = []

    async def __call__(self, reason):
        self.reasons.append(reason)


def test_termination_guard_first_reason_wins():
    guard = TerminationGuard()

    assert guard.trip(SILENCE)
    assert not guard.trip(LONE_PARTICIPANT)
    assert guard.tripped
    assert guard.reason == SILENCE


# -- silence -----------------------------------------------------------------

async def test_silence_fires_after_continuous_silence():
    triggers = Triggers()
    watchdog = SilenceWatchdog(FakeProbe(level=0), triggers, inactivity_limit=0.05, interval=0.005)

    await asyncio.wait_for(watchdog.run(), timeout=2)

    assert triggers.reasons == [SILENCE]
    assert watchdog.fired


async def test_silence_never_fires_without_audio_track():
    triggers = Triggers()
    watchdog = SilenceWatchdog(FakeProbe(has_audio=False, level=0), triggers, inactivity_limit=0.02, interval=0.005)

    await asyncio.wait_for(watchdog.run(), timeout=0.04)

    assert triggers.reasons == []
    assert watchdog.total_checks == 0


async def test_silence_counter_resets_on_sound():
    triggers = Triggers()
    probe = FakeProbe(levels=[0, 0, 0, 80], level=80)
    watchdog = SilenceWatchdog(probe, triggers, inactivity_limit=0.5, interval=0.005)

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(watchdog.run(), timeout=0.1)

    assert triggers.reasons == []
    assert watchdog.silence_duration == 0


class SlowAudioProbe(FakeProbe):
    """Audio reads that take longer than the polling interval."""

    async def audio_level(self):
        await asyncio.sleep(0.02)
        return await super().audio_level()


async def test_silence_counts_time_spent_reading_the_page():
    triggers = Triggers()
    watchdog = SilenceWatchdog(SlowAudioProbe(level=0), triggers, inactivity_limit=0.1, interval=0.001)

    await asyncio.wait_for(watchdog.run(), timeout=2)

    assert triggers.reasons == [SILENCE]
    assert watchdog.silence_duration >= 0.1
    # Counting only the polling interval would need about a hundred reads
    assert watchdog.total_checks < 20


async def test_silence_monitoring_stops_on_probe_error():
    triggers = Triggers()
    probe = FakeProbe(levels=[RuntimeError("analyser gone")], level=0)
    watchdog = SilenceWatchdog(probe, triggers, inactivity_limit=0.01, interval=0.005)

    await asyncio.wait_for(watchdog.run(), timeout=1)

    assert triggers.reasons == []


# -- lone participant --------------------------------------------------------

async def test_lone_participant_fires_after_indeterminate_reads():
    triggers = Triggers()
    watchdog = LoneParticipantWatchdog(FakeProbe(counts=[None, None, 1]), triggers, interval=0.001)

    await asyncio.wait_for(watchdog.run(), timeout=1)

    assert triggers.reasons == [LONE_PARTICIPANT]
    assert watchdog.state.failures == 0


async def test_lone_participant_disables_itself_after_max_failures():
    triggers = Triggers()
    watchdog = LoneParticipantWatchdog(FakeProbe(count=None), triggers, interval=0.001, max_failures=4)

    await asyncio.wait_for(watchdog.run(), timeout=1)

    assert triggers.reasons == []
    assert not watchdog.state.active
    assert watchdog.state.failures == 4


async def test_lone_participant_probe_errors_count_as_failures():
    triggers = Triggers()
    probe = FakeProbe(counts=[RuntimeError("no DOM"), None], count=None)
    watchdog = LoneParticipantWatchdog(probe, triggers, interval=0.001, max_failures=2)

    await asyncio.wait_for(watchdog.run(), timeout=1)

    assert triggers.reasons == []
    assert not watchdog.state.active


async def test_lone_participant_keeps_polling_while_others_present():
    triggers = Triggers()
    probe = FakeProbe(counts=[3, None, None, 3, None, None, None], count=None)
    watchdog = LoneParticipantWatchdog(probe, triggers, interval=0.001, max_failures=3)

    await asyncio.wait_for(watchdog.run(), timeout=1)

    # The read of 3 in the middle reset the counter, so it took 3 more failures
    assert probe.counts == []
    assert triggers.reasons == []


# -- page validity -----------------------------------------------------------

def test_find_page_problem():
    ok = PageState(url="https://telemost.yandex.ru/j/1", body_text="", has_meeting_ui=True)
    assert find_page_problem(ok, DOMAIN, REMOVED) is None

    moved = PageState(url="https://yandex.ru/", body_text="", has_meeting_ui=True)
    assert "URL changed" in find_page_problem(moved, DOMAIN, REMOVED)

    removed = PageState(url=ok.url, body_text="Connection lost. Reconnecting", has_meeting_ui=True)
    assert "Connection lost" in find_page_problem(removed, DOMAIN, REMOVED)

    no_ui = PageState(url=ok.url, body_text="", has_meeting_ui=False)
    assert find_page_problem(no_ui, DOMAIN, REMOVED) == "meeting UI elements not found"


async def test_page_validity_fires_on_removal():
    triggers = Triggers()
    removed = PageState(
        url="https://telemost.yandex.ru/j/1",
        body_text="You've been removed from the meeting",
        has_meeting_ui=False,
    )
    probe = FakeProbe(page_states=[FakeProbe().default_page_state, removed])
    watchdog = PageValidityWatchdog(probe, triggers, DOMAIN, REMOVED, interval=0.001)

    await asyncio.wait_for(watchdog.run(), timeout=1)

    assert triggers.reasons == [PAGE_INVALID]
    assert probe.page_states == []


async def test_page_validity_treats_probe_error_as_invalid():
    triggers = Triggers()
    probe = FakeProbe(page_states=[RuntimeError("Target closed")])
    watchdog = PageValidityWatchdog(probe, triggers, DOMAIN, REMOVED, interval=0.001)

    await asyncio.wait_for(watchdog.run(), timeout=1)

    assert triggers.reasons == [PAGE_INVALID]


# -- modal dismissal ---------------------------------------------------------

async def test_modal_loop_gives_up_after_consecutive_errors():
    probe = FakeProbe(
        dismiss_results=[
            DismissResult(clicked=1),
            RuntimeError("detached"),
            DismissResult(failed=1, last_error="not clickable"),
        ]
    )
    probe.dismiss_results.extend([RuntimeError("boom")] * 5)
    loop = ModalDismissalLoop(probe, interval=0.001, max_errors=3)

    await asyncio.wait_for(loop.run(), timeout=1)

    assert loop.dismissed == 1
    assert not loop.state.active
    assert not loop.fired
    assert isinstance(loop.last_error, RuntimeError)


async def test_modal_loop_clean_sweep_resets_error_count():
    probe = FakeProbe(dismiss_results=[RuntimeError("a"), RuntimeError("b"), DismissResult()])
    loop = ModalDismissalLoop(probe, interval=0.001, max_errors=3)

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(loop.run(), timeout=0.05)

    assert loop.state.active
    assert loop.state.failures == 0
    assert loop.last_error is not None
