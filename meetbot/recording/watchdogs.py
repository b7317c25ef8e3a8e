"""
Perpetual checks that run while a meeting is being recorded.

Three of them (silence, lone participant, page validity) can end the
recording; the modal-dismissal loop only keeps the page clean. All of them
share one ``TerminationGuard`` through the capture session, so however many
fire, the recording is torn down once.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Sequence

from meetbot.core.logging import get_logger
from meetbot.models import DetectionState, PageState

logger = get_logger("watchdogs")

TerminationCallback = Callable[[str], Awaitable[Any]]

SILENCE = "silence"
LONE_PARTICIPANT = "lone_participant"
PAGE_INVALID = "page_invalid"
MAX_DURATION = "max_duration"
EARLY_END = "early_end"


@dataclass(frozen=True)
class WatchdogTimings:
    """Cadences and thresholds shared by the watchdog set (seconds)."""
    silence_interval: float = 0.1
    # Average byte-frequency level (0-255) below which a sample counts as silent
    silence_threshold: float = 10
    lone_participant_interval: float = 5
    max_detection_failures: int = 10
    page_validity_interval: float = 10
    modal_dismiss_interval: float = 2
    max_dismiss_errors: int = 10


class TerminationGuard:
    """Single-assignment latch: the first reason wins, later trips are no-ops."""

    def __init__(self) -> None:
        self._reason: Optional[str] = None

    def trip(self, reason: str) -> bool:
        # No await between the check and the write, so this is atomic on the loop
        if self._reason is not None:
            return False
        self._reason = reason
        return True

    @property
    def tripped(self) -> bool:
        return self._reason is not None

    @property
    def reason(self) -> Optional[str]:
        return self._reason


class Watchdog:
    """Base class: optional activation delay, then ``_watch`` until it returns."""

    name = "watchdog"

    def __init__(self, probe, on_trigger: Optional[TerminationCallback] = None, start_delay: float = 0.0):
        self.probe = probe
        self._on_trigger = on_trigger
        self.start_delay = start_delay
        self.fired = False

    async def run(self) -> None:
        if self.start_delay > 0:
            await asyncio.sleep(self.start_delay)
        logger.debug(f"{self.name} watchdog active")
        await self._watch()

    async def _watch(self) -> None:
        raise NotImplementedError

    async def _trigger(self, reason: str) -> None:
        self.fired = True
        if self._on_trigger is not None:
            await self._on_trigger(reason)


class SilenceWatchdog(Watchdog):
    """
    Ends the recording after a continuous stretch of silence.

    A stream without an audio track disables this check for good; the other
    watchdogs and the duration limit still cover the session.
    """

    name = "silence"

    def __init__(
        self,
        probe,
        on_trigger: TerminationCallback,
        inactivity_limit: float,
        start_delay: float = 0.0,
        interval: float = 0.1,
        threshold: float = 10,
    ):
        super().__init__(probe, on_trigger, start_delay)
        self.inactivity_limit = inactivity_limit
        self.interval = interval
        self.threshold = threshold
        self.silence_duration = 0.0
        self.total_checks = 0
        self._activity_sum = 0.0
        self._silent_since: Optional[float] = None

    async def _watch(self) -> None:
        try:
            has_audio = await self.probe.has_audio_track()
        except Exception as e:
            logger.error(f"Failed to initialize silence detection: {e}")
            return

        if not has_audio:
            logger.warning(
                "Skipping silence detection - no audio tracks available. "
                "Meeting will rely on presence detection and max duration timeout."
            )
            return

        while True:
            try:
                level = await self.probe.audio_level()
            except Exception as e:
                logger.error(f"Error in silence monitoring: {e}")
                logger.warning("Silence detection stopped - will rely on presence detection and max duration timeout.")
                return

            if level is None:
                logger.warning("Audio analyser unavailable, silence detection stopped.")
                return

            self.total_checks += 1
            self._activity_sum += level

            # Measured on the loop clock so slow page reads count too
            now = asyncio.get_running_loop().time()
            if level < self.threshold:
                if self._silent_since is None:
                    self._silent_since = now
                self.silence_duration = now - self._silent_since
                if self.silence_duration >= self.inactivity_limit:
                    logger.warning(
                        f"Detected {self.silence_duration:.1f}s of silence, ending the recording "
                        f"(avg audio activity {self._activity_sum / self.total_checks:.2f} "
                        f"over {self.total_checks} checks)"
                    )
                    await self._trigger(SILENCE)
                    return
            else:
                self._silent_since = None
                self.silence_duration = 0.0

            await asyncio.sleep(self.interval)


class LoneParticipantWatchdog(Watchdog):
    """Ends the recording once the bot is the only one left in the meeting."""

    name = "lone_participant"

    def __init__(
        self,
        probe,
        on_trigger: TerminationCallback,
        start_delay: float = 0.0,
        interval: float = 5.0,
        max_failures: int = 10,
    ):
        super().__init__(probe, on_trigger, start_delay)
        self.interval = interval
        self.state = DetectionState(max_failures=max_failures)

    async def _watch(self) -> None:
        while self.state.active:
            await asyncio.sleep(self.interval)

            try:
                contributors = await self.probe.participant_count()
            except Exception as e:
                logger.error(f"Participant detection error: {e}")
                contributors = None

            if contributors is None:
                if not self.state.record_failure():
                    logger.warning(
                        f"Participant detection failed {self.state.failures} times in a row, "
                        "disabling lone participant detection"
                    )
                    return
                logger.warning(f"Participant detection failed, retrying. Failure count: {self.state.failures}")
                continue

            self.state.record_success()
            if contributors < 2:
                logger.info("Bot is alone, ending meeting.")
                await self._trigger(LONE_PARTICIPANT)
                return


def find_page_problem(state: PageState, expected_domain: str, removal_phrases: Sequence[str]) -> Optional[str]:
    """Describe why the page no longer looks like a live meeting, or None if it does."""
    if expected_domain not in state.url:
        return f"no longer on {expected_domain} - URL changed to: {state.url}"

    for phrase in removal_phrases:
        if phrase in (state.body_text or ""):
            return f"page says: {phrase!r}"

    if not state.has_meeting_ui:
        return "meeting UI elements not found"

    return None


class PageValidityWatchdog(Watchdog):
    """Ends the recording when the bot was removed or the meeting page went away."""

    name = "page_validity"

    def __init__(
        self,
        probe,
        on_trigger: TerminationCallback,
        expected_domain: str,
        removal_phrases: Sequence[str],
        interval: float = 10.0,
    ):
        super().__init__(probe, on_trigger)
        self.expected_domain = expected_domain
        self.removal_phrases = tuple(removal_phrases)
        self.interval = interval

    async def _watch(self) -> None:
        while True:
            await asyncio.sleep(self.interval)

            try:
                state = await self.probe.page_state()
                problem = find_page_problem(state, self.expected_domain, self.removal_phrases)
            except Exception as e:
                problem = f"page check failed: {e}"

            if problem:
                logger.warning(f"Meeting page state changed ({problem}), ending recording")
                await self._trigger(PAGE_INVALID)
                return


class ModalDismissalLoop(Watchdog):
    """Clicks away dialogs that pop up over the meeting. Never ends the recording."""

    name = "modal_dismissal"

    def __init__(self, probe, interval: float = 2.0, max_errors: int = 10):
        super().__init__(probe)
        self.interval = interval
        self.state = DetectionState(max_failures=max_errors)
        self.last_error: Optional[object] = None
        self.dismissed = 0

    async def _watch(self) -> None:
        while self.state.active:
            await asyncio.sleep(self.interval)

            failed = 0
            try:
                result = await self.probe.dismiss_modals()
                if result.clicked:
                    self.dismissed += result.clicked
                    logger.info(f"Dismissed {result.clicked} dialog(s)")
                failed = result.failed
                if result.last_error:
                    self.last_error = result.last_error
            except Exception as e:
                self.last_error = e
                failed = 1

            if not failed:
                self.state.record_success()
                continue

            for _ in range(failed):
                if not self.state.record_failure():
                    logger.error(
                        f"Failed to dismiss modals {self.state.failures} times, will stop trying "
                        f"(last error: {self.last_error})"
                    )
                    return
