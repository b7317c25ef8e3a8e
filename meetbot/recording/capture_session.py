"""
In-session side of a recording.

A CaptureSession owns the watchdog set, the hard duration timer and the
TerminationGuard. It never touches host state directly: the only thing it
sends back is the secret-tagged end signal.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, List, Optional, Sequence

from meetbot.core.logging import get_logger
from .watchdogs import (
    EARLY_END,
    MAX_DURATION,
    LoneParticipantWatchdog,
    ModalDismissalLoop,
    PageValidityWatchdog,
    SilenceWatchdog,
    TerminationGuard,
    Watchdog,
    WatchdogTimings,
)

logger = get_logger("capture_session")


class CaptureSession:
    """
    Runs the watchdogs for one recording and tears it down exactly once.

    Args:
        probe: SessionProbe used by the watchdogs and to stop the recorder
        secret: Session secret the end signal is tagged with
        signal_end: Host entry point receiving ``signal_end(secret)``
        max_duration: Hard recording limit (seconds)
        inactivity_limit: Continuous silence that ends the recording (seconds)
        activation_delay: Delay before silence/lone-participant checks (seconds)
        expected_domain: Domain the meeting page must stay on
        removal_phrases: Page texts that mean the bot is out of the meeting
    """

    def __init__(
        self,
        probe,
        secret: str,
        signal_end: Callable[[str], Any],
        *,
        max_duration: float,
        inactivity_limit: float,
        activation_delay: float,
        expected_domain: str,
        removal_phrases: Sequence[str],
        timings: Optional[WatchdogTimings] = None,
    ):
        timings = timings or WatchdogTimings()
        self.probe = probe
        self._secret = secret
        self._signal_end = signal_end
        self.max_duration = max_duration
        self.guard = TerminationGuard()
        self.teardowns = 0
        self._tasks: List[asyncio.Task] = []

        self.silence = SilenceWatchdog(
            probe,
            self.stop,
            inactivity_limit=inactivity_limit,
            start_delay=activation_delay,
            interval=timings.silence_interval,
            threshold=timings.silence_threshold,
        )
        self.lone_participant = LoneParticipantWatchdog(
            probe,
            self.stop,
            start_delay=activation_delay,
            interval=timings.lone_participant_interval,
            max_failures=timings.max_detection_failures,
        )
        self.page_validity = PageValidityWatchdog(
            probe,
            self.stop,
            expected_domain=expected_domain,
            removal_phrases=removal_phrases,
            interval=timings.page_validity_interval,
        )
        self.modal_dismissal = ModalDismissalLoop(
            probe,
            interval=timings.modal_dismiss_interval,
            max_errors=timings.max_dismiss_errors,
        )

    @property
    def watchdogs(self) -> List[Watchdog]:
        return [self.silence, self.lone_participant, self.page_validity, self.modal_dismissal]

    @property
    def stopped(self) -> bool:
        return self.guard.tripped

    @property
    def reason(self) -> Optional[str]:
        return self.guard.reason

    def start(self) -> None:
        if self._tasks:
            raise RuntimeError("Capture session already started")
        for watchdog in self.watchdogs:
            self._spawn(watchdog.run(), f"watchdog-{watchdog.name}")
        self._spawn(self._duration_timer(), "max-duration")
        logger.info(f"Capture session started (max duration {self.max_duration:.0f}s)")

    def _spawn(self, coro, name: str) -> None:
        task = asyncio.create_task(coro, name=name)
        task.add_done_callback(self._log_task_failure)
        self._tasks.append(task)

    @staticmethod
    def _log_task_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"{task.get_name()} crashed: {exc!r}")

    async def _duration_timer(self) -> None:
        await asyncio.sleep(self.max_duration)
        logger.info("Max recording duration reached")
        await self.stop(MAX_DURATION)

    async def end_early(self) -> bool:
        """Host-requested stop."""
        return await self.stop(EARLY_END)

    async def stop(self, reason: str) -> bool:
        """
        Tear the recording down.

        Only the first call does anything; every later call, whatever its
        reason, returns False.
        """
        if not self.guard.trip(reason):
            return False
        self.teardowns += 1
        logger.info(f"Stopping the recording: {reason}")

        try:
            await self.probe.stop_recording()
        except Exception as e:
            logger.warning(f"Error stopping media capture: {e}")

        current = asyncio.current_task()
        for task in self._tasks:
            if task is not current and not task.done():
                task.cancel()

        if self.modal_dismissal.last_error is not None:
            logger.error(f"Error dismissing modals: {self.modal_dismissal.last_error}")

        try:
            result = self._signal_end(self._secret)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(f"Could not deliver session end signal: {e}")

        return True

    async def wait_closed(self) -> None:
        """Wait until every watchdog task has finished or been cancelled."""
        current = asyncio.current_task()
        pending = [task for task in self._tasks if task is not current]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
