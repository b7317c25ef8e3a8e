"""
Lobby wait: a deadline racing a poller.

Whichever settles first decides the outcome; the other is cancelled so no
timer or poll outlives the race.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence, Tuple

from meetbot.core.logging import get_logger

logger = get_logger("admission")

ADMITTED = "admitted"
DENIED = "denied"
TIMEOUT = "timeout"

DEFAULT_LOBBY_PATTERNS = ("lobby", "waiting")


class AdmissionRace:
    """
    Wait in the lobby until admitted, denied or out of time.

    Args:
        surface: CapabilitySurface of the meeting page
        wait_budget: Seconds before the deadline settles the race as a timeout
        poll_interval: Seconds between lobby checks
        content_selectors: Elements that only exist once the bot is inside
        denial_phrases: Page texts meaning the host refused the request
        lobby_patterns: URL fragments present while still waiting
    """

    def __init__(
        self,
        surface,
        *,
        wait_budget: float,
        poll_interval: float = 5.0,
        content_selectors: Sequence[str] = (),
        denial_phrases: Sequence[str] = (),
        lobby_patterns: Sequence[str] = DEFAULT_LOBBY_PATTERNS,
    ):
        self.surface = surface
        self.wait_budget = wait_budget
        self.poll_interval = poll_interval
        self.content_selectors = tuple(content_selectors)
        self.denial_phrases = tuple(denial_phrases)
        self.lobby_patterns = tuple(lobby_patterns)
        self.reason: Optional[str] = None
        self.polls = 0

    async def run(self) -> bool:
        """Return True once admitted, False on denial or timeout."""
        outcome: asyncio.Future = asyncio.get_running_loop().create_future()

        def settle(admitted: bool, reason: str) -> None:
            if not outcome.done():
                self.reason = reason
                outcome.set_result(admitted)

        deadline = asyncio.create_task(self._deadline(settle), name="admission-deadline")
        poller = asyncio.create_task(self._poll(settle), name="admission-poll")
        try:
            return await outcome
        finally:
            for task in (deadline, poller):
                task.cancel()
            await asyncio.gather(deadline, poller, return_exceptions=True)

    async def _deadline(self, settle) -> None:
        await asyncio.sleep(self.wait_budget)
        logger.warning(f"Still not admitted after {self.wait_budget:.0f}s, giving up")
        settle(False, TIMEOUT)

    async def _poll(self, settle) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            self.polls += 1
            try:
                verdict = await self._check()
            except Exception as e:
                logger.debug(f"Lobby check failed, will retry: {e}")
                continue

            if verdict is not None:
                admitted, reason = verdict
                settle(admitted, reason)
                return
            logger.info("Still waiting in the lobby...")

    async def _check(self) -> Optional[Tuple[bool, str]]:
        url = self.surface.current_url()
        if not any(pattern in url for pattern in self.lobby_patterns):
            logger.info("Admitted to meeting (lobby URL left)")
            return True, ADMITTED

        if self.content_selectors and await self.surface.locate(self.content_selectors, timeout=1.0) is not None:
            logger.info("Admitted to meeting (meeting content visible)")
            return True, ADMITTED

        body = await self.surface.body_text()
        for phrase in self.denial_phrases:
            if phrase in body:
                logger.warning(f"Admission denied: {phrase!r}")
                return False, DENIED

        return None
