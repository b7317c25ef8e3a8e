"""
Read-only view of the meeting page used by the watchdogs.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from meetbot.models import DismissResult, PageState
from .recorder_scripts import (
    AUDIO_LEVEL_JS,
    HAS_AUDIO_JS,
    START_RECORDER_JS,
    STOP_RECORDER_JS,
)


class SessionProbe(Protocol):
    """What the watchdog set needs to know about the running session."""

    async def has_audio_track(self) -> bool: ...

    async def audio_level(self) -> Optional[float]: ...

    async def participant_count(self) -> Optional[int]: ...

    async def page_state(self) -> PageState: ...

    async def dismiss_modals(self) -> DismissResult: ...

    async def stop_recording(self) -> None: ...


class PageSessionProbe:
    """
    SessionProbe backed by scripts evaluated in the meeting page.

    The recorder scripts are provider independent; participant counting,
    page-state and dialog scripts come from the provider handler.
    """

    def __init__(
        self,
        surface,
        *,
        participant_count_js: str,
        page_state_js: str,
        dismiss_modals_js: str,
    ):
        self.surface = surface
        self.participant_count_js = participant_count_js
        self.page_state_js = page_state_js
        self.dismiss_modals_js = dismiss_modals_js

    async def start_recorder(
        self,
        secret: str,
        chunk_interval_ms: int,
        primary_mime_type: str,
        secondary_mime_type: str,
    ) -> Dict[str, Any]:
        result = await self.surface.evaluate(
            START_RECORDER_JS,
            {
                "secret": secret,
                "chunkInterval": chunk_interval_ms,
                "primaryMimeType": primary_mime_type,
                "secondaryMimeType": secondary_mime_type,
            },
        )
        return result or {"started": False, "error": "recorder script returned nothing"}

    async def has_audio_track(self) -> bool:
        return bool(await self.surface.evaluate(HAS_AUDIO_JS))

    async def audio_level(self) -> Optional[float]:
        level = await self.surface.evaluate(AUDIO_LEVEL_JS)
        return None if level is None else float(level)

    async def participant_count(self) -> Optional[int]:
        count = await self.surface.evaluate(self.participant_count_js)
        if count is None:
            return None
        return int(count)

    async def page_state(self) -> PageState:
        raw = await self.surface.evaluate(self.page_state_js) or {}
        return PageState(
            url=raw.get("url", ""),
            body_text=raw.get("bodyText", ""),
            has_meeting_ui=bool(raw.get("hasMeetingUi")),
        )

    async def dismiss_modals(self) -> DismissResult:
        raw = await self.surface.evaluate(self.dismiss_modals_js) or {}
        return DismissResult(
            clicked=int(raw.get("clicked", 0)),
            failed=int(raw.get("failed", 0)),
            last_error=raw.get("lastError"),
        )

    async def stop_recording(self) -> None:
        await self.surface.evaluate(STOP_RECORDER_JS)
