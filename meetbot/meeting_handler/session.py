"""
Session lifecycle shared by every provider handler.

``MeetingSession.run`` drives one join attempt from ``processing`` to a
terminal status, reporting every transition to the backend. Provider
handlers only implement ``join_meeting`` and supply the page scripts the
watchdogs need.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional, Sequence

from meetbot.config import BotSettings, settings
from meetbot.core.exceptions import (
    AdmissionFailure,
    CaptureFailure,
    UnsupportedSessionFailure,
    UploadFailure,
)
from meetbot.core.logging import correlation_prefix, get_logger
from meetbot.models import BotStatus, JoinParams, MeetingProvider, Session
from meetbot.recording import (
    CaptureSession,
    ChunkBridge,
    PageSessionProbe,
    RecordingUploader,
    WatchdogTimings,
)
from meetbot.recording.watchdogs import EARLY_END, MAX_DURATION
from meetbot.services import (
    BotService,
    BugService,
    handle_admission_failure,
    handle_unsupported_session_failure,
)
from .browser import launch_surface
from .surface import CapabilitySurface

logger = get_logger("session")

SurfaceFactory = Callable[[str, str, MeetingProvider], Awaitable[CapabilitySurface]]


class MeetingSession:
    """
    Base class for provider handlers.

    Subclasses set ``provider``, ``expected_domain`` and ``removal_phrases``,
    implement ``join_meeting`` and the three page scripts.
    """

    provider: MeetingProvider
    expected_domain: str = ""
    removal_phrases: Sequence[str] = ()

    participant_count_js: str = "() => null"
    page_state_js: str = "() => ({ url: location.href, bodyText: document.body.innerText, hasMeetingUi: true })"
    dismiss_modals_js: str = "() => ({ clicked: 0, failed: 0 })"

    def __init__(
        self,
        *,
        bot_service: Optional[BotService] = None,
        bug_service: Optional[BugService] = None,
        surface_factory: Optional[SurfaceFactory] = None,
        bot_settings: Optional[BotSettings] = None,
        watchdog_timings: Optional[WatchdogTimings] = None,
        correlation_id: Optional[str] = None,
    ):
        self.session = Session(provider=self.provider)
        if correlation_id:
            self.session.correlation_id = correlation_id
        self.bot_service = bot_service or BotService()
        self.bug_service = bug_service or BugService()
        self.surface_factory = surface_factory or launch_surface
        self.settings = bot_settings or settings.bot
        self.watchdog_timings = watchdog_timings or WatchdogTimings()

        self.surface: Optional[CapabilitySurface] = None
        self.capture: Optional[CaptureSession] = None
        self.bridge: Optional[ChunkBridge] = None
        self.params: Optional[JoinParams] = None
        self.prefix = correlation_prefix(self.session.correlation_id)

    @property
    def status_history(self):
        return self.session.status_history

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def run(self, params: JoinParams, uploader: RecordingUploader) -> None:
        """
        Run one join attempt to a terminal status.

        Raises:
            UploadFailure: The meeting was recorded but the upload failed
            Exception: Any failure during join or capture, after it was
                reported and the history ended in ``failed``
        """
        self.params = params
        history = self.session.status_history
        try:
            await self._push_state(BotStatus.PROCESSING)
            await self.join_meeting(params, uploader)

            logger.info(f"{self.prefix} Uploading recording...")
            try:
                result = await uploader.upload_recording_to_remote_storage()
            except Exception as e:
                logger.error(f"{self.prefix} Upload raised: {e!r}")
                result = None
            if BotStatus.FINISHED in history and not result:
                history.downgrade_finished()
                logger.error(f"{self.prefix} Recording finished but upload failed")
                await self._report_status()
                raise UploadFailure("Recording upload failed", details={"recording_id": uploader.recording_id})
            logger.info(f"{self.prefix} ✅ Recording stored: {result}")
        except UploadFailure:
            raise
        except Exception as error:
            logger.error(f"{self.prefix} Session failed: {error}")
            if not history.is_terminal:
                history.push(BotStatus.FAILED)
            await self._report_status()
            await self._report_failure(error)
            raise
        finally:
            await self._close_surface()

    async def join_meeting(self, params: JoinParams, uploader: RecordingUploader) -> None:
        raise NotImplementedError

    async def request_stop(self) -> bool:
        """Ask a running recording to end early. False if nothing is recording."""
        if self.capture is None:
            logger.info(f"{self.prefix} Stop requested but no recording is running")
            return False
        return await self.capture.end_early()

    async def _push_state(self, status: BotStatus) -> None:
        self.session.status_history.push(status)
        logger.info(f"{self.prefix} Status: {status.value}")
        await self._report_status()

    async def _report_status(self) -> None:
        params = self.params
        if params is None:
            return
        ok = await self.bot_service.patch_bot_status(
            token=params.bearer_token,
            provider=self.provider,
            status=self.session.status_history.to_list(),
            event_id=params.event_id,
            bot_id=params.bot_id,
        )
        if not ok:
            logger.warning(f"{self.prefix} Status update was not acknowledged")

    async def _report_failure(self, error: Exception) -> None:
        params = self.params
        if isinstance(error, AdmissionFailure):
            await handle_admission_failure(
                self.bot_service,
                error,
                provider=self.provider,
                token=params.bearer_token,
                event_id=params.event_id,
                bot_id=params.bot_id,
            )
        elif isinstance(error, UnsupportedSessionFailure):
            await handle_unsupported_session_failure(
                self.bot_service,
                error,
                provider=self.provider,
                token=params.bearer_token,
                event_id=params.event_id,
                bot_id=params.bot_id,
            )

    async def _close_surface(self) -> None:
        if self.surface is not None:
            logger.info(f"{self.prefix} Closing the browser...")
            await self.surface.close()

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def build_probe(self) -> PageSessionProbe:
        return PageSessionProbe(
            self.surface,
            participant_count_js=self.participant_count_js,
            page_state_js=self.page_state_js,
            dismiss_modals_js=self.dismiss_modals_js,
        )

    async def record_meeting_page(self, uploader: RecordingUploader) -> None:
        """Record until a watchdog, the duration limit or a stop request ends it."""
        secret = self.session.session_secret
        cfg = self.settings
        max_duration = cfg.max_recording_duration_minutes * 60

        self.bridge = ChunkBridge(secret, uploader)
        await self.bridge.attach(self.surface)

        probe = self.build_probe()
        started = await probe.start_recorder(
            secret,
            cfg.chunk_interval_ms,
            cfg.primary_mime_type,
            cfg.secondary_mime_type,
        )
        if not started.get("started"):
            await self._capture_failure("start-recording", f"Media capture did not start: {started.get('error')}")
        logger.info(f"{self.prefix} Recording started ({started.get('mimeType')}, audio: {started.get('hasAudio')})")

        self.capture = CaptureSession(
            probe,
            secret,
            self.bridge.signal_session_end,
            max_duration=max_duration,
            inactivity_limit=cfg.inactivity_limit_minutes * 60,
            activation_delay=cfg.activate_inactivity_detection_after_minutes * 60,
            expected_domain=self.expected_domain,
            removal_phrases=self.removal_phrases,
            timings=self.watchdog_timings,
        )
        self.capture.start()

        reason = EARLY_END
        try:
            if not await self.bridge.wait_for_end(max_duration + cfg.capture_grace_seconds):
                reason = MAX_DURATION
        finally:
            # Also runs on cancellation; a no-op when a watchdog already tore the recording down
            await self.capture.stop(reason)
            await self.capture.wait_closed()
        logger.info(
            f"{self.prefix} Recording ended ({self.capture.reason}), "
            f"{self.bridge.accepted_chunks} chunks, {uploader.bytes_written} bytes"
        )

    async def _capture_failure(self, step: str, message: str) -> None:
        """Dispatch a screenshot of the failed step, then raise CaptureFailure."""
        await self._dispatch_screenshot(step)
        raise CaptureFailure(message, details={"step": step})

    async def _dispatch_screenshot(self, step: str) -> None:
        if self.surface is None or self.params is None:
            return
        try:
            image = await self.surface.screenshot()
        except Exception as e:
            logger.warning(f"{self.prefix} Could not take screenshot for {step}: {e}")
            return
        await self.bug_service.upload_debug_image(
            image,
            f"{self.provider.value}-{step}",
            self.params.user_id,
            self.params.bot_id,
        )
