"""
Yandex Telemost bot.

Joins as a guest, waits to be admitted and records the meeting tab.
"""

from __future__ import annotations

from meetbot.core.exceptions import AdmissionFailure, UnsupportedSessionFailure
from meetbot.core.logging import get_logger
from meetbot.models import BotStatus, JoinParams, MeetingProvider
from meetbot.recording import RecordingUploader
from meetbot.services.error_reporter import SIGN_IN_PAGE
from .admission import AdmissionRace
from .session import MeetingSession
from .telemost_scripts import (
    DISMISS_MODALS_JS,
    PAGE_STATE_JS,
    PARTICIPANT_COUNT_JS,
    TELEMOST_DENIAL_PHRASES,
    TELEMOST_DOMAIN,
    TELEMOST_LOBBY_URL_PATTERNS,
    TELEMOST_REMOVAL_PHRASES,
    TELEMOST_SIGN_IN_URL_PATTERNS,
    get_selectors_for,
)

logger = get_logger("telemost")

PAGE_SETTLE_SECONDS = 10
POST_JOIN_DIALOG_PASSES = 2


class TelemostBot(MeetingSession):
    """Guest-mode recorder for telemost.yandex.ru meetings."""

    provider = MeetingProvider.TELEMOST
    expected_domain = TELEMOST_DOMAIN
    removal_phrases = TELEMOST_REMOVAL_PHRASES

    participant_count_js = PARTICIPANT_COUNT_JS
    page_state_js = PAGE_STATE_JS
    dismiss_modals_js = DISMISS_MODALS_JS

    async def join_meeting(self, params: JoinParams, uploader: RecordingUploader) -> None:
        logger.info(f"{self.prefix} Launching browser for Telemost... (user {params.user_id})")
        self.surface = await self.surface_factory(params.url, self.session.correlation_id, self.provider)
        await self.surface.wait(1)

        await self.surface.navigate(params.url)
        logger.info(f"{self.prefix} Waiting {PAGE_SETTLE_SECONDS}s for the page to settle...")
        await self.surface.wait(PAGE_SETTLE_SECONDS)

        self._ensure_guest_access()
        await self._accept_cookies()
        await self._join_as_guest()
        await self._enter_name(params.name or self.settings.default_bot_name)
        await self._allow_devices()
        await self._click_join()
        await self._wait_at_lobby()

        await self._push_state(BotStatus.JOINED)
        await self._dismiss_post_join_dialogs()

        logger.info(f"{self.prefix} Starting recording...")
        await self.record_meeting_page(uploader)
        await self._push_state(BotStatus.FINISHED)

    def _ensure_guest_access(self) -> None:
        url = self.surface.current_url()
        if any(pattern in url for pattern in TELEMOST_SIGN_IN_URL_PATTERNS):
            logger.error(f"{self.prefix} Meeting redirected to sign in: {url}")
            raise UnsupportedSessionFailure("Telemost meeting requires sign in", page_status=SIGN_IN_PAGE)

    async def _accept_cookies(self) -> None:
        button = await self.surface.locate(get_selectors_for("cookie_consent"), timeout=5)
        if button is None:
            logger.info("Cookie consent button not found or not needed")
            return
        try:
            await self.surface.click(button)
            logger.info("Accepted cookie consent")
            await self.surface.wait(2)
        except Exception as e:
            logger.info(f"Could not click cookie consent: {e}")

    async def _join_as_guest(self) -> None:
        logger.info('Looking for "Join as guest" button...')
        button = await self.surface.locate(get_selectors_for("guest_join"), timeout=5)
        if button is None:
            logger.info("Guest join button not found, proceeding anyway...")
            return
        try:
            await self.surface.click(button, timeout=5)
            logger.info("✅ Clicked guest join button")
            await self.surface.wait(3)
        except Exception as e:
            logger.info(f"Could not click guest join button: {e}")

    async def _enter_name(self, bot_name: str) -> None:
        logger.info("Waiting for name input field...")
        name_input = await self.surface.locate(get_selectors_for("name_input"), timeout=10)
        if name_input is None:
            logger.error("Could not find name input field with any selector")
            await self._capture_failure("name-input-field", "Could not find name input field on Telemost page")

        try:
            # The field is prefilled with "Гость"
            await self.surface.fill(name_input, "")
            await self.surface.fill(name_input, bot_name)
            await self.surface.wait(1)
        except Exception as e:
            logger.error(f"Error filling name input field: {e}")
            await self._capture_failure("name-input-field-error", f"Could not enter bot name: {e}")
        logger.info(f"✅ Entered bot name: {bot_name}")

    async def _allow_devices(self) -> None:
        logger.info("Handling device permissions...")
        for selector in get_selectors_for("device_permission"):
            button = await self.surface.locate([selector], timeout=3)
            if button is None:
                continue
            try:
                await self.surface.click(button, timeout=3)
                logger.info(f"Clicked permission button: {selector}")
                await self.surface.wait(1)
            except Exception as e:
                logger.debug(f"Permission button {selector} not clickable: {e}")

    async def _click_join(self) -> None:
        logger.info("Looking for join button...")
        button = await self.surface.locate(get_selectors_for("join_button"), timeout=5)
        if button is None:
            logger.error("Could not find any join button variant")
            await self._capture_failure("join-button-click", "Failed to click join button")
        try:
            await self.surface.click(button, timeout=5)
        except Exception as e:
            logger.error(f"Error clicking join button: {e}")
            await self._capture_failure("join-button-click", "Failed to click join button")
        logger.info("✅ Clicked join button")
        await self.surface.wait(2)

    async def _wait_at_lobby(self) -> None:
        race = AdmissionRace(
            self.surface,
            wait_budget=self.settings.join_wait_time_minutes * 60,
            poll_interval=self.settings.lobby_poll_interval_seconds,
            content_selectors=get_selectors_for("meeting_content"),
            denial_phrases=TELEMOST_DENIAL_PHRASES,
            lobby_patterns=TELEMOST_LOBBY_URL_PATTERNS,
        )
        if await race.run():
            logger.info(f"{self.prefix} ✅ Bot is entering meeting after wait room...")
            return

        try:
            body_text = await self.surface.body_text()
        except Exception as e:
            logger.warning(f"Could not read page text after lobby wait: {e}")
            body_text = ""
        logger.error(f"{self.prefix} Could not get past the lobby ({race.reason})")
        # Retrying does not help when nobody admits the bot
        raise AdmissionFailure(
            "Telemost bot could not enter meeting...",
            body_text=body_text,
            retryable=False,
            retry_count=0,
        )

    async def _dismiss_post_join_dialogs(self) -> None:
        logger.info("Handling post-join dialogs...")
        for attempt in range(POST_JOIN_DIALOG_PASSES):
            if attempt:
                await self.surface.wait(3)
            for selector in get_selectors_for("close_dialog"):
                button = await self.surface.locate([selector], timeout=1)
                if button is None:
                    continue
                try:
                    await self.surface.click(button, timeout=2)
                    logger.info(f"Dismissed dialog: {selector}")
                    await self.surface.wait(0.5)
                except Exception as e:
                    logger.debug(f"Dialog button {selector} not clickable: {e}")
