"""
Chromium launcher for recording sessions.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List

from playwright.async_api import async_playwright
from playwright.async_api import Error as PlaywrightError

from meetbot.config import settings
from meetbot.core.exceptions import BrowserLaunchError
from meetbot.core.logging import correlation_prefix, get_logger
from meetbot.models import MeetingProvider
from .surface import PlaywrightSurface

logger = get_logger("browser")

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/135.0.0.0 Safari/537.36"
)


def chromium_args(width: int, height: int) -> List[str]:
    """Flags needed for unattended tab capture with audio."""
    return [
        "--enable-usermedia-screen-capturing",
        "--allow-http-screen-capture",
        "--auto-accept-this-tab-capture",
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-web-security",
        "--disable-blink-features=AutomationControlled",
        "--use-gl=angle",
        "--use-angle=swiftshader",
        f"--window-size={width},{height}",
        "--enable-features=MediaRecorder",
        "--enable-audio-service-out-of-process",
        "--autoplay-policy=no-user-gesture-required",
    ]


async def launch_surface(url: str, correlation_id: str, provider: MeetingProvider) -> PlaywrightSurface:
    """
    Start Chromium and open a blank page for one meeting session.

    Raises:
        BrowserLaunchError: Chromium did not come up within the launch timeout
    """
    cfg = settings.browser
    prefix = correlation_prefix(correlation_id)
    logger.info(f"{prefix} Launching browser for {provider.value} ({url})")

    playwright = await async_playwright().start()
    try:
        browser = await asyncio.wait_for(
            playwright.chromium.launch(
                headless=cfg.headless,
                executable_path=cfg.executable_path or None,
                # Playwright mutes audio by default; the recording needs it
                ignore_default_args=["--mute-audio", "--enable-automation"],
                args=chromium_args(cfg.viewport_width, cfg.viewport_height),
            ),
            timeout=cfg.launch_timeout_seconds,
        )
    except (asyncio.TimeoutError, PlaywrightError) as e:
        await playwright.stop()
        raise BrowserLaunchError(
            f"Browser launch failed: {e or 'timeout'}",
            details={"timeout_seconds": cfg.launch_timeout_seconds},
        ) from e

    browser.on("disconnected", lambda _: logger.warning(f"{prefix} Browser disconnected"))

    context_options = {
        "user_agent": USER_AGENT,
        "viewport": {"width": cfg.viewport_width, "height": cfg.viewport_height},
        "permissions": ["camera", "microphone"],
        "ignore_https_errors": True,
    }
    if cfg.record_debug_video and settings.is_development:
        video_dir = Path("logs") / "videos" / correlation_id
        video_dir.mkdir(parents=True, exist_ok=True)
        context_options["record_video_dir"] = str(video_dir)

    try:
        context = await browser.new_context(**context_options)
        await context.add_init_script("Object.defineProperty(navigator, 'webdriver', {get: () => undefined})")
        page = await context.new_page()
    except PlaywrightError as e:
        await browser.close()
        await playwright.stop()
        raise BrowserLaunchError(f"Could not open a browser page: {e}") from e

    page.on("close", lambda _: logger.info(f"{prefix} Page closed"))
    page.on("crash", lambda _: logger.error(f"{prefix} Page crashed"))

    logger.info(f"{prefix} ✅ Browser ready")
    return PlaywrightSurface(page, browser=browser, playwright=playwright)
