"""
The capability surface: everything a meeting session is allowed to do with
the browser page.

Sessions and admission logic only talk to a ``CapabilitySurface``, so the
state machine and the admission race can be driven by a fake page in tests.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, Protocol, Sequence

from playwright.async_api import Browser, Locator, Page, Playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from meetbot.core.logging import get_logger

logger = get_logger("surface")

BODY_TEXT_JS = "() => (document.body ? document.body.innerText : '')"


class CapabilitySurface(Protocol):
    """Operations a provider handler may perform on the meeting page."""

    async def navigate(self, url: str, wait_until: str = "networkidle") -> None: ...

    async def locate(self, candidates: Sequence[str], timeout: float = 5.0) -> Optional[Any]: ...

    async def click(self, element: Any, timeout: float = 5.0) -> None: ...

    async def fill(self, element: Any, value: str) -> None: ...

    def current_url(self) -> str: ...

    async def evaluate(self, script: str, arg: Any = None) -> Any: ...

    async def body_text(self) -> str: ...

    async def expose_host_function(self, name: str, handler: Callable[..., Any]) -> None: ...

    async def screenshot(self) -> bytes: ...

    async def wait(self, seconds: float) -> None: ...

    async def close(self) -> None: ...


class PlaywrightSurface:
    """CapabilitySurface over a Playwright page. Owns the browser it runs in."""

    def __init__(self, page: Page, browser: Optional[Browser] = None, playwright: Optional[Playwright] = None):
        self.page = page
        self._browser = browser
        self._playwright = playwright
        self._closed = False
        page.on("console", self._on_console)

    @property
    def is_closed(self) -> bool:
        return self._closed

    @staticmethod
    def _on_console(message) -> None:
        text = f"[browser] {message.text}"
        if message.type == "error":
            logger.error(text)
        elif message.type == "warning":
            logger.warning(text)
        elif message.type == "debug":
            logger.debug(text)
        else:
            logger.info(text)

    async def navigate(self, url: str, wait_until: str = "networkidle") -> None:
        logger.info(f"Navigating to {url}")
        await self.page.goto(url, wait_until=wait_until)

    async def locate(self, candidates: Sequence[str], timeout: float = 5.0) -> Optional[Locator]:
        """Return the first candidate selector that becomes visible, or None."""
        for selector in candidates:
            locator = self.page.locator(selector).first
            try:
                await locator.wait_for(state="visible", timeout=timeout * 1000)
                logger.debug(f"Found element: {selector}")
                return locator
            except PlaywrightTimeoutError:
                continue
            except PlaywrightError as e:
                logger.debug(f"Selector {selector} failed: {e}")
                continue
        return None

    async def click(self, element: Locator, timeout: float = 5.0) -> None:
        await element.click(timeout=timeout * 1000)

    async def fill(self, element: Locator, value: str) -> None:
        await element.fill(value)

    def current_url(self) -> str:
        return self.page.url

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if arg is None:
            return await self.page.evaluate(script)
        return await self.page.evaluate(script, arg)

    async def body_text(self) -> str:
        return await self.page.evaluate(BODY_TEXT_JS) or ""

    async def expose_host_function(self, name: str, handler: Callable[..., Awaitable[Any]]) -> None:
        await self.page.expose_function(name, handler)

    async def screenshot(self) -> bytes:
        return await self.page.screenshot(type="png", full_page=True)

    async def wait(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    async def close(self) -> None:
        """Close the browser and stop Playwright. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        try:
            if self._browser is not None:
                await self._browser.close()
            else:
                await self.page.context.close()
        except PlaywrightError as e:
            logger.warning(f"Error closing browser: {e}")
        finally:
            self._browser = None

        try:
            if self._playwright is not None:
                await self._playwright.stop()
        except PlaywrightError as e:
            logger.warning(f"Error stopping Playwright: {e}")
        finally:
            self._playwright = None
        logger.info("Browser closed")
