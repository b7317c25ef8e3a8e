"""
Client for the backend status/log API.

Both calls are best-effort: an unreachable backend or an error response is
logged and reported back as ``False``. Nothing here ever raises into the
session that called it.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from meetbot.config import settings
from meetbot.core.logging import get_logger
from meetbot.models import MeetingProvider

logger = get_logger("bot_service")

STATUS_PATH = "/meeting/app/bot/status"
LOG_PATH = "/meeting/app/bot/log"


class BotService:
    """Reports session status and categorized log events to the backend."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        service_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.backend.url
        self.service_key = service_key if service_key is not None else settings.backend.service_key
        self.timeout = timeout or settings.backend.timeout_seconds
        self._transport = transport

    def _client(self, token: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "X-Service-Key": self.service_key,
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
            transport=self._transport,
        )

    async def patch_bot_status(
        self,
        *,
        token: str,
        provider: MeetingProvider,
        status: List[str],
        event_id: Optional[str] = None,
        bot_id: Optional[str] = None,
    ) -> bool:
        """Send the full status history for a session."""
        payload = {
            "eventId": event_id,
            "botId": bot_id,
            "provider": provider.value,
            "status": status,
        }
        return await self._patch(STATUS_PATH, token, payload, "update the bot status")

    async def add_bot_log(
        self,
        *,
        token: str,
        provider: MeetingProvider,
        level: str,
        message: str,
        category: str,
        sub_category: str,
        event_id: Optional[str] = None,
        bot_id: Optional[str] = None,
    ) -> bool:
        """Record a leveled, categorized event for a session."""
        payload = {
            "eventId": event_id,
            "botId": bot_id,
            "provider": provider.value,
            "level": level,
            "message": message,
            "category": category,
            "subCategory": sub_category,
        }
        return await self._patch(LOG_PATH, token, payload, "add the bot log")

    async def _patch(self, path: str, token: str, payload: Dict[str, Any], action: str) -> bool:
        try:
            async with self._client(token) as client:
                response = await client.patch(path, json=payload)
                response.raise_for_status()
                return bool(response.json().get("success", False))
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            # Backend down is not fatal for the session
            logger.warning(f"Backend unavailable, could not {action}: {e} (request={payload})")
            return False
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Can't {action}: HTTP {e.response.status_code} "
                f"{e.response.text[:500]} (request={payload})"
            )
            return False
        except Exception as e:
            logger.error(f"Can't {action}: {e} (request={payload})")
            return False
