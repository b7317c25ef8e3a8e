"""
One-way message channel from the in-session recorder to the host.

The page can only reach the host through the two functions exposed here.
Every call carries the session secret; calls with any other tag are dropped
without an error so a stale page or a foreign script cannot write into, or
end, the active session.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import hmac

from meetbot.core.logging import get_logger
from .uploader import RecordingUploader

logger = get_logger("chunk_bridge")

SUBMIT_CHUNK = "submitChunk"
SIGNAL_SESSION_END = "signalSessionEnd"


class ChunkBridge:
    """Receives secret-tagged chunks and the end-of-session signal."""

    def __init__(self, secret: str, uploader: RecordingUploader):
        self._secret = secret
        self._uploader = uploader
        self._ended = asyncio.Event()
        self.accepted_chunks = 0
        self.dropped_chunks = 0

    def _authentic(self, secret: object) -> bool:
        return isinstance(secret, str) and hmac.compare_digest(secret.encode(), self._secret.encode())

    async def attach(self, surface) -> None:
        """Expose the bridge functions to the page under their wire names."""
        await surface.expose_host_function(SUBMIT_CHUNK, self.submit_chunk)
        await surface.expose_host_function(SIGNAL_SESSION_END, self.signal_session_end)

    async def submit_chunk(self, secret: str, data: str) -> None:
        if not self._authentic(secret):
            self.dropped_chunks += 1
            return
        if self._ended.is_set():
            # The artifact may already be handed to the uploader
            logger.warning("Chunk arrived after the session ended, dropping it")
            self.dropped_chunks += 1
            return

        try:
            buffer = base64.b64decode(data or "")
        except (binascii.Error, ValueError) as e:
            logger.error(f"Could not decode recording chunk: {e}")
            self.dropped_chunks += 1
            return

        if not buffer:
            logger.warning("Received empty chunk, skipping")
            self.dropped_chunks += 1
            return

        await self._uploader.save_data_to_temp_file(buffer)
        self.accepted_chunks += 1

    def signal_session_end(self, secret: str) -> bool:
        """Returns True only for the call that actually ended the session."""
        if not self._authentic(secret):
            return False
        if self._ended.is_set():
            return False
        logger.info("Session end signal received")
        self._ended.set()
        return True

    @property
    def ended(self) -> bool:
        return self._ended.is_set()

    async def wait_for_end(self, timeout: float) -> bool:
        """
        Wait for the end signal.

        Returns:
            True if the session signalled its end, False if the wait ran out
        """
        try:
            await asyncio.wait_for(self._ended.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False
