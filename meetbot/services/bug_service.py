"""
Diagnostic screenshot dispatch for failed UI steps.

Never raises: a screenshot is a debugging aid, not part of the session.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from meetbot.config import settings
from meetbot.core.logging import get_logger
from meetbot.storage import S3Service

logger = get_logger("bug_service")


class BugService:
    """Stores debug screenshots on disk (development) or in S3."""

    def __init__(self, s3_service: Optional[S3Service] = None):
        self.s3_service = s3_service

    async def upload_debug_image(
        self,
        buffer: bytes,
        file_name: str,
        user_id: str,
        bot_id: Optional[str] = None,
        skip_timestamp: bool = False,
    ) -> Optional[str]:
        """
        Store one screenshot.

        Returns:
            Where the image went (local path or s3:// URL), None if skipped
        """
        try:
            if not settings.debug_image.enabled:
                logger.info("Debug image upload is disabled via DEBUG_IMAGE_ENABLED")
                return None

            bot = bot_id or "bot"
            suffix = "" if skip_timestamp else f"-{datetime.now(timezone.utc).strftime('%Y%m%dT%H%M%S')}"
            name = f"{file_name}{suffix}.png"

            if settings.is_development:
                target_dir = Path(settings.debug_image.local_dir) / user_id / bot
                target_dir.mkdir(parents=True, exist_ok=True)
                target = target_dir / name
                target.write_bytes(buffer)
                logger.info(f"📸 Debug image saved: {target}")
                return str(target)

            if not self.s3_service or not self.s3_service.is_enabled():
                logger.info("S3 not configured, skipping debug image upload")
                return None

            key = f"{settings.debug_image.folder}/{S3Service.sanitize_key_part(user_id)}/{bot}/{name}"
            result = await asyncio.to_thread(self.s3_service.upload_bytes, buffer, key, "image/png")
            if result:
                logger.info(f"📸 Debug image uploaded: {result}")
            return result
        except Exception as e:
            logger.error(f"Error uploading debug image {file_name} for {user_id}: {e}")
            return None
