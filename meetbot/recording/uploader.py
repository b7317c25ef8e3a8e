"""
Temporary recording artifact and its hand-off to remote storage.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from meetbot.config import settings
from meetbot.core.logging import get_logger
from meetbot.models import MeetingProvider
from meetbot.storage import S3Service
from meetbot.utils import build_recording_name

logger = get_logger("uploader")


class RecordingUploader:
    """
    Owns one session's temporary artifact.

    Chunks are appended strictly in the order the writes were requested.
    Once capture has ended, ``upload_recording_to_remote_storage`` pushes the
    file to S3 (or keeps it locally when S3 is off) and returns where it went.
    """

    def __init__(
        self,
        *,
        provider: MeetingProvider,
        user_id: str,
        team_id: str,
        recording_id: str,
        timezone: str = "UTC",
        s3_service: Optional[S3Service] = None,
        base_dir: Optional[Path] = None,
        upload_to_s3: Optional[bool] = None,
        delete_after_upload: Optional[bool] = None,
    ):
        self.provider = provider
        self.user_id = user_id
        self.team_id = team_id
        self.recording_id = recording_id
        self.timezone = timezone
        self.s3_service = s3_service
        self.upload_to_s3 = settings.recording.upload_to_s3 if upload_to_s3 is None else upload_to_s3
        self.delete_after_upload = (
            settings.recording.delete_after_s3_upload if delete_after_upload is None else delete_after_upload
        )

        self.recordings_base_dir = Path(base_dir or settings.recording.local_path)
        self.temp_recordings_dir = self.recordings_base_dir / "temp"
        self.temp_recordings_dir.mkdir(parents=True, exist_ok=True)
        self.temp_file_path = self.temp_recordings_dir / f"{recording_id}.webm"

        self._write_lock = asyncio.Lock()
        self.bytes_written = 0
        self.chunks_written = 0

    async def save_data_to_temp_file(self, buffer: bytes) -> None:
        """Append one chunk to the temporary artifact."""
        async with self._write_lock:
            with open(self.temp_file_path, "ab") as f:
                f.write(buffer)
            self.bytes_written += len(buffer)
            self.chunks_written += 1
        logger.debug(
            f"Chunk appended to {self.temp_file_path.name}: {len(buffer)} bytes "
            f"(total chunks: {self.chunks_written})"
        )

    async def upload_recording_to_remote_storage(self) -> Optional[str]:
        """
        Finalize the artifact.

        Returns:
            s3:// URL or local path of the recording, None if there is
            nothing usable to upload or the upload failed.
        """
        async with self._write_lock:
            if not self.temp_file_path.exists() or self.temp_file_path.stat().st_size == 0:
                logger.error(f"No recording data captured for {self.recording_id}")
                return None

            if not self.upload_to_s3 or not self.s3_service or not self.s3_service.is_enabled():
                logger.info(f"S3 upload disabled. Recording kept locally: {self.temp_file_path}")
                return str(self.temp_file_path)

            s3_key = self._build_s3_key()
            result = await asyncio.to_thread(
                self.s3_service.upload_file, str(self.temp_file_path), s3_key, "video/webm"
            )
            if not result:
                logger.error(f"Recording upload failed, file kept at {self.temp_file_path}")
                return None

            logger.info(f"Recording uploaded to {result}")
            if self.delete_after_upload:
                try:
                    self.temp_file_path.unlink()
                except OSError as e:
                    logger.warning(f"Could not delete temp recording {self.temp_file_path}: {e}")
            return result

    def _build_s3_key(self) -> str:
        name = S3Service.sanitize_key_part(build_recording_name(self.provider, self.timezone))
        return "/".join([
            "recordings",
            S3Service.sanitize_key_part(self.team_id),
            S3Service.sanitize_key_part(self.user_id),
            self.recording_id,
            f"{name}.webm",
        ])
