"""
S3 storage for recordings and debug screenshots.

Credentials come from the standard ``AWS_*`` environment variables. Without
them the service stays disabled and every upload returns None.
"""
import os
import re
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from meetbot.core.logging import get_logger

logger = get_logger("s3")

MAX_KEY_PART_LENGTH = 100
_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9\-_.]+")


class S3Service:
    """Uploads bot artifacts to one bucket."""

    def __init__(self, bucket_name: str = None, access_key_id: str = None,
                 secret_access_key: str = None, region: str = None):
        self.bucket_name = bucket_name or os.getenv("AWS_S3_BUCKET_NAME")
        self.region = region or os.getenv("AWS_REGION", "us-east-1")
        self.s3_client = self._build_client(
            access_key_id or os.getenv("AWS_ACCESS_KEY_ID"),
            secret_access_key or os.getenv("AWS_SECRET_ACCESS_KEY"),
        )

    def _build_client(self, access_key: Optional[str], secret_key: Optional[str]):
        if not (access_key and secret_key and self.bucket_name):
            logger.warning("AWS credentials or bucket not configured, S3 uploads disabled")
            return None
        try:
            client = boto3.client(
                "s3",
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=self.region,
            )
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Failed to create S3 client: {e}")
            return None
        logger.info(f"S3 uploads go to bucket {self.bucket_name} ({self.region})")
        return client

    @staticmethod
    def sanitize_key_part(value: str) -> str:
        """
        One S3 key segment: runs of anything but ``[a-zA-Z0-9-_.]`` become
        ``_``, edges are stripped and the result is capped at 100 chars.
        """
        sanitized = _UNSAFE_KEY_CHARS.sub("_", value).strip("_")
        return sanitized[:MAX_KEY_PART_LENGTH] or "unknown"

    def is_enabled(self) -> bool:
        return self.s3_client is not None

    def object_url(self, s3_key: str) -> str:
        return f"s3://{self.bucket_name}/{s3_key}"

    def upload_file(self, file_path: str, s3_key: str, content_type: str = "video/webm") -> Optional[str]:
        """
        Upload a recording from disk.

        Returns:
            The ``s3://`` URL, or None when disabled, missing or failed
        """
        if not self.is_enabled():
            logger.warning(f"S3 disabled, not uploading {file_path}")
            return None
        if not os.path.exists(file_path):
            logger.error(f"Recording file not found: {file_path}")
            return None

        size_mb = os.path.getsize(file_path) / (1024 * 1024)
        logger.info(f"Uploading {file_path} ({size_mb:.2f} MB) to {self.object_url(s3_key)}")
        try:
            self.s3_client.upload_file(
                file_path, self.bucket_name, s3_key, ExtraArgs={"ContentType": content_type}
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 upload of {file_path} failed: {e}")
            return None
        except Exception as e:
            # S3Transfer raises its own S3UploadFailedError
            logger.error(f"Unexpected error uploading {file_path}: {e}")
            return None
        return self.object_url(s3_key)

    def upload_bytes(self, data: bytes, s3_key: str, content_type: str = "image/png") -> Optional[str]:
        if not self.is_enabled():
            logger.warning(f"S3 disabled, not uploading {s3_key}")
            return None
        try:
            self.s3_client.put_object(Bucket=self.bucket_name, Key=s3_key, Body=data, ContentType=content_type)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 upload of {s3_key} failed: {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected error uploading {s3_key}: {e}")
            return None
        return self.object_url(s3_key)
