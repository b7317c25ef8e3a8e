"""
Storage backends for bot artifacts.
"""

from .s3_service import S3Service

__all__ = ["S3Service"]
