"""
API v1 schemas module.
"""

from .join import (
    JoinRequest,
    JoinResponse,
    StopResponse,
    JobStatus,
    BotStatusResponse,
    HealthCheckResponse,
)

__all__ = [
    "JoinRequest",
    "JoinResponse",
    "StopResponse",
    "JobStatus",
    "BotStatusResponse",
    "HealthCheckResponse",
]
