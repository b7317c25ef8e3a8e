"""
API request/response schemas for bot jobs.
"""

from typing import Optional, List
from pydantic import BaseModel, Field
from datetime import datetime


class JoinRequest(BaseModel):
    """Request to send the bot into a meeting."""
    url: str = Field(..., description="Meeting URL to join", min_length=10)
    bearer_token: str = Field(..., description="Token forwarded to the status API", min_length=1)
    user_id: str = Field(..., min_length=1)
    team_id: str = Field(..., min_length=1)
    name: Optional[str] = Field(default=None, description="Display name for the bot in the meeting")
    timezone: str = Field(default="UTC", description="Timezone used to name the recording")
    event_id: Optional[str] = None
    bot_id: Optional[str] = None


class JoinResponse(BaseModel):
    """Response for an accepted join request."""
    job_id: str
    correlation_id: str
    provider: str


class StopResponse(BaseModel):
    """Response for a stop request."""
    stopped: bool


class JobStatus(BaseModel):
    """State of the current or last bot job."""
    job_id: str
    running: bool
    provider: str
    correlation_id: str
    status: List[str]
    created_at: datetime
    error: Optional[str] = None


class BotStatusResponse(BaseModel):
    """Bot status response."""
    busy: bool
    job: Optional[JobStatus] = None


class HealthCheckResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    timestamp: datetime
    version: str
