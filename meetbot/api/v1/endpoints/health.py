"""
Health check and status endpoints.
"""

from datetime import datetime
from fastapi import APIRouter, Depends
from typing import Dict, Any

from meetbot.api.v1.schemas.join import BotStatusResponse, HealthCheckResponse
from meetbot.config import settings
from meetbot.core.dependencies import JobStore, get_job_store

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse, tags=["Health"])
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        Health status with timestamp and version
    """
    return {
        "status": "ok",
        "timestamp": datetime.now(),
        "version": settings.version,
    }


@router.get("/status", response_model=BotStatusResponse, tags=["Status"])
async def get_bot_status(jobs: JobStore = Depends(get_job_store)) -> Dict[str, Any]:
    """
    Get the current bot job, including its status history.
    """
    return jobs.status()
