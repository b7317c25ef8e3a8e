"""
Telemost bot control endpoints.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from meetbot.api.v1.schemas.join import JoinRequest, JoinResponse, StopResponse
from meetbot.core.dependencies import JobStore, get_job_store
from meetbot.core.exceptions import HTTPBadRequest, HTTPConflict
from meetbot.core.logging import get_logger
from meetbot.meeting_handler import TelemostBot
from meetbot.meeting_handler.telemost_scripts import TELEMOST_DOMAIN
from meetbot.models import JoinParams, MeetingProvider
from meetbot.recording import RecordingUploader
from meetbot.services import BugService
from meetbot.storage import S3Service

router = APIRouter()
logger = get_logger("api.telemost")


@router.post("/join", response_model=JoinResponse, status_code=status.HTTP_202_ACCEPTED, tags=["Telemost"])
async def join_telemost(request: JoinRequest, jobs: JobStore = Depends(get_job_store)) -> Dict[str, Any]:
    """
    Send the bot into a Telemost meeting.

    The session runs in the background; poll ``/status`` for its history.
    Returns 409 while another session is running.
    """
    if TELEMOST_DOMAIN not in request.url:
        raise HTTPBadRequest(f"Not a Telemost meeting URL: {request.url}")

    if jobs.busy:
        raise HTTPConflict("Bot is already in a meeting")

    logger.info(f"Join request: {request.url} (user {request.user_id})")
    params = JoinParams(**request.model_dump())

    s3_service = S3Service()
    bot = TelemostBot(bug_service=BugService(s3_service))
    uploader = RecordingUploader(
        provider=MeetingProvider.TELEMOST,
        user_id=params.user_id,
        team_id=params.team_id,
        recording_id=bot.session.correlation_id,
        timezone=params.timezone,
        s3_service=s3_service,
    )
    job = jobs.start(bot, params, uploader)

    return {
        "job_id": job.job_id,
        "correlation_id": bot.session.correlation_id,
        "provider": MeetingProvider.TELEMOST.value,
    }


@router.post("/stop", response_model=StopResponse, tags=["Telemost"])
async def stop_telemost(jobs: JobStore = Depends(get_job_store)) -> Dict[str, Any]:
    """
    End the running recording early. The session still uploads what it has.
    """
    stopped = await jobs.stop()
    logger.info(f"Stop request handled (stopped: {stopped})")
    return {"stopped": stopped}
