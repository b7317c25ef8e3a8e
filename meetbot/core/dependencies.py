"""
Dependency injection for the Meeting Bot API.

The bot records one meeting at a time; ``JobStore`` holds that job and is
handed to the endpoints through ``get_job_store``.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Depends

from meetbot.core.exceptions import HTTPConflict
from meetbot.core.logging import get_logger
from meetbot.models import JoinParams

logger = get_logger("jobs")


@dataclass
class BotJob:
    """One running (or finished) bot session."""
    bot: Any
    params: JoinParams
    job_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    task: Optional[asyncio.Task] = None
    error: Optional[str] = None

    @property
    def running(self) -> bool:
        return self.task is not None and not self.task.done()

    def to_dict(self) -> Dict[str, Any]:
        session = self.bot.session
        return {
            "job_id": self.job_id,
            "running": self.running,
            "provider": session.provider.value,
            "correlation_id": session.correlation_id,
            "status": session.status_history.to_list(),
            "created_at": self.created_at.isoformat(),
            "error": self.error,
        }


class JobStore:
    """Holds the single active bot job."""

    def __init__(self) -> None:
        self._job: Optional[BotJob] = None

    @property
    def current(self) -> Optional[BotJob]:
        return self._job

    @property
    def busy(self) -> bool:
        return self._job is not None and self._job.running

    def start(self, bot, params: JoinParams, uploader) -> BotJob:
        """
        Run ``bot`` in the background.

        Raises:
            HTTPConflict: Another job is still running
        """
        if self.busy:
            raise HTTPConflict(f"Bot is busy with job {self._job.job_id}")

        job = BotJob(bot=bot, params=params)
        job.task = asyncio.create_task(self._run(job, uploader), name=f"bot-job-{job.job_id}")
        self._job = job
        logger.info(f"Started job {job.job_id} for {params.url}")
        return job

    async def _run(self, job: BotJob, uploader) -> None:
        try:
            await job.bot.run(job.params, uploader)
            logger.info(f"Job {job.job_id} finished: {job.bot.session.status_history.to_list()}")
        except Exception as e:
            # Already reported to the status API by the session
            job.error = str(e)
            logger.error(f"Job {job.job_id} failed: {e}")

    async def stop(self) -> bool:
        """Ask the running job to end its recording early."""
        if not self.busy:
            return False
        return await self._job.bot.request_stop()

    def status(self) -> Dict[str, Any]:
        return {
            "busy": self.busy,
            "job": self._job.to_dict() if self._job else None,
        }

    async def shutdown(self) -> None:
        """Stop the running job and wait for it to wind down."""
        if not self.busy:
            return
        logger.info(f"Shutting down job {self._job.job_id}")
        await self._job.bot.request_stop()
        task = self._job.task
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=30)
        except asyncio.TimeoutError:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)


_job_store = JobStore()


def get_job_store() -> JobStore:
    """Dependency injection for the job store."""
    return _job_store


JobStoreDep = Depends(get_job_store)
