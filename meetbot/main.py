"""
Control API of the recorder bot: start, stop and inspect the recording job.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from meetbot.api.v1.router import api_router
from meetbot.config import settings
from meetbot.core.dependencies import get_job_store
from meetbot.core.exceptions import MeetingBotException
from meetbot.core.logging import get_logger

logger = get_logger("api")


async def bot_error_handler(request: Request, exc: MeetingBotException) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=500,
        content={"detail": exc.message, "type": type(exc).__name__, **exc.details},
    )


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        description="Joins a Telemost meeting as a guest, records it and reports the session status",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_exception_handler(MeetingBotException, bot_error_handler)
    application.include_router(api_router, prefix="/api/v1")

    @application.on_event("startup")
    async def announce():
        logger.info(
            f"{settings.project_name} v{settings.version} up "
            f"(environment: {settings.environment.value}, S3 upload: {settings.recording.upload_to_s3})"
        )

    @application.on_event("shutdown")
    async def finish_running_job():
        # A running recording is stopped early so it still gets uploaded
        logger.info("Shutting down, finishing the running job...")
        try:
            await get_job_store().shutdown()
        except Exception as e:
            logger.error(f"Error stopping the running job: {e}")
        logger.info("Shutdown complete")

    @application.get("/", include_in_schema=False)
    async def root():
        return RedirectResponse(url="/api/docs")

    return application


app = create_app()
