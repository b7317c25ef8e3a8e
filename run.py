"""
Start the recorder bot control API under uvicorn.
"""

import sys

import uvicorn

from meetbot.config import settings


def run():
    base = f"http://{settings.api_host}:{settings.api_port}"
    print("\n" + "=" * 60)
    print(f"{settings.project_name.upper()} v{settings.version}")
    print("=" * 60)
    print(f"🌍 Environment: {settings.environment.value}")
    print(f"🎥 Join:   POST {base}/api/v1/telemost/join")
    print(f"📊 Status: GET  {base}/api/v1/status")
    print(f"📚 Docs:   {base}/api/docs")
    print("=" * 60 + "\n")

    uvicorn.run(
        "meetbot.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    try:
        run()
    except KeyboardInterrupt:
        print("\n👋 Stopped")
    except Exception as e:
        print(f"\n❌ Fatal error: {e}")
        sys.exit(1)
