import json

import httpx

from meetbot.models import MeetingProvider
from meetbot.services import BotService


def make_service(handler):
    return BotService(
        base_url="http://backend.test",
        service_key="svc-key",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


async def test_status_patch_sends_full_history():
    seen = []

    def handler(request: httpx.Request):
        seen.append(request)
        return httpx.Response(200, json={"success": True})

    ok = await make_service(handler).patch_bot_status(
        token="bearer-1",
        provider=MeetingProvider.TELEMOST,
        status=["processing", "joined"],
        event_id="evt-1",
        bot_id="bot-1",
    )

    assert ok is True
    request, = seen
    assert request.method == "PATCH"
    assert request.url.path == "/meeting/app/bot/status"
    assert request.headers["Authorization"] == "Bearer bearer-1"
    assert request.headers["X-Service-Key"] == "svc-key"
    assert json.loads(request.content) == {
        "eventId": "evt-1",
        "botId": "bot-1",
        "provider": "telemost",
        "status": ["processing", "joined"],
    }


async def test_log_patch_payload():
    seen = []

    def handler(request: httpx.Request):
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"success": True})

    await make_service(handler).add_bot_log(
        token="t",
        provider=MeetingProvider.TELEMOST,
        level="error",
        message="denied",
        category="WaitingAtLobby",
        sub_category="UserDeniedRequest",
    )

    assert seen[0]["subCategory"] == "UserDeniedRequest"
    assert seen[0]["category"] == "WaitingAtLobby"
    assert seen[0]["level"] == "error"


async def test_unsuccessful_response_returns_false():
    service = make_service(lambda request: httpx.Response(200, json={"success": False}))

    assert await service.patch_bot_status(token="t", provider=MeetingProvider.ZOOM, status=["processing"]) is False


async def test_http_error_returns_false():
    service = make_service(lambda request: httpx.Response(500, text="boom"))

    assert await service.patch_bot_status(token="t", provider=MeetingProvider.ZOOM, status=["failed"]) is False


async def test_unreachable_backend_returns_false():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    service = make_service(handler)

    assert await service.patch_bot_status(token="t", provider=MeetingProvider.ZOOM, status=["failed"]) is False
