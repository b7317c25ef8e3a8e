"""
Shared fakes: a scripted page surface, a watchdog probe, and a status API
that records what it was told.
"""

import asyncio
import inspect
import os

# Keep test runs from writing rotating log files
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest

from meetbot.models import DismissResult, PageState


class FakeSurface:
    """CapabilitySurface driven by plain attributes."""

    def __init__(self, url="https://telemost.yandex.ru/j/123", body="", visible=(), scripts=None):
        self.url = url
        self.body = body
        self.visible = set(visible)
        self.scripts = dict(scripts or {})
        self.url_errors = 0
        self.navigations = []
        self.clicks = []
        self.fills = []
        self.waits = []
        self.evaluations = []
        self.exposed = {}
        self.screenshots = 0
        self.close_calls = 0

    @property
    def closed(self):
        return self.close_calls > 0

    async def navigate(self, url, wait_until="networkidle"):
        self.navigations.append(url)

    async def locate(self, candidates, timeout=5.0):
        for selector in candidates:
            if selector in self.visible:
                return selector
        return None

    async def click(self, element, timeout=5.0):
        self.clicks.append(element)

    async def fill(self, element, value):
        self.fills.append((element, value))

    def current_url(self):
        if self.url_errors:
            self.url_errors -= 1
            raise RuntimeError("Execution context was destroyed")
        return self.url

    async def evaluate(self, script, arg=None):
        self.evaluations.append(script)
        result = self.scripts.get(script)
        if callable(result):
            result = result(arg)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def body_text(self):
        return self.body

    async def expose_host_function(self, name, handler):
        self.exposed[name] = handler

    async def screenshot(self):
        self.screenshots += 1
        return b"\x89PNG"

    async def wait(self, seconds):
        self.waits.append(seconds)
        await asyncio.sleep(0)

    async def close(self):
        self.close_calls += 1


class FakeProbe:
    """SessionProbe whose readings are consumed from lists, then defaults."""

    def __init__(
        self,
        *,
        has_audio=True,
        levels=(),
        level=50.0,
        counts=(),
        count=3,
        page_states=(),
        page_state=None,
        dismiss_results=(),
    ):
        self.has_audio = has_audio
        self.levels = list(levels)
        self.level = level
        self.counts = list(counts)
        self.count = count
        self.page_states = list(page_states)
        self.default_page_state = page_state or PageState(
            url="https://telemost.yandex.ru/j/123", body_text="", has_meeting_ui=True
        )
        self.dismiss_results = list(dismiss_results)
        self.stop_calls = 0

    @staticmethod
    def _next(queue, default):
        value = queue.pop(0) if queue else default
        if isinstance(value, Exception):
            raise value
        return value

    async def has_audio_track(self):
        return self.has_audio

    async def audio_level(self):
        return self._next(self.levels, self.level)

    async def participant_count(self):
        return self._next(self.counts, self.count)

    async def page_state(self):
        return self._next(self.page_states, self.default_page_state)

    async def dismiss_modals(self):
        return self._next(self.dismiss_results, DismissResult())

    async def stop_recording(self):
        self.stop_calls += 1


class RecordingBotService:
    """Status API stand-in keeping every call in order."""

    def __init__(self, fail_logs=False):
        self.events = []
        self.fail_logs = fail_logs

    @property
    def statuses(self):
        return [payload["status"] for kind, payload in self.events if kind == "status"]

    @property
    def logs(self):
        return [payload for kind, payload in self.events if kind == "log"]

    async def patch_bot_status(self, *, token, provider, status, event_id=None, bot_id=None):
        self.events.append(("status", {"status": list(status), "provider": provider.value, "token": token}))
        return True

    async def add_bot_log(self, *, token, provider, level, message, category, sub_category, event_id=None, bot_id=None):
        if self.fail_logs:
            raise RuntimeError("backend exploded")
        self.events.append((
            "log",
            {"level": level, "message": message, "category": category, "sub_category": sub_category},
        ))
        return True


class RecordingBugService:
    def __init__(self):
        self.images = []

    async def upload_debug_image(self, buffer, file_name, user_id, bot_id=None, skip_timestamp=False):
        self.images.append((file_name, user_id, bot_id))
        return None


class FakeUploader:
    def __init__(self, result="s3://bucket/recordings/rec.webm"):
        self.result = result
        self.recording_id = "rec-1"
        self.bytes_written = 0
        self.chunks = []

    async def save_data_to_temp_file(self, buffer):
        self.chunks.append(buffer)
        self.bytes_written += len(buffer)

    async def upload_recording_to_remote_storage(self):
        return self.result


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def bot_service():
    return RecordingBotService()


@pytest.fixture
def bug_service():
    return RecordingBugService()
