"""
Recording Module

In-page media capture, the chunk bridge back to the host, the watchdog set
that decides when a recording ends, and the uploader for the artifact.
"""

from .uploader import RecordingUploader
from .chunk_bridge import ChunkBridge
from .capture_session import CaptureSession
from .probe import PageSessionProbe, SessionProbe
from .watchdogs import TerminationGuard, WatchdogTimings

__all__ = [
    "RecordingUploader",
    "ChunkBridge",
    "CaptureSession",
    "PageSessionProbe",
    "SessionProbe",
    "TerminationGuard",
    "WatchdogTimings",
]
