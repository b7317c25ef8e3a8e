"""
Configuration module for the Meeting Bot.
"""

from .settings import (
    Settings,
    settings,
    Environment,
    BotSettings,
    BrowserSettings,
    BackendSettings,
    RecordingSettings,
    DebugImageSettings,
)

__all__ = [
    "Settings",
    "settings",
    "Environment",
    "BotSettings",
    "BrowserSettings",
    "BackendSettings",
    "RecordingSettings",
    "DebugImageSettings",
]
