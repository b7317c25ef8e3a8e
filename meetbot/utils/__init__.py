"""
Utility functions for the Meeting Bot.
"""

from .recording_name import get_recording_name_prefix, build_recording_name

__all__ = ["get_recording_name_prefix", "build_recording_name"]
