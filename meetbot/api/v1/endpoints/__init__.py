"""
API v1 endpoints module.
"""

from . import health, telemost

__all__ = ["health", "telemost"]
