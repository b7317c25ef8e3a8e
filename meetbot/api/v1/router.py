"""
API v1 router aggregation.
"""

from fastapi import APIRouter
from meetbot.api.v1.endpoints import health, telemost

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(telemost.router, prefix="/telemost", tags=["Telemost"])
api_router.include_router(health.router, tags=["Health"])

__all__ = ["api_router"]
