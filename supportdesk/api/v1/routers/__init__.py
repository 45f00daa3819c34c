"""
API роутеры v1.
"""

from .health_router import router as health_router
from .records_router import router as records_router
from .notifications_router import router as notifications_router
from .profile_router import router as profile_router
from .curators_router import router as curators_router
from .profile_sync_router import router as profile_sync_router

__all__ = [
    "health_router",
    "records_router",
    "notifications_router",
    "profile_router",
    "curators_router",
    "profile_sync_router",
]
