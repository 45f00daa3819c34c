"""
Health check роутер.
"""

import logging
from fastapi import APIRouter

from ..schemas.health_schemas import HealthResponse
from ....core.config import settings

logger = logging.getLogger("supportdesk.api.health")

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.
    
    Пример ответа:
        {
            "status": "healthy",
            "service": "supportdesk",
            "version": "0.1.0"
        }
    """
    logger.debug("Health check called")
    
    return HealthResponse(
        status="healthy",
        service="supportdesk",
        version=settings.version
    )
