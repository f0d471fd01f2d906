"""
Health check endpoints for monitoring and connectivity verification.
Following Factor 9: Error Handling and observability.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from .. import __version__
from ..core.config import Settings, get_settings
from ..database.session_store import SessionStore
from .dependencies.chat_deps import get_session_store

logger = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health_check(
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """
    Health check endpoint.

    Reports:
    - Session store connectivity
    - Whether a generative model is configured (without it, every turn
      runs on the deterministic fallbacks)
    """
    logger.info("Health check requested")

    store_status = await store.health_check()
    healthy = bool(store_status.get("connected", False))

    health_response = {
        "status": "ok" if healthy else "degraded",
        "environment": settings.environment,
        "version": __version__,
        "dependencies": {
            "session_store": store_status,
        },
        "configuration": {
            "llm_configured": settings.llm_configured,
            "model": settings.default_llm_model,
        },
    }

    if healthy:
        logger.info("Health check passed", status="healthy")
    else:
        logger.warning("Health check failed", session_store=store_status)

    return health_response
