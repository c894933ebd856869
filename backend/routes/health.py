"""
Health check endpoint.
"""
from datetime import datetime, timezone
import logging

from fastapi import APIRouter, status

from algorand_client import algorand_client
from config import settings
from domain.responses import success_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Liveness. Node connectivity is reported but does not fail the check."""
    last_round = None
    try:
        status_info = await algorand_client.status()
        last_round = status_info.get("last-round")
        connected = True
    except Exception as e:
        logger.warning(f"Health check: Algorand node unavailable: {e}")
        connected = False

    return success_response(
        {
            "status": "healthy",
            "network": settings.algorand_network,
            "algorandConnected": connected,
            "lastRound": last_round,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        message="AlgoSender server is running",
    )
