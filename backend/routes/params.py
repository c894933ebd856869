"""
Transaction parameters endpoint.
"""
import logging

from fastapi import APIRouter

from domain.errors import NetworkError
from domain.responses import success_response
from services import account_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["params"])


@router.get("/params")
async def get_transaction_params():
    """
    Fetch suggested transaction parameters from Algorand TestNet.
    Results are cached for 60 seconds.
    """
    try:
        params = await account_service.get_suggested_params()
    except NetworkError:
        raise
    except Exception as e:
        logger.error(f"Error fetching transaction parameters: {e}")
        raise NetworkError("Unable to fetch transaction parameters")
    return success_response(params)
