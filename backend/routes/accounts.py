"""
Account endpoints — balance, address derivation, new keypair.

None of these persist anything; mnemonics only pass through.
"""
import logging

from fastapi import APIRouter, Depends

from config import settings
from domain.responses import success_response
from middleware.rate_limit import rate_limit
from models import DeriveAddressRequest
from services import account_service
from utils.validators import validated_address

logger = logging.getLogger(__name__)

router = APIRouter(tags=["accounts"])


@router.get("/balance/{address}")
async def get_balance(address: str = Depends(validated_address)):
    """Balance in whole ALGO (0 for accounts the node has never seen)."""
    balance = await account_service.get_balance(address)
    return success_response({"address": address, "balance": balance})


@router.post(
    "/derive-address",
    dependencies=[Depends(rate_limit(settings.send_rate_limit, settings.send_rate_window_seconds))],
)
async def derive_address(request: DeriveAddressRequest):
    address = account_service.derive_address(request.mnemonic)
    return success_response({"address": address})


@router.get("/generate-mnemonic")
async def generate_mnemonic():
    """New random account. The caller is responsible for keeping the mnemonic."""
    return success_response(account_service.generate_account())
