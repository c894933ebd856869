"""
Account helpers — balance lookup, address derivation, keypair generation,
and cached suggested params.
"""
import logging
from datetime import datetime, timezone

from algosdk import account, mnemonic, util
from algosdk.error import AlgodHTTPError

from algorand_client import algorand_client
from domain.constants import PARAMS_CACHE_TTL_SECONDS
from domain.errors import NetworkError
from services.payment_service import private_key_from_mnemonic
from utils.validators import validate_algorand_address

logger = logging.getLogger(__name__)

# Simple cache for transaction parameters
_params_cache = {"data": None, "timestamp": None}


async def get_balance(address: str) -> float:
    """
    Account balance in whole ALGO.

    Accounts the node has never seen (404) have a balance of 0.
    """
    address = validate_algorand_address(address)
    try:
        info = await algorand_client.account_info(address)
    except AlgodHTTPError as e:
        if getattr(e, "code", None) == 404:
            return 0.0
        logger.error(f"Balance lookup failed for {address[:8]}...: {e}")
        raise NetworkError("Failed to fetch balance from the Algorand node")
    return util.microalgos_to_algos(int(info.get("amount", 0)))


def derive_address(secret_phrase: str) -> str:
    """Address for a mnemonic. Raises InvalidCredentialError on a bad phrase."""
    private_key = private_key_from_mnemonic(secret_phrase)
    return account.address_from_private_key(private_key)


def generate_account() -> dict:
    """New random keypair as {mnemonic, address}. Nothing is stored."""
    private_key, address = account.generate_account()
    return {"mnemonic": mnemonic.from_private_key(private_key), "address": address}


async def get_suggested_params() -> dict:
    """Suggested transaction parameters, cached for PARAMS_CACHE_TTL_SECONDS."""
    now = datetime.now(timezone.utc)
    if (
        _params_cache["data"] is not None
        and _params_cache["timestamp"] is not None
        and (now - _params_cache["timestamp"]).total_seconds() < PARAMS_CACHE_TTL_SECONDS
    ):
        logger.debug("Returning cached transaction parameters")
        return _params_cache["data"]

    params = await algorand_client.get_suggested_params()
    data = {
        "fee": getattr(params, "min_fee", None) or params.fee,
        "firstValidRound": params.first,
        "lastValidRound": params.last,
        "genesisId": params.gen,
        "genesisHash": params.gh,
    }
    _params_cache["data"] = data
    _params_cache["timestamp"] = now
    return data


def clear_params_cache() -> None:
    _params_cache["data"] = None
    _params_cache["timestamp"] = None
