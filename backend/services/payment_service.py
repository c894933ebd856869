"""
Payment service — builds, signs and broadcasts a single ALGO payment.

The mnemonic is a per-call capability: it is turned into a signing key for
the duration of send_payment() and is never logged, stored or returned.
All input validation happens before the first network call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from algosdk import account, mnemonic, transaction, util
from algosdk.error import AlgodHTTPError

from algorand_client import algorand_client
from domain.errors import InvalidCredentialError, NetworkError
from utils.validators import validate_algorand_address, validate_amount, validate_note

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmittedPayment:
    tx_id: str
    sender: str
    receiver: str
    amount: float
    note: str | None = None

    def to_dict(self) -> dict:
        return {
            "txId": self.tx_id,
            "from": self.sender,
            "to": self.receiver,
            "amount": self.amount,
            "note": self.note,
        }


def private_key_from_mnemonic(phrase: str) -> str:
    """Parse a 25-word mnemonic into a private key, or raise InvalidCredentialError."""
    if not phrase or not phrase.strip():
        raise InvalidCredentialError("Mnemonic is required")
    try:
        return mnemonic.to_private_key(" ".join(phrase.split()))
    except Exception:
        # algosdk raises several error types (length, word list, checksum)
        raise InvalidCredentialError()


def classify_error(error_msg: str) -> str:
    """Turn an algod rejection message into a user-friendly one."""
    lower = error_msg.lower()

    if "overspend" in lower or "insufficient" in lower or "below min" in lower:
        return "Insufficient balance for this transaction"
    elif "invalid signature" in lower:
        return "Invalid transaction signature"
    elif "already in ledger" in lower:
        return "Transaction already submitted"
    elif "transaction pool" in lower and "full" in lower:
        return "Network busy — transaction pool full. Try again shortly."
    elif "txn dead" in lower or "round outside" in lower:
        return "Transaction expired before it could be submitted. Try again."
    else:
        return "Transaction was rejected by the Algorand node"


async def send_payment(
    *,
    secret_phrase: str,
    receiver_address: str,
    amount: float,
    note: str | None = None,
) -> SubmittedPayment:
    """
    Sign and broadcast a payment of `amount` ALGO.

    Raises:
        InvalidAddressError, InvalidAmountError, ValidationError (note),
        InvalidCredentialError — all before any network call
        NetworkError if the node rejects the transaction or is unreachable
    """
    receiver_address = validate_algorand_address(receiver_address)
    amount = validate_amount(amount)
    note = validate_note(note)
    private_key = private_key_from_mnemonic(secret_phrase)
    sender_address = account.address_from_private_key(private_key)

    sp = await algorand_client.get_suggested_params()
    txn = transaction.PaymentTxn(
        sender=sender_address,
        sp=sp,
        receiver=receiver_address,
        amt=util.algos_to_microalgos(amount),
        note=note.encode("utf-8") if note else None,
    )
    signed = txn.sign(private_key)

    try:
        tx_id = await algorand_client.send_transaction(signed)
    except AlgodHTTPError as e:
        logger.error(f"Payment rejected by node: {e}")
        raise NetworkError(classify_error(str(e)))

    payment = SubmittedPayment(
        tx_id=tx_id,
        sender=sender_address,
        receiver=receiver_address,
        amount=amount,
        note=note,
    )
    logger.info(f"Payment broadcast: {tx_id} ({amount} ALGO → {receiver_address[:8]}...)")
    return payment
