"""
Payment submission endpoint.

The broadcast is irreversible, so once send_payment() returns, nothing after
it (storage, polling) may turn the response into an error.
"""
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from domain.responses import success_response
from exceptions import DuplicateKeyError, StorageError
from middleware.rate_limit import rate_limit
from models import SendTransactionRequest
from services import payment_service, transaction_store
from services.confirmation_poller import get_poller

logger = logging.getLogger(__name__)

router = APIRouter(tags=["transactions"])


@router.post(
    "/send",
    dependencies=[Depends(rate_limit(settings.send_rate_limit, settings.send_rate_window_seconds))],
)
async def send_transaction(
    request: SendTransactionRequest,
    wait_for_confirmation: bool | None = Query(None, alias="waitForConfirmation"),
    db: AsyncSession = Depends(get_db),
):
    """
    Sign and broadcast a payment, record it as pending, and track it.

    By default the confirmation poll runs in the background and the response
    returns immediately. With waitForConfirmation=true the response waits for
    the bounded poll and includes the final status.
    """
    payment = await payment_service.send_payment(
        secret_phrase=request.mnemonic,
        receiver_address=request.recipient_address,
        amount=request.amount,
        note=request.note,
    )

    stored = True
    try:
        await transaction_store.create_record(db, payment)
    except DuplicateKeyError:
        logger.warning(f"Transaction {payment.tx_id} was already recorded")
    except StorageError as e:
        stored = False
        logger.error(f"Failed to save transaction {payment.tx_id}: {e}")

    data = payment.to_dict()
    wait = settings.send_waits_for_confirmation if wait_for_confirmation is None else wait_for_confirmation
    poller = get_poller()

    if not stored:
        if wait:
            data["status"] = "pending"
    elif wait:
        result = await poller.poll(payment.tx_id)
        data.update(result.to_dict())
    else:
        poller.spawn(payment.tx_id)

    return success_response(data, message="Transaction sent successfully")
