"""
Transaction status endpoint — on-demand reconciliation.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from domain.errors import ValidationError
from domain.responses import success_response
from exceptions import StorageError
from services import reconciler, transaction_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["transactions"])


@router.get("/status/", include_in_schema=False)
async def get_status_missing_id():
    raise ValidationError("Transaction ID is required")


@router.get("/status/{tx_id}")
async def get_transaction_status(tx_id: str, db: AsyncSession = Depends(get_db)):
    """Classify a transaction now and sync the stored record if it changed."""
    tx_id = tx_id.strip()
    if not tx_id:
        raise ValidationError("Transaction ID is required")

    result = await reconciler.reconcile(tx_id)

    try:
        record = await transaction_store.get_record(db, tx_id)
        if record is not None and record.status != result.status.value:
            changed = await transaction_store.update_status(
                db,
                tx_id,
                result.status,
                confirmed_round=result.confirmed_round,
                reason=result.reason,
            )
            if not changed:
                # stored status is terminal; report what was recorded
                return success_response(_stored_status(record))
    except StorageError as e:
        logger.error(f"Database error while updating {tx_id}: {e}")

    return success_response(result.to_dict())


def _stored_status(record) -> dict:
    data = {"txId": record.tx_id, "status": record.status}
    if record.confirmed_round is not None:
        data["confirmedRound"] = record.confirmed_round
    if record.pool_error:
        data["poolError"] = record.pool_error
    return data
