"""
Transaction history endpoint, with a bounded refresh of pending records.
"""
import asyncio
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from domain.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from domain.enums import TransactionStatus
from domain.responses import success_response
from exceptions import StorageError
from services import reconciler, transaction_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["transactions"])


async def refresh_pending(db: AsyncSession, records: list) -> int:
    """
    Reconcile up to LIST_REFRESH_LIMIT pending records concurrently and store
    any terminal results. Bounded by one overall deadline; errors leave the
    record as it was.

    Returns:
        Number of records whose status changed.
    """
    pending = [r for r in records if r.status == TransactionStatus.PENDING.value]
    pending = pending[: settings.list_refresh_limit]
    if not pending:
        return 0

    # indexer + node lookups per record, run in parallel
    deadline = settings.algorand_request_timeout_seconds * 2 + 1
    try:
        results = await asyncio.wait_for(
            asyncio.gather(
                *(reconciler.reconcile(r.tx_id) for r in pending),
                return_exceptions=True,
            ),
            timeout=deadline,
        )
    except asyncio.TimeoutError:
        logger.warning(f"Pending refresh timed out after {deadline}s; returning stored statuses")
        return 0

    changed = 0
    for record, result in zip(pending, results):
        if isinstance(result, Exception):
            logger.warning(f"Refresh of {record.tx_id} failed: {result}")
            continue
        if not result.is_terminal:
            continue
        try:
            if await transaction_store.update_status(
                db,
                record.tx_id,
                result.status,
                confirmed_round=result.confirmed_round,
                reason=result.reason,
            ):
                changed += 1
        except StorageError as e:
            logger.error(f"Failed to store refreshed status for {record.tx_id}: {e}")
    return changed


@router.get("/transactions")
async def list_transactions(
    status: TransactionStatus | None = Query(None),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    skip: int = Query(0, ge=0),
    refresh: bool | None = Query(None, description="Reconcile pending records on this page"),
    db: AsyncSession = Depends(get_db),
):
    """
    List stored transactions, newest first.

    The page and `total` are read before the pending refresh, so under
    ?status=pending a refreshed row is returned with its new status and
    still counted. A confirmed/failed filter skips the refresh entirely.
    """
    records, total = await transaction_store.list_records(db, status=status, limit=limit, skip=skip)

    wants_refresh = settings.list_refresh_pending if refresh is None else refresh
    if status is not None and status.is_terminal:
        wants_refresh = False

    if wants_refresh:
        changed = await refresh_pending(db, records)
        if changed:
            logger.info(f"Refreshed {changed} pending transaction(s) during list")

    return success_response({
        "transactions": [r.to_dict() for r in records],
        "total": total,
        "limit": limit,
        "skip": skip,
    })
