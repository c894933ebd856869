"""
Transaction store — persistence for broadcast payments and their status.

All functions take an AsyncSession and commit their own writes. Creates are
not idempotent (DuplicateKeyError on an existing tx_id); callers tolerate it.
Status updates are monotone: once a record is confirmed or failed it is
never rewritten to a different status.
"""
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import Transaction
from domain.enums import TransactionStatus
from exceptions import DuplicateKeyError, StorageError

logger = logging.getLogger(__name__)


async def create_record(db: AsyncSession, payment) -> Transaction:
    """
    Insert a freshly broadcast payment as pending.

    Args:
        payment: SubmittedPayment from payment_service.send_payment()

    Raises:
        DuplicateKeyError if the tx_id is already stored
        StorageError on any other database failure
    """
    record = Transaction(
        tx_id=payment.tx_id,
        sender=payment.sender,
        receiver=payment.receiver,
        amount=payment.amount,
        note=payment.note,
        status=TransactionStatus.PENDING.value,
    )
    db.add(record)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateKeyError(payment.tx_id)
    except SQLAlchemyError as e:
        await db.rollback()
        raise StorageError(f"Failed to save transaction {payment.tx_id}: {e}") from e
    logger.info(f"Transaction recorded as pending: {payment.tx_id}")
    return record


async def get_record(db: AsyncSession, tx_id: str) -> Transaction | None:
    try:
        result = await db.execute(select(Transaction).where(Transaction.tx_id == tx_id))
    except SQLAlchemyError as e:
        raise StorageError(f"Failed to read transaction {tx_id}: {e}") from e
    return result.scalar_one_or_none()


async def update_status(
    db: AsyncSession,
    tx_id: str,
    status: TransactionStatus,
    confirmed_round: int | None = None,
    reason: str | None = None,
) -> bool:
    """
    Apply a reconciled status to a stored record.

    Returns:
        True if the record changed, False if it is missing, unchanged, or
        already terminal with a different status.
    """
    status = TransactionStatus(status)
    try:
        record = await get_record(db, tx_id)
        if record is None:
            return False

        current = TransactionStatus(record.status)
        if current == status:
            return False
        if current.is_terminal:
            logger.warning(
                f"Ignoring status change for {tx_id}: {current.value} → {status.value} "
                f"(terminal status is final)"
            )
            return False

        record.status = status.value
        if status is TransactionStatus.CONFIRMED:
            record.confirmed_round = confirmed_round
        elif status is TransactionStatus.FAILED:
            record.pool_error = reason
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise StorageError(f"Failed to update transaction {tx_id}: {e}") from e

    logger.info(f"Transaction {tx_id} status: {current.value} → {status.value}")
    return True


async def list_records(
    db: AsyncSession,
    status: TransactionStatus | None = None,
    limit: int = 50,
    skip: int = 0,
) -> tuple[list[Transaction], int]:
    """Page through records, newest first. Returns (records, total matching)."""
    query = select(Transaction)
    count_query = select(func.count()).select_from(Transaction)
    if status is not None:
        query = query.where(Transaction.status == TransactionStatus(status).value)
        count_query = count_query.where(Transaction.status == TransactionStatus(status).value)

    query = (
        query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .offset(skip)
        .limit(limit)
    )
    records = list((await db.execute(query)).scalars().all())
    total = (await db.execute(count_query)).scalar_one()
    return records, total


async def count_by_status(db: AsyncSession) -> dict[str, int]:
    """Count records per status; every status is present (0 if none)."""
    result = await db.execute(
        select(Transaction.status, func.count()).group_by(Transaction.status)
    )
    counts = {s.value: 0 for s in TransactionStatus}
    for status, count in result.all():
        counts[status] = count
    return counts


async def sum_confirmed_amount(db: AsyncSession) -> float:
    result = await db.execute(
        select(func.coalesce(func.sum(Transaction.amount), 0.0)).where(
            Transaction.status == TransactionStatus.CONFIRMED.value
        )
    )
    return float(result.scalar_one())
