"""
Status reconciler — classifies a transaction from two independent sources.

Indexer first (durable ledger: proof of finality), then the node's pending
pool (authoritative during the short pre-confirmation window). Both lookups
are injectable so the classification can be tested without a network.

No retries here; the confirmation poller owns retry policy.
"""
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from algosdk.error import AlgodHTTPError

from algorand_client import algorand_client
from domain.enums import TransactionStatus
from exceptions import LookupFailedError

logger = logging.getLogger(__name__)

IndexedLookup = Callable[[str], Awaitable[Optional[dict]]]
PendingLookup = Callable[[str], Awaitable[dict]]


@dataclass(frozen=True)
class Reconciliation:
    tx_id: str
    status: TransactionStatus
    confirmed_round: int | None = None
    reason: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def to_dict(self) -> dict:
        data = {"txId": self.tx_id, "status": self.status.value}
        if self.confirmed_round is not None:
            data["confirmedRound"] = self.confirmed_round
        if self.reason:
            data["poolError"] = self.reason
        return data


# ── Default lookups (live TestNet) ──────────────────────────────────


async def lookup_indexed(tx_id: str) -> dict | None:
    return await algorand_client.lookup_indexed_transaction(tx_id)


async def lookup_pending(tx_id: str) -> dict:
    """
    Pending-pool lookup.

    Raises:
        LookupFailedError when algod answers with an error (unknown txId)
        NetworkError when the node is unreachable or times out
    """
    try:
        return await algorand_client.pending_transaction_info(tx_id)
    except AlgodHTTPError as e:
        raise LookupFailedError(str(e) or "Transaction not found")


# ── Classification ──────────────────────────────────────────────────


async def reconcile(
    tx_id: str,
    indexed_lookup: IndexedLookup | None = None,
    pending_lookup: PendingLookup | None = None,
) -> Reconciliation:
    """
    Classify a transaction as confirmed, failed or pending.

    1. Indexed → confirmed (round from the indexer). Indexer errors count as
       "not indexed yet".
    2. Pending pool: confirmed-round > 0 → confirmed; pool-error → failed;
       otherwise pending.
    3. Pool lookup rejected (node does not know the id) → failed with the
       error text as reason.

    NetworkError from the pending lookup propagates: an unreachable node says
    nothing about the transaction.
    """
    indexed_lookup = indexed_lookup or lookup_indexed
    pending_lookup = pending_lookup or lookup_pending

    try:
        indexed = await indexed_lookup(tx_id)
    except Exception as e:
        logger.debug(f"Indexer lookup for {tx_id} failed, falling back to node: {e}")
        indexed = None

    if indexed:
        return Reconciliation(
            tx_id=tx_id,
            status=TransactionStatus.CONFIRMED,
            confirmed_round=indexed.get("confirmed-round"),
        )

    try:
        pending = await pending_lookup(tx_id)
    except LookupFailedError as e:
        return Reconciliation(
            tx_id=tx_id,
            status=TransactionStatus.FAILED,
            reason=str(e) or "Transaction not found",
        )

    confirmed_round = pending.get("confirmed-round") or 0
    if confirmed_round > 0:
        return Reconciliation(tx_id=tx_id, status=TransactionStatus.CONFIRMED, confirmed_round=confirmed_round)

    pool_error = pending.get("pool-error")
    if pool_error:
        return Reconciliation(tx_id=tx_id, status=TransactionStatus.FAILED, reason=pool_error)

    return Reconciliation(tx_id=tx_id, status=TransactionStatus.PENDING)
