"""
Confirmation poller — drives a submitted payment to a terminal status.

Per transaction:

    Pending ──reconcile every `interval`──▶ Confirmed | Failed   (persisted)
       │
       └── `max_attempts` exhausted ─────▶ TimedOut             (record stays pending)

A reconciliation error is logged and counts as "try again next interval";
only an explicit failed classification ends the loop early. Persistence
errors are logged and never raised, since the broadcast already happened.

Two ways to run it:
    - spawn(tx_id): detached asyncio task (fire-and-forget after POST /send)
    - await poll(tx_id): synchronous wait, bounded by interval × max_attempts

`sleep` is injectable so tests can simulate elapsed time.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from config import settings
from database import session_scope
from domain.enums import PollOutcome
from services import reconciler, transaction_store
from services.poller_metrics import PollerMetrics, get_poller_metrics
from services.reconciler import Reconciliation

logger = logging.getLogger(__name__)

ReconcileFn = Callable[[str], Awaitable[Reconciliation]]
SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class PollResult:
    tx_id: str
    outcome: PollOutcome
    attempts: int
    reconciliation: Optional[Reconciliation] = None

    def to_dict(self) -> dict:
        data = {"txId": self.tx_id, "status": "pending"}
        if self.reconciliation is not None and self.reconciliation.is_terminal:
            data.update(self.reconciliation.to_dict())
        return data


class ConfirmationPoller:
    """Bounded reconcile loop, one independent loop per submitted transaction."""

    def __init__(
        self,
        *,
        interval: float = 2.0,
        max_attempts: int = 5,
        reconcile_fn: ReconcileFn | None = None,
        session_factory=None,
        sleep: SleepFn = asyncio.sleep,
        metrics: PollerMetrics | None = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.interval = interval
        self.max_attempts = max_attempts
        self._reconcile_fn = reconcile_fn
        self._session_factory = session_factory or session_scope
        self._sleep = sleep
        self.metrics = metrics or get_poller_metrics()
        self._tasks: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def _reconcile(self, tx_id: str) -> Reconciliation:
        if self._reconcile_fn is not None:
            return await self._reconcile_fn(tx_id)
        return await reconciler.reconcile(tx_id)

    async def _persist(self, result: Reconciliation) -> None:
        try:
            async with self._session_factory() as db:
                await transaction_store.update_status(
                    db,
                    result.tx_id,
                    result.status,
                    confirmed_round=result.confirmed_round,
                    reason=result.reason,
                )
        except Exception as e:
            self.metrics.record_storage_error()
            logger.error(f"Failed to persist status for {result.tx_id}: {e}")

    async def poll(self, tx_id: str) -> PollResult:
        """Reconcile up to max_attempts times; persist the first terminal result."""
        self.metrics.record_started()
        logger.info(
            f"Polling {tx_id} (every {self.interval}s, up to {self.max_attempts} attempts)"
        )
        try:
            for attempt in range(1, self.max_attempts + 1):
                await self._sleep(self.interval)
                try:
                    result = await self._reconcile(tx_id)
                except Exception as e:
                    self.metrics.record_reconcile_error()
                    logger.warning(f"  Attempt {attempt}/{self.max_attempts} for {tx_id} errored: {e}")
                    continue

                if not result.is_terminal:
                    logger.debug(f"  Attempt {attempt}/{self.max_attempts}: {tx_id} still pending")
                    continue

                await self._persist(result)
                outcome = PollOutcome(result.status.value)
                self.metrics.record_finished(outcome.value)
                logger.info(f"{tx_id} {outcome.value} after {attempt} attempt(s)")
                return PollResult(tx_id=tx_id, outcome=outcome, attempts=attempt, reconciliation=result)
        except asyncio.CancelledError:
            self.metrics.record_cancelled()
            raise

        self.metrics.record_finished(PollOutcome.TIMED_OUT.value)
        logger.info(f"{tx_id} not final after {self.max_attempts} attempts; left pending")
        return PollResult(tx_id=tx_id, outcome=PollOutcome.TIMED_OUT, attempts=self.max_attempts)

    def spawn(self, tx_id: str) -> asyncio.Task:
        """Start poll() as a detached task and return it."""
        task = asyncio.create_task(self.poll(tx_id), name=f"poll:{tx_id}")
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Poll task {task.get_name()} crashed: {exc}", exc_info=exc)

    async def shutdown(self) -> None:
        """Cancel in-flight polls (app shutdown). Records stay pending."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} in-flight poll(s)")


_poller: ConfirmationPoller | None = None


def get_poller() -> ConfirmationPoller:
    """Process-wide poller configured from settings."""
    global _poller
    if _poller is None:
        _poller = ConfirmationPoller(
            interval=settings.poll_interval_seconds,
            max_attempts=settings.poll_max_attempts,
        )
    return _poller


def reset_poller() -> None:
    global _poller
    _poller = None
