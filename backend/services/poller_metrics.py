"""
Confirmation poller metrics.

Simple in-memory counters; can be replaced with Prometheus later.
"""
import logging
import time
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class PollerMetrics:
    """In-memory metrics for the confirmation poller."""

    polls_started: int = 0
    polls_confirmed: int = 0
    polls_failed: int = 0
    polls_timed_out: int = 0
    reconcile_errors: int = 0
    storage_errors: int = 0
    polls_cancelled: int = 0
    last_activity: float = field(default_factory=time.monotonic)

    def record_started(self) -> None:
        self.polls_started += 1
        self.touch()

    def record_finished(self, outcome: str) -> None:
        if outcome == "confirmed":
            self.polls_confirmed += 1
        elif outcome == "failed":
            self.polls_failed += 1
        else:
            self.polls_timed_out += 1
        self.touch()

    def record_cancelled(self) -> None:
        self.polls_cancelled += 1
        self.touch()

    def record_reconcile_error(self) -> None:
        self.reconcile_errors += 1

    def record_storage_error(self) -> None:
        self.storage_errors += 1

    def touch(self) -> None:
        self.last_activity = time.monotonic()

    def to_dict(self) -> dict:
        return {
            "polls_started": self.polls_started,
            "polls_confirmed": self.polls_confirmed,
            "polls_failed": self.polls_failed,
            "polls_timed_out": self.polls_timed_out,
            "reconcile_errors": self.reconcile_errors,
            "storage_errors": self.storage_errors,
            "polls_cancelled": self.polls_cancelled,
            "idle_seconds": round(time.monotonic() - self.last_activity, 1),
        }


# Singleton metrics instance
_metrics: PollerMetrics | None = None


def get_poller_metrics() -> PollerMetrics:
    global _metrics
    if _metrics is None:
        _metrics = PollerMetrics()
    return _metrics
