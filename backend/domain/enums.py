"""
Domain enums (minimal set used for clarity in services).
"""

from enum import Enum


class TransactionStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not TransactionStatus.PENDING


class PollOutcome(str, Enum):
    CONFIRMED = "confirmed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"  # stored record stays pending
