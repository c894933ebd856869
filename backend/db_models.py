"""
SQLAlchemy ORM models for the AlgoSender backend.

Tables:
    transactions — payments broadcast through POST /send and their lifecycle status
"""
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, BigInteger, String, Float, DateTime, Text, Index

from database import Base
from domain.enums import TransactionStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Transaction(Base):
    """A payment broadcast to TestNet, tracked from pending to confirmed/failed."""
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tx_id = Column(String(64), unique=True, nullable=False, index=True)
    sender = Column(String(58), nullable=False)
    receiver = Column(String(58), nullable=False)
    amount = Column(Float, nullable=False)  # whole ALGO
    note = Column(String(1000), nullable=True)
    status = Column(String(20), nullable=False, default=TransactionStatus.PENDING.value)
    confirmed_round = Column(BigInteger, nullable=True)
    pool_error = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_transactions_status_created", "status", "created_at"),
    )

    def to_dict(self) -> dict:
        """Wire format (camelCase, `from`/`to`)."""
        return {
            "txId": self.tx_id,
            "from": self.sender,
            "to": self.receiver,
            "amount": self.amount,
            "note": self.note,
            "status": self.status,
            "confirmedRound": self.confirmed_round,
            "poolError": self.pool_error,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
