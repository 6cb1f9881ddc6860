"""
SQLAlchemy ORM Models for Paygate

A transaction row is written once at creation and removed once at
completion. There is no update path.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, DateTime, CheckConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransactionModel(Base):
    """
    ORM model for transactions table.

    Mirrors the persisted record shape:
    {id, amount, webhook_url, webhook_key, redirect_url, timestamp}.
    """
    __tablename__ = "transactions"

    id = Column(String(32), primary_key=True)
    amount = Column(Float, nullable=False)
    webhook_url = Column(String, nullable=False)
    webhook_key = Column(String, nullable=False)
    redirect_url = Column(String, nullable=False)
    timestamp = Column(DateTime, nullable=False, default=_utcnow, index=True)

    __table_args__ = (
        CheckConstraint("amount > 0", name="amount_positive_check"),
    )
