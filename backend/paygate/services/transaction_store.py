"""
Transaction Store

Create/Get/Delete over the transactions table. The store assigns
identifiers; callers treat them as opaque hex strings.

Concurrency:
- Each call runs in its own session, so individual operations are atomic
- delete() is conditional (removes the row only if it is still present) and
  reports whether this caller removed it; completion uses that result to
  decide who may dispatch the webhook
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..db.models import TransactionModel
from ..exceptions import StoreError
from ..models.transactions import Transaction, TransactionInput

logger = logging.getLogger(__name__)


class TransactionStore:
    """Persistence adapter for Transaction records."""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def create(self, transaction_input: TransactionInput) -> Transaction:
        """
        Persist a new transaction and return it with its assigned identifier.

        Args:
            transaction_input: Validated creation request

        Returns:
            Created Transaction

        Raises:
            StoreError: if the store is unreachable or rejects the insert
        """
        transaction = Transaction(
            id=uuid.uuid4().hex,
            amount=transaction_input.amount,
            webhook_url=transaction_input.webhook_url,
            webhook_key=transaction_input.webhook_key,
            redirect_url=transaction_input.redirect_url,
            timestamp=datetime.now(timezone.utc),
        )

        db_transaction = TransactionModel(
            id=transaction.id,
            amount=transaction.amount,
            webhook_url=transaction.webhook_url,
            webhook_key=transaction.webhook_key,
            redirect_url=transaction.redirect_url,
            timestamp=transaction.timestamp,
        )

        try:
            async with self._session_factory() as session:
                session.add(db_transaction)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to insert transaction: {e}")
            raise StoreError("Failed to insert transaction") from e

        logger.info(f"Created transaction: {transaction.id}, amount={transaction.amount}")

        return transaction

    async def get(self, transaction_id: str) -> Optional[Transaction]:
        """
        Retrieve a live transaction.

        Returns:
            Transaction or None if it does not exist (or was already completed)

        Raises:
            StoreError: if the lookup itself fails
        """
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(TransactionModel).where(TransactionModel.id == transaction_id)
                )
                db_transaction = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to get transaction {transaction_id}: {e}")
            raise StoreError("Failed to get transaction", {"transaction_id": transaction_id}) from e

        if not db_transaction:
            return None

        return Transaction(
            id=db_transaction.id,
            amount=db_transaction.amount,
            webhook_url=db_transaction.webhook_url,
            webhook_key=db_transaction.webhook_key,
            redirect_url=db_transaction.redirect_url,
            timestamp=db_transaction.timestamp,
        )

    async def delete(self, transaction_id: str) -> bool:
        """
        Remove a transaction if it is still present.

        Returns:
            True if this call removed the row, False if there was nothing to remove

        Raises:
            StoreError: if the delete itself fails
        """
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    delete(TransactionModel).where(TransactionModel.id == transaction_id)
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(
                "Failed to delete transaction", {"transaction_id": transaction_id}
            ) from e

        deleted = result.rowcount > 0
        if deleted:
            logger.debug(f"Deleted transaction {transaction_id}")
        return deleted
