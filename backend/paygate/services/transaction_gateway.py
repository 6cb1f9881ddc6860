"""
Transaction Lifecycle Gateway

Orchestrates the life of a transaction:

    Created -> (Viewed)* -> Completing -> Deleted

- create(): authorize the merchant, validate input, persist, return page URL
- present_html() / present_js(): read-only, repeatable views of a live record
- complete(): single-use; notifies the merchant and always ends in a redirect

Completion rules:
- The record is removed with a conditional delete before the webhook fires.
  Only the caller whose delete removed the row dispatches; concurrent
  duplicates see TransactionNotFoundError.
- If that delete fails, dispatch still proceeds and the delete is retried
  when the completion scope exits, on every exit path. A failed retry is
  only logged.
- The webhook outcome is logged and returned for observability. The redirect
  target is always the transaction's redirect_url (fail-open).
"""
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from pydantic import ValidationError

from ..context import GatewayContext
from ..exceptions import (
    InvalidInputError,
    StoreError,
    TransactionNotFoundError,
    UnauthorizedError,
)
from ..models.transactions import Transaction, TransactionInput, parse_transaction_id
from .webhook_service import DispatchOutcome, DispatchStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreatedTransaction:
    transaction: Transaction
    url: str


@dataclass(frozen=True)
class CompletionResult:
    """
    Outcome of a completion.

    redirect_url does not depend on outcome; outcome exists for logging only.
    """
    redirect_url: str
    outcome: DispatchOutcome


class TransactionGateway:
    """Transaction lifecycle operations over an application context."""

    def __init__(self, context: GatewayContext):
        self._ctx = context

    # ========================================================================
    # Creation
    # ========================================================================

    async def create(
        self,
        body: bytes,
        credential: Optional[str],
        base_url: str
    ) -> CreatedTransaction:
        """
        Create a transaction and return its public page URL.

        Args:
            body: Raw JSON request body
            credential: Authorization header value as presented
            base_url: Request base URL, used when no public_base_url is configured

        Raises:
            UnauthorizedError: credential does not match; nothing is persisted
            InvalidInputError: body is not valid JSON or fails validation
            StoreError: the insert failed
        """
        if not self._ctx.auth_guard.authorize(credential):
            raise UnauthorizedError()

        try:
            transaction_input = TransactionInput.model_validate_json(body)
        except ValidationError as e:
            raise InvalidInputError(
                "Invalid JSON input",
                {"errors": [
                    {"loc": list(error["loc"]), "msg": error["msg"]}
                    for error in e.errors()
                ]}
            ) from e

        transaction = await self._ctx.store.create(transaction_input)

        base = self._ctx.settings.public_base_url or base_url
        url = f"{base.rstrip('/')}/transaction/{transaction.id}"

        return CreatedTransaction(transaction=transaction, url=url)

    # ========================================================================
    # Presentation
    # ========================================================================

    async def present_html(self, raw_id: str) -> str:
        """Render the payment page for a live transaction."""
        transaction = await self._load(raw_id)
        return self._ctx.renderer.render_html(transaction)

    async def present_js(self, raw_id: str) -> str:
        """Render the payment page script for a live transaction."""
        transaction = await self._load(raw_id)
        return self._ctx.renderer.render_js(transaction)

    # ========================================================================
    # Completion
    # ========================================================================

    async def complete(self, raw_id: str) -> CompletionResult:
        """
        Complete a transaction: notify the merchant once, delete, redirect.

        Raises:
            InvalidInputError: malformed identifier (no store access)
            TransactionNotFoundError: no live record, including when a
                concurrent completion removed it first
            StoreError: the initial lookup failed
        """
        transaction = await self._load(raw_id)

        async with self._removal(transaction.id) as claimed:
            if not claimed:
                logger.warning(
                    f"Transaction {transaction.id} was completed by a concurrent request; "
                    "skipping webhook"
                )
                raise TransactionNotFoundError(transaction.id)

            outcome = await self._ctx.dispatcher.notify(transaction)

        self._log_outcome(transaction, outcome)

        return CompletionResult(redirect_url=transaction.redirect_url, outcome=outcome)

    @asynccontextmanager
    async def _removal(self, transaction_id: str) -> AsyncIterator[bool]:
        """
        Claim a transaction for completion by deleting it.

        Yields True if this caller owns the completion. A failed delete still
        yields True and is retried when the scope exits, whatever the exit path.
        """
        retry_on_exit = False
        try:
            claimed = await self._ctx.store.delete(transaction_id)
        except StoreError as e:
            logger.warning(
                f"Failed to delete transaction {transaction_id}, will retry after webhook: {e}"
            )
            claimed = True
            retry_on_exit = True

        try:
            yield claimed
        finally:
            if retry_on_exit:
                await self._discard(transaction_id)

    async def _discard(self, transaction_id: str) -> None:
        try:
            await self._ctx.store.delete(transaction_id)
        except StoreError as e:
            logger.warning(
                f"Failed to delete transaction with ID {transaction_id} "
                f"from the database: {e}"
            )

    def _log_outcome(self, transaction: Transaction, outcome: DispatchOutcome) -> None:
        if outcome.status is DispatchStatus.DELIVERED:
            logger.info(f"Webhook delivered for transaction {transaction.id} ({outcome.status_code})")
        elif outcome.status is DispatchStatus.UNREACHABLE:
            logger.warning(
                f"Could not reach webhook for transaction {transaction.id}: {outcome.error}"
            )
        else:
            logger.warning(
                f"Webhook for transaction {transaction.id} returned error status "
                f"{outcome.status_code}"
            )

    # ========================================================================
    # Helpers
    # ========================================================================

    async def _load(self, raw_id: str) -> Transaction:
        try:
            transaction_id = parse_transaction_id(raw_id)
        except ValueError as e:
            raise InvalidInputError("Incorrect URI", {"transaction_id": raw_id}) from e

        transaction = await self._ctx.store.get(transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)

        return transaction
