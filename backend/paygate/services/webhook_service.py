"""
Webhook Dispatcher

Notifies the merchant that a transaction completed. One POST, no retries.

The result is a tagged DispatchOutcome rather than an exception: callers log
it and move on. Completion never branches on it.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx

from ..models.transactions import Transaction, WebhookPayload

logger = logging.getLogger(__name__)


class DispatchStatus(str, Enum):
    DELIVERED = "delivered"
    UNREACHABLE = "unreachable"
    REJECTED_BY_PEER = "rejected_by_peer"


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of a single webhook attempt."""
    status: DispatchStatus
    status_code: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def delivered(cls, status_code: int) -> "DispatchOutcome":
        return cls(DispatchStatus.DELIVERED, status_code=status_code)

    @classmethod
    def unreachable(cls, error: str) -> "DispatchOutcome":
        return cls(DispatchStatus.UNREACHABLE, error=error)

    @classmethod
    def rejected(cls, status_code: int) -> "DispatchOutcome":
        return cls(DispatchStatus.REJECTED_BY_PEER, status_code=status_code)

    @property
    def ok(self) -> bool:
        return self.status is DispatchStatus.DELIVERED


class WebhookDispatcher:
    """
    Sends completion notifications to merchant webhook URLs.

    Holds one httpx.AsyncClient for the life of the process. The client's
    timeout bounds every call, and because the call is awaited inside the
    completion request, cancelling that request aborts the outbound call.
    """

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        verify_tls: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        if not verify_tls:
            logger.warning("Webhook TLS certificate verification is DISABLED")

        self._client = httpx.AsyncClient(
            timeout=timeout_seconds,
            verify=verify_tls,
            transport=transport,
            follow_redirects=False,
        )

    async def notify(self, transaction: Transaction) -> DispatchOutcome:
        """
        POST {"status": "Success"} to the transaction's webhook URL.

        Args:
            transaction: Transaction being completed

        Returns:
            DispatchOutcome: DELIVERED for 2xx, REJECTED_BY_PEER for any other
            status, UNREACHABLE for transport failures (DNS, refused, timeout)
            and for requests that cannot be built (bad URL, header values
            that are not ASCII)
        """
        payload = WebhookPayload()

        try:
            request = self._client.build_request(
                "POST",
                transaction.webhook_url,
                json=payload.model_dump(),
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {transaction.webhook_key}",
                },
            )
        except (httpx.InvalidURL, ValueError) as e:
            logger.debug(f"Could not build webhook request for {transaction.id}: {e!r}")
            return DispatchOutcome.unreachable(f"{type(e).__name__}: {e}")

        try:
            response = await self._client.send(request)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"Webhook transport error for {transaction.id}: {e!r}")
            return DispatchOutcome.unreachable(f"{type(e).__name__}: {e}")

        if 200 <= response.status_code < 300:
            return DispatchOutcome.delivered(response.status_code)

        return DispatchOutcome.rejected(response.status_code)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
