"""
Tests for the merchant webhook dispatcher.
"""
import json
import logging
from datetime import datetime, timezone

import httpx
import pytest

from paygate.models.transactions import Transaction
from paygate.services.webhook_service import DispatchStatus, WebhookDispatcher


def make_transaction(
    webhook_url: str = "https://merchant.example/hook",
    webhook_key: str = "k"
) -> Transaction:
    return Transaction(
        id="9f1c2e7a4b8d4c1e9a3f5b6d7e8f9a0b",
        amount=4.95,
        webhook_url=webhook_url,
        webhook_key=webhook_key,
        redirect_url="https://shop.example/done",
        timestamp=datetime.now(timezone.utc),
    )


class TestWebhookDispatcher:

    @pytest.mark.asyncio
    async def test_posts_status_payload_with_bearer_key(self, merchant) -> None:
        dispatcher = WebhookDispatcher(transport=httpx.MockTransport(merchant.handler))

        outcome = await dispatcher.notify(make_transaction())
        await dispatcher.aclose()

        assert outcome.status is DispatchStatus.DELIVERED
        assert outcome.status_code == 200
        assert len(merchant.requests) == 1

        request = merchant.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://merchant.example/hook"
        assert request.headers["Authorization"] == "Bearer k"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"status": "Success"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [200, 201, 202, 204, 299])
    async def test_success_range_is_delivered(self, merchant, status_code: int) -> None:
        merchant.status_code = status_code
        dispatcher = WebhookDispatcher(transport=httpx.MockTransport(merchant.handler))

        outcome = await dispatcher.notify(make_transaction())
        await dispatcher.aclose()

        assert outcome.ok
        assert outcome.status_code == status_code

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [302, 400, 401, 404, 500, 503])
    async def test_other_status_is_rejected_by_peer(self, merchant, status_code: int) -> None:
        merchant.status_code = status_code
        dispatcher = WebhookDispatcher(transport=httpx.MockTransport(merchant.handler))

        outcome = await dispatcher.notify(make_transaction())
        await dispatcher.aclose()

        assert outcome.status is DispatchStatus.REJECTED_BY_PEER
        assert outcome.status_code == status_code
        assert len(merchant.requests) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        httpx.ConnectError("connection refused"),
        httpx.ConnectTimeout("timed out"),
        httpx.ReadTimeout("timed out"),
    ])
    async def test_transport_failure_is_unreachable(self, merchant, error) -> None:
        merchant.error = error
        dispatcher = WebhookDispatcher(transport=httpx.MockTransport(merchant.handler))

        outcome = await dispatcher.notify(make_transaction())
        await dispatcher.aclose()

        assert outcome.status is DispatchStatus.UNREACHABLE
        assert outcome.status_code is None
        assert outcome.error
        # single attempt, no retries
        assert len(merchant.requests) == 1

    @pytest.mark.asyncio
    async def test_url_without_scheme_is_unreachable(self) -> None:
        dispatcher = WebhookDispatcher(timeout_seconds=1.0)

        outcome = await dispatcher.notify(make_transaction(webhook_url="url"))
        await dispatcher.aclose()

        assert outcome.status is DispatchStatus.UNREACHABLE

    @pytest.mark.asyncio
    @pytest.mark.parametrize("webhook_key", ["clé-secrète", "key\u00a0with-nbsp", "日本"])
    async def test_unencodable_key_is_unreachable_without_sending(self, merchant, webhook_key: str) -> None:
        dispatcher = WebhookDispatcher(transport=httpx.MockTransport(merchant.handler))

        outcome = await dispatcher.notify(make_transaction(webhook_key=webhook_key))
        await dispatcher.aclose()

        assert outcome.status is DispatchStatus.UNREACHABLE
        assert "UnicodeEncodeError" in outcome.error
        assert merchant.requests == []

    @pytest.mark.asyncio
    async def test_disabling_tls_verification_is_logged(self, caplog) -> None:
        caplog.set_level(logging.WARNING, logger="paygate.services.webhook_service")

        dispatcher = WebhookDispatcher(verify_tls=False)
        await dispatcher.aclose()

        assert "verification is DISABLED" in caplog.text
