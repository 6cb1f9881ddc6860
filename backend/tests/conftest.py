"""
Pytest configuration and fixtures.

Each test gets its own SQLite file and an app whose outbound webhooks are
answered by an in-process merchant stub.
"""
import asyncio
from typing import Any, AsyncGenerator, List, Optional

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from paygate.config import Settings
from paygate.context import GatewayContext
from paygate.main import create_app
from paygate.services.transaction_gateway import TransactionGateway

API_KEY = "test_api_key"


class MerchantStub:
    """
    Merchant webhook endpoint.

    Records requests and answers with status_code, raises error, or hangs
    for delay seconds first.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.error: Optional[Exception] = None
        self.delay: float = 0
        self.received = asyncio.Event()

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.received.set()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json={"received": True})


@pytest.fixture
def merchant() -> MerchantStub:
    return MerchantStub()


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Create test settings."""
    return Settings(
        _env_file=None,
        api_key=API_KEY,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'paygate_test.db'}",
        log_level="DEBUG",
        webhook_timeout_seconds=2.0,
    )


@pytest_asyncio.fixture
async def app(test_settings: Settings, merchant: MerchantStub) -> AsyncGenerator[FastAPI, Any]:
    app = create_app(test_settings, webhook_transport=httpx.MockTransport(merchant.handler))
    await app.state.context.startup()
    yield app
    await app.state.context.shutdown()


@pytest.fixture
def context(app: FastAPI) -> GatewayContext:
    return app.state.context


@pytest.fixture
def gateway(app: FastAPI) -> TransactionGateway:
    return app.state.gateway


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, Any]:
    """Create test HTTP client."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {API_KEY}"}


@pytest.fixture
def sample_transaction_data() -> dict[str, Any]:
    """Sample creation request body."""
    return {
        "amount": 4.95,
        "webhook_url": "https://merchant.example/hook",
        "webhook_key": "k",
        "redirect_url": "https://shop.example/done",
    }
