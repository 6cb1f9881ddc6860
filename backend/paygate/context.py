"""
Application context.

Everything a request needs (store, auth guard, webhook dispatcher, renderer)
is built once from Settings at startup and carried on app.state.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncEngine

from .config import Settings
from .db.init_db import create_engine, create_session_factory, initialize_database
from .services.auth_service import AuthGuard
from .services.render_service import PresentationRenderer
from .services.transaction_store import TransactionStore
from .services.webhook_service import WebhookDispatcher

logger = logging.getLogger(__name__)


@dataclass
class GatewayContext:
    settings: Settings
    engine: AsyncEngine
    store: TransactionStore
    auth_guard: AuthGuard
    dispatcher: WebhookDispatcher
    renderer: PresentationRenderer

    async def startup(self) -> None:
        await initialize_database(self.engine)

    async def shutdown(self) -> None:
        """Close the webhook client and database pool; report the first failure."""
        errors = []

        try:
            await self.dispatcher.aclose()
        except Exception as e:
            errors.append(f"unable to close webhook client: {e}")

        try:
            await self.engine.dispose()
        except Exception as e:
            errors.append(f"unable to disconnect the database: {e}")

        for error in errors:
            logger.warning(error)


def build_context(
    settings: Settings,
    webhook_transport: Optional[httpx.AsyncBaseTransport] = None
) -> GatewayContext:
    """
    Construct the context for one application instance.

    Args:
        settings: Loaded configuration
        webhook_transport: Optional httpx transport for outbound webhooks
            (tests substitute a mock merchant endpoint here)
    """
    engine = create_engine(settings.database_url)

    return GatewayContext(
        settings=settings,
        engine=engine,
        store=TransactionStore(create_session_factory(engine)),
        auth_guard=AuthGuard(settings.api_key),
        dispatcher=WebhookDispatcher(
            timeout_seconds=settings.webhook_timeout_seconds,
            verify_tls=settings.webhook_verify_tls,
            transport=webhook_transport,
        ),
        renderer=PresentationRenderer(settings.template_dir),
    )
