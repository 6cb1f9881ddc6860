"""
Paygate - FastAPI Application

Issues single-use payment transaction pages. A merchant creates a
transaction, the payer completes it on the hosted page, the merchant's
webhook is notified and the payer is redirected back to the merchant.
"""
from contextlib import asynccontextmanager
from typing import Optional
import logging

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.transactions import router as transactions_router
from .config import Settings
from .context import build_context
from .exceptions import GatewayError
from .logs import log_status
from .services.transaction_gateway import TransactionGateway

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "Content-Security-Policy": "default-src 'self'; script-src 'self'",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Feature-Policy": "; ".join(
        f"{feature} 'none'"
        for feature in (
            "accelerometer",
            "ambient-light-sensor",
            "autoplay",
            "camera",
            "document-domain",
            "encrypted-media",
            "execution-while-not-rendered",
            "execution-while-out-of-viewport",
            "fullscreen",
            "geolocation",
            "gyroscope",
            "magnetometer",
            "microphone",
            "midi",
            "picture-in-picture",
            "publickey-credentials-get",
            "screen-wake-lock",
            "sync-xhr",
            "usb",
            "vr",
            "wake-lock",
            "xr-spatial-tracking",
        )
    ),
}


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    - Startup: create store tables
    - Shutdown: close the webhook client and disconnect from the store
    """
    context = app.state.context

    logger.info("Starting Paygate server...")
    try:
        await context.startup()
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise
    logger.info("Server startup complete")

    yield

    logger.info("Shutting down gracefully...")
    await context.shutdown()


def create_app(
    settings: Optional[Settings] = None,
    webhook_transport: Optional[httpx.AsyncBaseTransport] = None
) -> FastAPI:
    """
    Build a FastAPI application around a fresh GatewayContext.

    Args:
        settings: Configuration; loaded from the environment when omitted
        webhook_transport: Optional httpx transport for outbound webhooks
    """
    settings = settings or Settings()
    configure_logging(settings)

    context = build_context(settings, webhook_transport=webhook_transport)

    app = FastAPI(
        title="Paygate API",
        description="Single-use payment transactions with merchant webhook notification",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.context = context
    app.state.gateway = TransactionGateway(context)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers[header] = value
        return response

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        """Render gateway errors as {error_code, message, details} with their status."""
        log_status(request, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            error_code, message = "endpoint_not_found", "Endpoint not found"
        else:
            error_code, message = "http_error", str(exc.detail)

        log_status(request, exc.status_code, message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error_code": error_code, "message": message, "details": {}},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_error_handler(request: Request, exc: Exception):
        """
        Catch-all handler for unexpected errors.

        Logs full exception for debugging but returns generic message to client.
        """
        logger.error(f"Unexpected error: {str(exc)}", exc_info=True)
        log_status(request, 500, "Internal server error")

        return JSONResponse(
            status_code=500,
            content={
                "error_code": "internal_error",
                "message": "An unexpected error occurred",
                "details": {}
            }
        )

    @app.get("/health")
    async def health_check():
        """Liveness probe for load balancers."""
        return {"status": "healthy", "version": "0.1.0"}

    app.mount("/static", StaticFiles(directory=settings.static_dir), name="static")
    app.include_router(transactions_router, tags=["Transactions"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = app.state.context.settings
    logger.info(f"Listening to port {settings.port} for HTTP requests...")
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )
