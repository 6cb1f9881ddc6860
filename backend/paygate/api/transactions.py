"""
Transaction API Endpoints

Merchant-facing creation and payer-facing presentation/completion routes.

Routes:
- POST /transaction                 create (bearer API key)
- GET  /transaction/{id}            payment page (HTML)
- GET  /transaction/js/{id}         payment page script
- POST /transaction/{id}            complete and redirect
"""
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from ..logs import log_status
from ..services.transaction_gateway import TransactionGateway

router = APIRouter()


def get_gateway(request: Request) -> TransactionGateway:
    """Dependency returning the gateway built at startup."""
    return request.app.state.gateway


@router.post("/transaction", status_code=201)
async def create_transaction_endpoint(
    request: Request,
    authorization: Optional[str] = Header(None),
    gateway: TransactionGateway = Depends(get_gateway)
) -> JSONResponse:
    """
    Create a transaction.

    Headers:
        Authorization: Bearer <API key>

    Body:
        {"amount": 4.95, "webhook_url": str, "webhook_key": str, "redirect_url": str}

    Returns:
        201 {"url": str} pointing at the new transaction's payment page

    The body is read only after the credential is accepted.
    """
    body = await request.body()
    created = await gateway.create(body, authorization, str(request.base_url))

    log_status(request, 201, "Transaction Initialized")
    return JSONResponse(status_code=201, content={"url": created.url})


@router.get("/transaction/js/{transaction_id}")
async def get_transaction_js_endpoint(
    transaction_id: str,
    request: Request,
    gateway: TransactionGateway = Depends(get_gateway)
) -> Response:
    """Serve the payment page script for a live transaction."""
    script = await gateway.present_js(transaction_id)

    log_status(request, 200, "Served Javascript template")
    return Response(content=script, media_type="application/javascript")


@router.get("/transaction/{transaction_id}", response_class=HTMLResponse)
async def get_transaction_html_endpoint(
    transaction_id: str,
    request: Request,
    gateway: TransactionGateway = Depends(get_gateway)
) -> HTMLResponse:
    """Serve the payment page for a live transaction."""
    page = await gateway.present_html(transaction_id)

    log_status(request, 200, "Served HTML template")
    return HTMLResponse(content=page)


@router.post("/transaction/{transaction_id}", status_code=303)
async def complete_transaction_endpoint(
    transaction_id: str,
    request: Request,
    gateway: TransactionGateway = Depends(get_gateway)
) -> JSONResponse:
    """
    Complete a transaction and redirect the payer.

    Returns:
        303 {"url": redirect_url} whenever the transaction was found, whatever
        happened to the merchant webhook. No Location header is sent: the page
        script reads the body and navigates.
    """
    result = await gateway.complete(transaction_id)

    if result.outcome.ok:
        message = "Transaction Completed"
    else:
        message = f"Transaction Completed (webhook {result.outcome.status.value})"
    log_status(request, 303, message)

    return JSONResponse(status_code=303, content={"url": result.redirect_url})
