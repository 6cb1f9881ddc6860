"""
Paygate Exception Hierarchy

Every request-terminating failure maps to exactly one HTTP status and a
stable error code. Webhook outcomes are deliberately absent here: they are
results consumed for logging, never errors surfaced to the payer.
"""
from typing import Optional, Dict, Any


class GatewayError(Exception):
    """
    Base exception for all transaction gateway errors.

    Subclasses fix the error code and HTTP status so the API layer can
    render any of them with a single exception handler.
    """

    status_code: int = 500

    def __init__(
        self,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API error response format."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class UnauthorizedError(GatewayError):
    """
    Creation credential missing or wrong.

    Raised before the request body is read; no record is persisted.
    """

    status_code = 401

    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__("unauthorized", message, details)


class InvalidInputError(GatewayError):
    """
    Request could not be understood.

    Examples:
    - Creation body is not JSON or fails field validation
    - Transaction identifier is not in the store's identifier format
    """

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("invalid_input", message, details)


class TransactionNotFoundError(GatewayError):
    """
    No live transaction exists for the identifier.

    Covers identifiers that never existed and transactions that have
    already been completed (and therefore deleted).
    """

    status_code = 400

    def __init__(self, transaction_id: str):
        super().__init__(
            "transaction_not_found",
            "Failed to get transaction",
            {"transaction_id": transaction_id}
        )


class StoreError(GatewayError):
    """Underlying persistence was unreachable or the operation failed."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("store_error", message, details)


class RenderError(GatewayError):
    """Presentation template could not be rendered."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("render_error", message, details)
