from .transactions import (
    Transaction,
    TransactionInput,
    WebhookPayload,
    parse_transaction_id,
)

__all__ = [
    "Transaction",
    "TransactionInput",
    "WebhookPayload",
    "parse_transaction_id",
]
