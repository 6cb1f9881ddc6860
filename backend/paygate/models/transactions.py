"""
Pydantic Transaction Models

Transaction is the ephemeral record representing one pending payment
notification cycle. TransactionInput is the merchant's creation request.
"""
import re
from datetime import datetime
from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

# Store-assigned identifiers are uuid4 hex strings
TRANSACTION_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{32}$")

# Sent as an HTTP header value, so printable ASCII only
WEBHOOK_KEY_PATTERN = re.compile(r"[\x20-\x7e]*")


class Transaction(BaseModel):
    """
    Transaction record as persisted in the store.

    No field changes after creation; the only transition is deletion.
    """
    id: str = Field(pattern=TRANSACTION_ID_PATTERN.pattern)
    amount: float = Field(gt=0)
    webhook_url: str
    webhook_key: str
    redirect_url: str
    timestamp: datetime

    model_config = {
        "frozen": True,
        "extra": "forbid",
        "json_schema_extra": {
            "example": {
                "id": "9f1c2e7a4b8d4c1e9a3f5b6d7e8f9a0b",
                "amount": 4.95,
                "webhook_url": "https://merchant.example/hook",
                "webhook_key": "k",
                "redirect_url": "https://shop.example/done",
                "timestamp": "2026-10-17T14:35:00Z"
            }
        }
    }


class TransactionInput(BaseModel):
    """JSON body accepted by POST /transaction."""
    amount: float = Field(gt=0)
    webhook_url: str = Field(min_length=1)
    webhook_key: str
    redirect_url: str = Field(min_length=1)

    model_config = {"extra": "ignore"}

    @field_validator("webhook_url", "redirect_url")
    @classmethod
    def validate_http_url(cls, value: str) -> str:
        """Require an absolute http(s) URL; the value is stored verbatim."""
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("must be an absolute http or https URL")
        return value

    @field_validator("webhook_key")
    @classmethod
    def validate_webhook_key(cls, value: str) -> str:
        if not WEBHOOK_KEY_PATTERN.fullmatch(value):
            raise ValueError("must contain printable ASCII characters only")
        return value


class WebhookPayload(BaseModel):
    """Body of the outbound merchant notification."""
    status: Literal["Success"] = "Success"


def parse_transaction_id(raw_id: str) -> str:
    """
    Parse a path segment into the store's identifier format.

    Raises:
        ValueError: if the value is not 32 hex characters
    """
    if not TRANSACTION_ID_PATTERN.fullmatch(raw_id):
        raise ValueError(f"Malformed transaction identifier: {raw_id!r}")
    return raw_id.lower()
