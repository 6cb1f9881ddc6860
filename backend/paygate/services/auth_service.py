"""
Creation endpoint authorization.

Merchants authenticate POST /transaction with the process-wide shared secret
formatted as a bearer credential.
"""
import hmac
from typing import Optional


class AuthGuard:
    """Checks presented Authorization header values against the shared secret."""

    def __init__(self, api_key: str):
        self._expected = f"Bearer {api_key}"

    def authorize(self, presented_credential: Optional[str]) -> bool:
        """
        Return True only when the header exactly equals "Bearer <api_key>".

        Uses constant-time comparison to prevent timing attacks.
        """
        if presented_credential is None:
            return False
        return hmac.compare_digest(
            presented_credential.encode("utf-8"),
            self._expected.encode("utf-8")
        )
