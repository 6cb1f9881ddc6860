"""
Paygate Configuration Module

Loads environment variables for the transaction gateway. Settings are read
once at startup and handed to the application context; request handlers
never consult the environment directly.
"""
from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings

PACKAGE_DIR = Path(__file__).parent


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Security Notes:
    - api_key is the shared secret merchants present as a bearer credential
      on POST /transaction
    - webhook_verify_tls controls certificate validation on the outbound
      merchant notification; disable it only for local merchant stubs with
      self-signed certificates
    """

    # Creation endpoint shared secret
    api_key: str = "api_key_demo_only_change_me"

    # Store
    database_url: str = "sqlite+aiosqlite:///./paygate.db"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Public URL prefix for transaction pages; derived from the request when unset
    public_base_url: Optional[str] = None

    # Outbound webhook
    webhook_timeout_seconds: float = 10.0
    webhook_verify_tls: bool = True

    # Presentation assets
    template_dir: str = str(PACKAGE_DIR / "templates")
    static_dir: str = str(PACKAGE_DIR / "static")

    class Config:
        env_file = ".env"
        case_sensitive = False
