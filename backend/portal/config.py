"""Application configuration using pydantic-settings."""

import warnings
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Find .env file: check backend dir first, then project root
_BACKEND_DIR = Path(__file__).parent.parent
_PROJECT_ROOT = _BACKEND_DIR.parent
_ENV_FILE = _BACKEND_DIR / ".env" if (_BACKEND_DIR / ".env").exists() else _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    IMPORTANT: Airtable credentials are never defaulted. When AIRTABLE_API_KEY
    or AIRTABLE_BASE_ID is missing, the proxy answers with CONFIG_ERROR and the
    portal facade falls back to the static fixture dataset.
    """

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Airtable
    airtable_api_key: str | None = None
    airtable_base_id: str | None = None
    airtable_api_url: str = "https://api.airtable.com/v0"
    airtable_max_rate_limit_retries: int = 5
    airtable_timeout_seconds: float | None = None

    # Portal facade
    data_source: Literal["auto", "airtable", "fixtures"] = "auto"
    store_path: Path = Path.home() / ".clinicalrxq" / "store.json"

    # HTTP server
    cors_origins: str = "*"
    host: str = "127.0.0.1"
    port: int = 8787

    # Application
    debug: bool = False
    log_level: str = "INFO"

    @property
    def airtable_configured(self) -> bool:
        """True when both Airtable credentials are present."""
        return bool(self.airtable_api_key and self.airtable_base_id)

    def model_post_init(self, __context) -> None:
        """Warn about unconfigured credentials."""
        if not self.airtable_configured:
            warnings.warn(
                "AIRTABLE_API_KEY / AIRTABLE_BASE_ID not configured! "
                "Proxy endpoints will return CONFIG_ERROR.",
                UserWarning,
                stacklevel=2,
            )


settings = Settings()
