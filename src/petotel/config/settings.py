"""Runtime configuration for the storefront.

Relies on pydantic-settings so that environment variables (prefixed with ``PETOTEL_``)
can override defaults. See `.env.example` for common values.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Captures runtime configuration for the storefront."""

    liteapi_key: Optional[str] = Field(default=None, description="LiteAPI private API key")
    liteapi_public_key: str = Field(
        default="sandbox",
        description="Public key handed to the payment widget",
    )
    api_base_url: str = Field(
        default="https://api.liteapi.travel/v3.0",
        description="Base URL for place, rate and hotel data endpoints",
    )
    book_base_url: str = Field(
        default="https://book.liteapi.travel/v3.0",
        description="Base URL for prebook/book endpoints",
    )
    http_timeout_s: float = Field(default=30.0, description="Per-call HTTP timeout in seconds")
    hotel_detail_timeout_s: int = Field(
        default=4, description="Upstream-side timeout passed to the hotel detail endpoint"
    )

    currency: str = Field(default="USD")
    guest_nationality: str = Field(default="US")
    pets_facility_id: int = Field(default=4, description="Upstream facility id for 'Pets allowed'")
    default_adults: int = Field(default=2)
    max_rates_per_hotel: int = Field(default=1, description="Rate cap used by the listing search")

    session_db_path: Path = Field(default=Path("data/sessions/checkout.sqlite3"))
    session_ttl_s: float = Field(
        default=3600.0, description="Seconds a stored checkout context stays readable"
    )

    public_base_url: str = Field(
        default="http://localhost:8000",
        description="Origin used to build the payment widget return URL",
    )
    business_name: str = Field(default="PetOtel")

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("data/logs"))

    model_config = SettingsConfigDict(
        env_prefix="PETOTEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    @field_validator("session_db_path", "log_dir", mode="before")
    def _expand_path(cls, value: str | Path) -> Path:
        if isinstance(value, Path):
            return value.expanduser()
        return Path(value).expanduser()

    @field_validator("http_timeout_s", "session_ttl_s")
    def _validate_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeouts must be positive")
        return value

    @field_validator("hotel_detail_timeout_s", "default_adults", "max_rates_per_hotel")
    def _validate_positive_int(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("value must be positive")
        return value

    def ensure_directories(self) -> None:
        """Create directories that must exist at runtime."""
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.session_db_path.parent.mkdir(parents=True, exist_ok=True)

    def api_headers(self) -> dict[str, str]:
        if not self.liteapi_key:
            logger.warning("PETOTEL_LITEAPI_KEY is not set; upstream calls will be rejected")
        return {
            "X-API-Key": self.liteapi_key or "",
            "accept": "application/json",
            "content-type": "application/json",
        }

    def confirmation_url(self, checkout_id: str) -> str:
        """Payment return URL; the checkout id locates the stored context after the redirect."""
        query = urlencode({"checkoutId": checkout_id})
        return f"{self.public_base_url.rstrip('/')}/confirmation?{query}"
