"""
Application configuration using pydantic-settings.
"""
import logging
from typing import Optional

from pydantic import field_validator, model_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

from app import __version__

logger = logging.getLogger(__name__)

# Placeholders shipped in the Ton.Place developer docs
_PLACEHOLDER_APP_ID = "YOUR_APP_ID"
_PLACEHOLDER_APP_SECRET = "YOUR_APP_SECRET"
DEFAULT_TONPLACE_API_URL = "https://api.tonplace.net"
DEFAULT_TONPLACE_SDK_URL = "https://ton.place/app_sdk.js"


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "Ton.Place Mini App"
    app_version: str = __version__
    debug: bool = False
    environment: str = "development"

    # Ton.Place credentials (from the Ton.Place developer panel)
    app_id: str = _PLACEHOLDER_APP_ID
    app_secret: str = _PLACEHOLDER_APP_SECRET  # Must be set via environment variable

    # Ton.Place API
    tonplace_api_url: str = DEFAULT_TONPLACE_API_URL
    tonplace_sdk_url: str = DEFAULT_TONPLACE_SDK_URL
    http_timeout_seconds: float = 10.0
    purchases_page_size: int = 50
    purchase_currency: str = "eur"  # Currently the only currency Ton.Place accepts

    # Launch signature
    signature_max_age_seconds: int = 300

    # Server
    app_host: str = "0.0.0.0"
    app_port: int = 8080

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[str] = None  # File logging is enabled only when set

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def credentials_configured(self) -> bool:
        """Whether real Ton.Place credentials have been provided."""
        return (
            bool(self.app_id)
            and bool(self.app_secret)
            and self.app_id != _PLACEHOLDER_APP_ID
            and self.app_secret != _PLACEHOLDER_APP_SECRET
        )

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator('app_id', 'app_secret')
    @classmethod
    def strip_credentials(cls, v: str) -> str:
        return v.strip() if v else ""

    @field_validator('tonplace_api_url', 'tonplace_sdk_url')
    @classmethod
    def validate_urls(cls, v: str, info: ValidationInfo) -> str:
        """Validate Ton.Place URLs use http(s) and drop trailing slashes."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"{info.field_name.upper()} must start with http:// or https://. Got: {v}"
            )
        if v.endswith("/"):
            v = v.rstrip("/")
        return v

    @field_validator('http_timeout_seconds')
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeout must be positive")
        if v > 120:
            raise ValueError("Timeout cannot exceed 120 seconds")
        return v

    @field_validator('signature_max_age_seconds')
    @classmethod
    def validate_signature_max_age(cls, v: int) -> int:
        """Bound the replay window."""
        if v <= 0:
            raise ValueError("SIGNATURE_MAX_AGE_SECONDS must be positive")
        if v > 3600:
            raise ValueError("SIGNATURE_MAX_AGE_SECONDS cannot exceed 3600 seconds (1 hour)")
        return v

    @field_validator('purchases_page_size')
    @classmethod
    def validate_purchases_page_size(cls, v: int) -> int:
        if not 1 <= v <= 100:
            raise ValueError("PURCHASES_PAGE_SIZE must be between 1 and 100")
        return v

    @field_validator('purchase_currency')
    @classmethod
    def validate_purchase_currency(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator('app_port')
    @classmethod
    def validate_app_port(cls, v: int) -> int:
        if not 1 <= v <= 65535:
            raise ValueError(f"APP_PORT must be between 1 and 65535. Got: {v}")
        return v

    @model_validator(mode='after')
    def validate_credentials(self) -> 'Settings':
        """Refuse placeholder credentials in production, warn elsewhere."""
        if self.credentials_configured:
            return self

        if self.environment == "production":
            raise ValueError(
                "APP_ID and APP_SECRET must be set in production! "
                "Get them from the Ton.Place developer panel at https://ton.place/apps"
            )
        logger.warning(
            "APP_ID and APP_SECRET are not configured. "
            "Set them before running in production; launch signatures will not verify."
        )
        return self

    @model_validator(mode='after')
    def validate_production_settings(self) -> 'Settings':
        """Production-only checks."""
        if self.environment != "production":
            return self

        errors = []
        if self.debug:
            errors.append("DEBUG must be False in production.")
        if self.tonplace_api_url.startswith("http://"):
            errors.append("TONPLACE_API_URL must use https in production.")

        if errors:
            error_message = "Production configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            raise ValueError(error_message)

        return self


# Create settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get settings instance."""
    return settings
