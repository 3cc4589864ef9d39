"""
Configuration management with Pydantic Settings
Loads from .env file with validation and defaults
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class MissingBaseURLError(ValueError):
    """Neither subdomain nor explicit base URL configured"""
    pass


class Settings(BaseSettings):
    """SDK settings with validation"""

    # AmoCRM account
    amocrm_subdomain: Optional[str] = Field(None, description="AmoCRM subdomain")
    amocrm_base_url_override: Optional[str] = Field(
        None,
        description="Full account URL, e.g. https://example.amocrm.com (overrides subdomain)"
    )

    # OAuth2 integration
    amocrm_client_id: Optional[str] = Field(None, description="AmoCRM Client ID")
    amocrm_client_secret: Optional[str] = Field(None, description="AmoCRM Client Secret")
    amocrm_redirect_uri: Optional[str] = Field(None, description="AmoCRM Redirect URI")
    amocrm_access_token: Optional[str] = Field(None, description="AmoCRM Access Token")
    amocrm_refresh_token: Optional[str] = Field(None, description="AmoCRM Refresh Token")

    # HTTP
    request_timeout_seconds: float = Field(default=30.0, description="HTTP timeout in seconds")
    default_page_limit: int = Field(default=50, description="Default page size for list calls")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(default=True, description="Render logs as JSON")

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("Request timeout must be positive")
        return v

    @field_validator("default_page_limit")
    @classmethod
    def validate_page_limit(cls, v):
        # AmoCRM refuses pages larger than 250
        if not 1 <= v <= 250:
            raise ValueError("Page limit must be between 1 and 250")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        v = v.upper()
        if v not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ValueError("Invalid log level")
        return v

    @property
    def amocrm_base_url(self) -> str:
        if self.amocrm_base_url_override:
            return self.amocrm_base_url_override.rstrip("/")
        if not self.amocrm_subdomain:
            raise MissingBaseURLError(
                "Set AMOCRM_SUBDOMAIN or AMOCRM_BASE_URL_OVERRIDE"
            )
        return f"https://{self.amocrm_subdomain}.amocrm.ru"

    model_config = {
        "extra": "ignore",  # Ignore extra fields from .env
        "env_file": ".env",
        "case_sensitive": False
    }


@lru_cache()
def get_settings() -> Settings:
    """Get SDK settings"""
    return Settings()


def reset_settings():
    """Drop cached settings so the next call re-reads the environment"""
    get_settings.cache_clear()
