"""Gateway settings loaded from the environment (and a .env file if present)."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

API_BASE_URL = "https://api.duffel.com"
API_VERSION = "v2"
DEFAULT_TIMEOUT = 30.0


class Settings(BaseSettings):
    """Duffel connection settings, consumed only by the transport client."""
    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    access_token: str = Field(..., alias="DUFFEL_ACCESS_TOKEN")
    base_url: str = Field(default=API_BASE_URL, alias="DUFFEL_BASE_URL")
    api_version: str = Field(default=API_VERSION, alias="DUFFEL_API_VERSION")
    timeout: float = Field(default=DEFAULT_TIMEOUT, alias="DUFFEL_TIMEOUT")

    @field_validator("access_token")
    @classmethod
    def _token_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DUFFEL_ACCESS_TOKEN must be a non-empty string")
        return v.strip()

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def _timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("DUFFEL_TIMEOUT must be greater than 0")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Return settings loaded from the environment."""
    return Settings()  # type: ignore[call-arg]


__all__ = ["Settings", "get_settings"]
