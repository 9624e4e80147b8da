from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from kraken_signer.builder import API_HOST
from kraken_signer.errors import ConfigurationError
from kraken_signer.types import Credential


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Kraken (private REST)
    kraken_api_key: str = Field(default="", validation_alias="KRAKEN_API_KEY")
    kraken_api_secret: str = Field(default="", validation_alias="KRAKEN_API_SECRET")
    kraken_base_url: str = Field(default=API_HOST, validation_alias="KRAKEN_BASE_URL")
    kraken_timeout_seconds: float = Field(default=10.0, validation_alias="KRAKEN_TIMEOUT_SECONDS")
    kraken_max_retries: int = Field(default=3, ge=0, validation_alias="KRAKEN_MAX_RETRIES")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    def credential(self) -> Credential:
        key = self.kraken_api_key.strip()
        secret = self.kraken_api_secret.strip()
        if not key or not secret:
            raise ConfigurationError("KRAKEN_API_KEY and KRAKEN_API_SECRET are required")
        return Credential(key=key, secret=secret)

    def redacted(self) -> dict[str, object]:
        data = self.model_dump()
        data["kraken_api_secret"] = "***" if data["kraken_api_secret"] else ""
        return data
