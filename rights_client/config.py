# rights_client/config.py
import logging
import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# --- Environment variable names ---
SERVICE_URL_ENV = "RIGHTS_SERVICE_URL"
HTTP_TIMEOUT_ENV = "RIGHTS_HTTP_TIMEOUT"
IDENTITY_FILE_ENV = "RIGHTS_IDENTITY_FILE"
IDENTITY_PASSPHRASE_ENV = "RIGHTS_IDENTITY_PASSPHRASE"
LOG_LEVEL_ENV = "RIGHTS_LOG_LEVEL"

# --- Defaults ---
DEFAULT_SERVICE_URL = "http://127.0.0.1:3000/api/v1/actions"
DEFAULT_HTTP_TIMEOUT_SECONDS = 10.0
DEFAULT_IDENTITY_FILE = "rights_identity.json"
DEFAULT_LOG_LEVEL = "INFO"


class ClientConfig(BaseModel):
    """Runtime settings for a rights client, normally read from the environment."""
    service_url: str = Field(DEFAULT_SERVICE_URL, description="Endpoint accepting signed action batches.")
    http_timeout_seconds: float = Field(DEFAULT_HTTP_TIMEOUT_SECONDS, gt=0)
    identity_file: str = DEFAULT_IDENTITY_FILE
    identity_passphrase: Optional[str] = Field(None, repr=False)
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("service_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"{SERVICE_URL_ENV} must be an http(s) URL, got '{value}'.")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"{LOG_LEVEL_ENV} must be a logging level name, got '{value}'.")
        return level

    @classmethod
    def from_env(cls) -> "ClientConfig":
        timeout_raw = os.environ.get(HTTP_TIMEOUT_ENV, str(DEFAULT_HTTP_TIMEOUT_SECONDS))
        try:
            timeout = float(timeout_raw)
        except ValueError as e:
            raise ValueError(f"{HTTP_TIMEOUT_ENV} must be a number of seconds, got '{timeout_raw}'.") from e

        return cls(
            service_url=os.environ.get(SERVICE_URL_ENV, DEFAULT_SERVICE_URL),
            http_timeout_seconds=timeout,
            identity_file=os.environ.get(IDENTITY_FILE_ENV, DEFAULT_IDENTITY_FILE),
            identity_passphrase=os.environ.get(IDENTITY_PASSPHRASE_ENV),
            log_level=os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL),
        )
