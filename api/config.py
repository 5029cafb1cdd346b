"""
Process configuration for the relay.

`Settings` is read once from the environment (and `.env` when present);
`RelayConfig` is what the app factory actually consumes.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional, Tuple

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vision.client import CLOUD_PLATFORM_SCOPE, DEFAULT_ENDPOINT, AnnotationClient, CloudVisionClient

log = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    pass


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    credentials_file: Path = Field(
        default=Path("google_credentials.json"),
        validation_alias="GOOGLE_CREDENTIALS_FILE",
    )
    credentials_json: Optional[str] = Field(default=None, validation_alias="GOOGLE_CREDENTIALS")
    vision_endpoint: str = Field(default=DEFAULT_ENDPOINT, validation_alias="VISION_ENDPOINT")

    basic_auth_user: str = Field(default="", validation_alias="BASIC_AUTH_USER")
    basic_auth_password: str = Field(default="", validation_alias="BASIC_AUTH_PASSWORD")

    log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def basic_auth(self) -> Optional[Tuple[str, str]]:
        # Both values or nothing
        if self.basic_auth_user and self.basic_auth_password:
            return self.basic_auth_user, self.basic_auth_password
        return None


@dataclass(frozen=True)
class RelayConfig:
    client: AnnotationClient
    basic_auth: Optional[Tuple[str, str]] = None


def load_credentials(settings: Settings) -> service_account.Credentials:
    """
    Load service-account credentials scoped to the vision service.

    `GOOGLE_CREDENTIALS` (inline JSON) wins over `GOOGLE_CREDENTIALS_FILE`.
    """
    try:
        if settings.credentials_json:
            info = json.loads(settings.credentials_json)
            return service_account.Credentials.from_service_account_info(
                info, scopes=[CLOUD_PLATFORM_SCOPE]
            )
        return service_account.Credentials.from_service_account_file(
            str(settings.credentials_file), scopes=[CLOUD_PLATFORM_SCOPE]
        )
    except (OSError, ValueError, GoogleAuthError) as e:
        raise ConfigurationError(f"cannot load service-account credentials: {e}") from e


def load_config(settings: Optional[Settings] = None) -> RelayConfig:
    settings = settings or Settings()
    credentials = load_credentials(settings)
    log.info(
        "Loaded credentials for %s; basic auth %s",
        getattr(credentials, "service_account_email", "<unknown>"),
        "enabled" if settings.basic_auth else "disabled",
    )
    return RelayConfig(
        client=CloudVisionClient.from_credentials(credentials, endpoint=settings.vision_endpoint),
        basic_auth=settings.basic_auth,
    )
