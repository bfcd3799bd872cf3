from __future__ import annotations

from enum import Enum

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings


class AlertMode(str, Enum):
    GROUPED = "grouped"
    PER_FAILURE = "per_failure"


class ConfigError(Exception):
    """A required setting is missing or invalid. Fatal at startup."""


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Monitored endpoints, comma-separated
    domains: str = Field(min_length=1)

    # SMTP transport
    smtp_host: str = Field(min_length=1)
    smtp_port: int
    smtp_secure: bool  # true = implicit TLS (SMTP_SSL), false = STARTTLS if offered
    smtp_timeout: float = 10.0

    # Credentials / recipient
    email_user: str = Field(min_length=1)
    email_password: str = Field(min_length=1)
    email_to: str = Field(min_length=1)
    email_from: str = ""  # falls back to email_user

    # 1 = one email per cycle, 0 = one email per failing domain
    send_grouped_mail: bool

    # Scheduling
    check_interval: int = Field(default=60, ge=1)  # seconds between cycles
    request_timeout: float = Field(default=10.0, gt=0)  # per-probe, seconds

    # Result log
    log_file: str = "watch-sites.log"

    # Logging
    log_level: str = "INFO"

    @field_validator("domains")
    @classmethod
    def _has_domains(cls, v: str) -> str:
        if not _split_domains(v):
            raise ValueError("must list at least one URL")
        return v

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper()

    @property
    def domain_list(self) -> list[str]:
        return _split_domains(self.domains)

    @property
    def alert_mode(self) -> AlertMode:
        return AlertMode.GROUPED if self.send_grouped_mail else AlertMode.PER_FAILURE

    @property
    def sender(self) -> str:
        return self.email_from or self.email_user


def _split_domains(raw: str) -> list[str]:
    return [d.strip() for d in raw.split(",") if d.strip()]


def load_settings(**overrides: object) -> Settings:
    """Build Settings, turning validation failures into a ConfigError.

    The message names each offending setting by its environment variable.
    """
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        problems = []
        for err in exc.errors():
            name = str(err["loc"][0]).upper() if err["loc"] else "SETTINGS"
            if err["type"] in ("missing", "string_too_short"):
                problems.append(f"{name} is not defined")
            else:
                problems.append(f"{name} is invalid: {err['msg']}")
        raise ConfigError("; ".join(problems)) from exc
