"""Process settings, read once from the environment.

  APP_ENV               dev | test | prod          (dev: OpenAPI docs on)
  LOG_LEVEL             debug | info | warning | error
  LOG_JSON              emit JSON Lines instead of text
  PORT                  listen port for uvicorn
  DATABASE_URL          SQLAlchemy URL; unset means in-memory stores
  DATABASE_ECHO         log every SQL statement
  ACCESS_TOKEN_TTL_MIN  bearer token lifetime in minutes
  SEED_ADMIN_EMAIL      bootstrap admin account, created at startup
  SEED_ADMIN_PASSWORD   (both or neither)

Bad values fail fast at import time with a message naming the variable.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, TypeVar

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

APP_ENVS: tuple[AppEnv, ...] = ("dev", "test", "prod")
LOG_LEVELS: tuple[LogLevel, ...] = ("debug", "info", "warning", "error")

_C = TypeVar("_C", bound=str)


def _getenv(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


def _getchoice(name: str, default: str, choices: Sequence[_C]) -> _C:
    raw = _getenv(name, default).lower()
    for choice in choices:
        if raw == choice:
            return choice
    raise ValueError(f"{name} must be {'|'.join(choices)} (got {raw!r})")


def _getint(name: str, default: int, *, positive: bool = False) -> int:
    raw = _getenv(name, str(default))
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None
    if positive and value <= 0:
        raise ValueError(f"{name} must be positive (got {value})")
    return value


def _getbool(name: str, default: bool = False) -> bool:
    raw = _getenv(name, "true" if default else "false").lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


def _getoptional(name: str) -> str | None:
    return _getenv(name) or None


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    database_echo: bool = False
    access_token_ttl_min: int = 15
    seed_admin_email: str | None = None
    seed_admin_password: str | None = None

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    @property
    def uses_database(self) -> bool:
        return self.database_url is not None


def load_settings() -> Settings:
    seed_admin_email = _getoptional("SEED_ADMIN_EMAIL")
    seed_admin_password = _getoptional("SEED_ADMIN_PASSWORD")
    if (seed_admin_email is None) != (seed_admin_password is None):
        raise ValueError(
            "SEED_ADMIN_EMAIL and SEED_ADMIN_PASSWORD must be set together"
        )

    return Settings(
        app_env=_getchoice("APP_ENV", "dev", APP_ENVS),
        log_level=_getchoice("LOG_LEVEL", "info", LOG_LEVELS),
        log_json=_getbool("LOG_JSON"),
        port=_getint("PORT", 8000),
        database_url=_getoptional("DATABASE_URL"),
        database_echo=_getbool("DATABASE_ECHO"),
        access_token_ttl_min=_getint("ACCESS_TOKEN_TTL_MIN", 15, positive=True),
        seed_admin_email=seed_admin_email,
        seed_admin_password=seed_admin_password,
    )


SETTINGS = load_settings()
