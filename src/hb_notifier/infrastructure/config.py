"""Client configuration — environment variables layered under explicit overrides."""

from __future__ import annotations

import logging
import os
import socket
from datetime import timedelta
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hb_notifier.domain.entities import ClientConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ENDPOINT = "https://api.honeybadger.io/v1/notices"
DEFAULT_TIMEOUT = timedelta(seconds=5)
DEFAULT_MAX_CONNECTIONS = 4


class Settings(BaseSettings):
    """Values recognised in the process environment.

    Every field is optional: an unset or malformed variable simply falls
    through to the computed default in :class:`ConfigBuilder`.
    """

    model_config = SettingsConfigDict(extra="ignore")

    api_key: SecretStr | None = Field(
        default=None, validation_alias="HONEYBADGER_API_KEY"
    )
    root: str | None = Field(default=None, validation_alias="HONEYBADGER_ROOT")
    env: str | None = Field(default=None, validation_alias="ENV")
    hostname: str | None = Field(default=None, validation_alias="HOSTNAME")
    endpoint: str | None = Field(
        default=None, validation_alias="HONEYBADGER_ENDPOINT"
    )
    timeout: int | None = Field(
        default=None, validation_alias="HONEYBADGER_TIMEOUT"
    )
    max_connections: int | None = Field(
        default=None, validation_alias="HONEYBADGER_MAX_CONNECTIONS"
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @field_validator("timeout", "max_connections", mode="before")
    @classmethod
    def _unsigned_or_none(cls, v: Any) -> int | None:
        if v is None or isinstance(v, int):
            return v if v is None or v >= 0 else None
        text = str(v)
        if text.isascii() and text.isdigit():
            return int(text)
        logger.debug("Ignoring malformed unsigned integer %r", text)
        return None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process settings (cached after first call)."""
    return Settings()


def resolve(explicit: T | None, env_value: T | None, computed: T | None, fallback: T) -> T:
    """Pick the first available value: explicit > environment > computed > fallback."""
    for candidate in (explicit, env_value, computed):
        if candidate is not None:
            return candidate
    return fallback


def _to_timedelta(seconds: float) -> timedelta | None:
    try:
        return timedelta(seconds=seconds)
    except (OverflowError, ValueError):
        logger.debug("Ignoring out-of-range timeout of %s seconds", seconds)
        return None


def _current_dir() -> str | None:
    try:
        return os.getcwd()
    except OSError:
        return None


def _hostname() -> str | None:
    try:
        return socket.gethostname() or None
    except OSError:
        return None


class ConfigBuilder:
    """Fluent builder for :class:`ClientConfig`.

    The environment is read once, when the builder is created.  Recognised
    variables: ``HONEYBADGER_ROOT``, ``ENV``, ``HOSTNAME``,
    ``HONEYBADGER_ENDPOINT``, ``HONEYBADGER_TIMEOUT`` and
    ``HONEYBADGER_MAX_CONNECTIONS``.  Any ``with_*`` call wins over them.

    Example::

        config = ConfigBuilder("ffffff").with_env("production").build()
    """

    def __init__(self, api_key: str, settings: Settings | None = None) -> None:
        self._api_key = api_key
        self._settings = settings if settings is not None else Settings()
        self._root: str | None = None
        self._env: str | None = None
        self._hostname: str | None = None
        self._endpoint: str | None = None
        self._timeout: timedelta | None = None
        self._max_connections: int | None = None

    def with_root(self, project_root: str) -> ConfigBuilder:
        self._root = project_root
        return self

    def with_env(self, environment: str) -> ConfigBuilder:
        self._env = environment
        return self

    def with_hostname(self, hostname: str) -> ConfigBuilder:
        self._hostname = hostname
        return self

    def with_endpoint(self, endpoint: str) -> ConfigBuilder:
        self._endpoint = endpoint
        return self

    def with_timeout(self, timeout: timedelta | float) -> ConfigBuilder:
        """Set the delivery deadline, as a ``timedelta`` or in seconds.

        A number of seconds too large for ``timedelta`` is ignored.
        """
        if not isinstance(timeout, timedelta):
            self._timeout = _to_timedelta(timeout)
        else:
            self._timeout = timeout
        return self

    def with_max_connections(self, max_connections: int) -> ConfigBuilder:
        """Cap the size of the HTTP connection pool."""
        self._max_connections = max_connections
        return self

    def build(self) -> ClientConfig:
        s = self._settings
        env_timeout = _to_timedelta(s.timeout) if s.timeout is not None else None
        return ClientConfig(
            api_key=self._api_key,
            project_root=resolve(self._root, s.root, _current_dir(), ""),
            environment_name=resolve(self._env, s.env, None, ""),
            hostname=resolve(self._hostname, s.hostname, _hostname(), ""),
            endpoint=resolve(self._endpoint, s.endpoint, DEFAULT_ENDPOINT, ""),
            timeout=resolve(self._timeout, env_timeout, DEFAULT_TIMEOUT, DEFAULT_TIMEOUT),
            max_connections=resolve(
                self._max_connections,
                s.max_connections,
                DEFAULT_MAX_CONNECTIONS,
                DEFAULT_MAX_CONNECTIONS,
            ),
        )
