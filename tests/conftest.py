"""Shared fixtures for the notifier test suite."""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta

import httpx
import pytest

from hb_notifier.domain.entities import ClientConfig
from hb_notifier.infrastructure.config import get_settings

_RECOGNISED_ENV = (
    "HONEYBADGER_API_KEY",
    "HONEYBADGER_ROOT",
    "ENV",
    "HOSTNAME",
    "HONEYBADGER_ENDPOINT",
    "HONEYBADGER_TIMEOUT",
    "HONEYBADGER_MAX_CONNECTIONS",
    "LOG_LEVEL",
)

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's shell variables out of configuration tests."""
    for name in _RECOGNISED_ENV:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        api_key="dummy-api-key",
        project_root="/srv/app",
        environment_name="test",
        hostname="hickyblue",
        endpoint="https://hb.example.test/v1/notices",
        timeout=timedelta(seconds=5),
    )


@pytest.fixture
def mock_client() -> Callable[[Handler], httpx.AsyncClient]:
    def _make(handler: Handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make
