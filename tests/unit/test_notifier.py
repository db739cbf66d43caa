"""Unit tests for the Honeybadger client facade."""

from __future__ import annotations

import asyncio
import json
import ssl
from collections.abc import Callable, Mapping
from dataclasses import replace
from datetime import timedelta
from typing import Any

import httpx
import pytest

from hb_notifier.domain.entities import ClientConfig, OutcomeKind
from hb_notifier.domain.exceptions import (
    ClientConstructionError,
    DeliveryError,
    NoticeSerializationError,
    NoticeTimeoutError,
    NotProcessedError,
    RateExceededError,
    RedirectionError,
    ServerError,
    TransportError,
    UnauthorizedError,
    UnknownStatusCodeError,
)
from hb_notifier.services.notifier import Honeybadger

MockClient = Callable[[Callable[[httpx.Request], Any]], httpx.AsyncClient]


def _notify(
    notifier: Honeybadger, error: object, context: Mapping[str, str] | None = None
) -> None:
    asyncio.run(notifier.notify(error, context))


def test_notify_posts_notice_and_returns_on_success(
    config: ClientConfig, mock_client: MockClient
) -> None:
    """A 201 reply completes the call; the request carries key and agent."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, request=request)

    notifier = Honeybadger(config, http_client=mock_client(handler))

    assert _notify(notifier, RuntimeError("boom"), {"request_id": "r-1"}) is None

    (request,) = seen
    assert request.method == "POST"
    assert str(request.url) == config.endpoint
    assert request.headers["X-API-Key"] == "dummy-api-key"
    assert request.headers["User-Agent"].startswith("HB-python ")
    body = json.loads(request.content)
    assert body["error"]["class"] == "RuntimeError"
    assert body["request"]["context"] == {"request_id": "r-1"}
    assert body["server"]["hostname"] == "hickyblue"


@pytest.mark.parametrize(
    ("status_code", "error_type", "kind"),
    [
        (301, RedirectionError, OutcomeKind.REDIRECTED),
        (401, UnauthorizedError, OutcomeKind.UNAUTHORIZED),
        (422, NotProcessedError, OutcomeKind.UNPROCESSABLE),
        (429, RateExceededError, OutcomeKind.RATE_LIMITED),
        (500, ServerError, OutcomeKind.SERVER_ERROR),
        (418, UnknownStatusCodeError, OutcomeKind.UNKNOWN_STATUS),
    ],
)
def test_notify_raises_typed_error_per_status(
    config: ClientConfig,
    mock_client: MockClient,
    status_code: int,
    error_type: type[DeliveryError],
    kind: OutcomeKind,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, request=request)

    notifier = Honeybadger(config, http_client=mock_client(handler))

    with pytest.raises(error_type) as exc_info:
        _notify(notifier, "boxed failure")

    assert exc_info.value.outcome.kind is kind


def test_unknown_status_exposes_code(config: ClientConfig, mock_client: MockClient) -> None:
    notifier = Honeybadger(
        config, http_client=mock_client(lambda r: httpx.Response(418, request=r))
    )

    with pytest.raises(UnknownStatusCodeError) as exc_info:
        _notify(notifier, "teapot")

    assert exc_info.value.status_code == 418
    assert "418" in str(exc_info.value)


def test_timeout_surfaces_seconds(config: ClientConfig, mock_client: MockClient) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(30)
        return httpx.Response(201, request=request)

    notifier = Honeybadger(
        replace(config, timeout=timedelta(seconds=1)), http_client=mock_client(handler)
    )

    with pytest.raises(NoticeTimeoutError) as exc_info:
        _notify(notifier, "slow")

    assert exc_info.value.seconds == 1
    assert str(exc_info.value) == "Honeybadger timed out after 1 seconds"


def test_transport_failure_chains_cause(config: ClientConfig, mock_client: MockClient) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    notifier = Honeybadger(config, http_client=mock_client(handler))

    with pytest.raises(TransportError) as exc_info:
        _notify(notifier, "offline")

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


class _RefusingSender:
    async def send(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response:
        raise ConnectionRefusedError("refused")


def test_socket_failure_from_custom_sender_is_a_transport_error(config: ClientConfig) -> None:
    notifier = Honeybadger(config, http_client=_RefusingSender())

    with pytest.raises(TransportError) as exc_info:
        _notify(notifier, "offline")

    assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)


def test_serialization_failure_sends_nothing(
    config: ClientConfig, mock_client: MockClient
) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(201, request=request)

    notifier = Honeybadger(config, http_client=mock_client(handler))

    with pytest.raises(NoticeSerializationError):
        _notify(notifier, "boom", {"attempt": 1})  # type: ignore[dict-item]

    assert calls == []


def test_repeated_notifies_are_independent(config: ClientConfig, mock_client: MockClient) -> None:
    """The same error twice makes two separate, successful deliveries."""
    bodies: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(request.content)
        return httpx.Response(201, request=request)

    notifier = Honeybadger(config, http_client=mock_client(handler))
    error = ValueError("same error")

    _notify(notifier, error)
    _notify(notifier, error)

    assert len(bodies) == 2
    first, second = (json.loads(body) for body in bodies)
    assert first["error"] == second["error"]


def test_concurrent_notifies_share_one_client(
    config: ClientConfig, mock_client: MockClient
) -> None:
    count = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal count
        await asyncio.sleep(0.01)
        count += 1
        return httpx.Response(201, request=request)

    notifier = Honeybadger(config, http_client=mock_client(handler))

    async def _run() -> list[object]:
        return await asyncio.gather(
            *(notifier.notify(RuntimeError(f"error {i}")) for i in range(5)),
            return_exceptions=True,
        )

    assert asyncio.run(_run()) == [None] * 5
    assert count == 5


def test_send_returns_outcome_without_raising(
    config: ClientConfig, mock_client: MockClient
) -> None:
    notifier = Honeybadger(
        config, http_client=mock_client(lambda r: httpx.Response(500, request=r))
    )

    outcome = asyncio.run(notifier.send("boom"))

    assert outcome.kind is OutcomeKind.SERVER_ERROR


def test_aclose_leaves_injected_client_open(config: ClientConfig, mock_client: MockClient) -> None:
    client = mock_client(lambda r: httpx.Response(201, request=r))
    notifier = Honeybadger(config, http_client=client)

    async def _run() -> None:
        async with notifier:
            await notifier.notify("boom")

    asyncio.run(_run())

    assert client.is_closed is False
    asyncio.run(client.aclose())


def test_owned_client_is_closed(config: ClientConfig) -> None:
    notifier = Honeybadger(config)

    asyncio.run(notifier.aclose())

    assert notifier._client.is_closed is True  # type: ignore[attr-defined]


@pytest.mark.parametrize("error", [ssl.SSLError("bad CA bundle"), OSError("no certs")])
def test_client_construction_failure_is_reported(
    config: ClientConfig, monkeypatch: pytest.MonkeyPatch, error: OSError
) -> None:
    def failing_client(**kwargs: Any) -> httpx.AsyncClient:
        raise error

    monkeypatch.setattr(httpx, "AsyncClient", failing_client)

    with pytest.raises(ClientConstructionError) as exc_info:
        Honeybadger(config)

    assert exc_info.value.__cause__ is error


def test_config_repr_hides_api_key(config: ClientConfig) -> None:
    assert "dummy-api-key" not in repr(config)
