"""Unit tests for the ``hb-notify`` command."""

from __future__ import annotations

import json

import httpx
import pytest

from hb_notifier import main as cli
from hb_notifier.services import notifier as notifier_module


def _patch_transport(monkeypatch: pytest.MonkeyPatch, status_code: int) -> list[dict]:
    notices: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        notices.append(json.loads(request.content))
        return httpx.Response(status_code, request=request)

    monkeypatch.setattr(
        notifier_module,
        "create_http_client",
        lambda config: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    return notices


def test_sends_chained_sample_error(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("HONEYBADGER_API_KEY", "ffffff")
    notices = _patch_transport(monkeypatch, 201)

    exit_code = cli.main(["disk full", "--env", "ci", "--context", "job=nightly"])

    assert exit_code == 0
    assert "Notice delivered." in capsys.readouterr().out
    (notice,) = notices
    assert notice["api_key"] == "ffffff"
    assert notice["error"]["class"] == "SampleError"
    assert len(notice["error"]["causes"]) == 2
    assert notice["request"]["context"] == {"job": "nightly"}
    assert notice["server"]["environment_name"] == "ci"


def test_delivery_failure_exits_non_zero(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HONEYBADGER_API_KEY", "ffffff")
    _patch_transport(monkeypatch, 401)

    assert cli.main(["disk full"]) == 1


def test_missing_api_key_is_a_usage_error() -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["disk full"])

    assert exc_info.value.code == 2


def test_malformed_context_is_a_usage_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HONEYBADGER_API_KEY", "ffffff")

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["disk full", "--context", "no-equals-sign"])

    assert exc_info.value.code == 2
