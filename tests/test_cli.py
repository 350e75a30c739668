from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import pytest
import typer
from typer.testing import CliRunner

from cli.app import app
from cli.client import ApiClient
from cli.config import load_config


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.history_calls: List[Optional[int]] = []
        self.status_payload: Dict[str, Any] = {
            "connected": True,
            "error": None,
            "point_count": 2,
            "bucket_count": 1,
        }
        self.closed = False

    def get_status(self) -> Dict[str, Any]:
        return self.status_payload

    def get_live(self) -> Dict[str, Any]:
        return {
            "status": self.status_payload,
            "chart": [
                {"timestamp": 1, "display_time": "08:00", "temperature": 26.5},
                {"timestamp": 2, "display_time": "08:01", "temperature": 27.0},
            ],
            "current": {
                "id": "-N2",
                "timestamp": 2,
                "temperature": 27.0,
                "humidity": None,
                "sequence": 2.0,
                "time_text": "01/01/2024 08:01:00",
            },
            "chart_limit": 120,
            "bucket_minutes": 1,
        }

    def get_history(self, page: Optional[int] = None) -> Dict[str, Any]:
        self.history_calls.append(page)
        return {
            "rows": [
                {
                    "bucket_start": 0,
                    "bucket_end": 59_999,
                    "time_range": "01/01/2024 08:01:00 → 01/01/2024 08:01:59",
                    "point": {
                        "id": "-N2",
                        "timestamp": 2,
                        "temperature": 27.0,
                        "humidity": 61.25,
                        "sequence": None,
                        "time_text": "01/01/2024 08:01:00",
                    },
                }
            ],
            "current_page": 1,
            "total_pages": 1,
            "total_buckets": 1,
            "page_size": 10,
            "bucket_minutes": 1,
        }

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def _install_stub(monkeypatch, stub: StubClient) -> None:
    def factory(config):
        stub.config = config
        return stub

    monkeypatch.setattr("cli.app.ApiClient", factory)


def test_status_command(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["--base-url", "http://dash:9000/", "status"])

    assert result.exit_code == 0
    assert "DB Connected" in result.stdout
    assert "points: 2" in result.stdout
    assert stub.config.base_url == "http://dash:9000"
    assert stub.closed is True


def test_live_command(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["live"])

    assert result.exit_code == 0
    assert "temperature: 27.0 °C" in result.stdout
    assert "humidity: --" in result.stdout
    assert "stt: 2" in result.stdout
    assert "Recent Points (2/120)" in result.stdout


def test_history_command(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["history", "--page", "4"])

    assert result.exit_code == 0
    assert stub.history_calls == [4]
    assert "History (page 1/1, 1m buckets)" in result.stdout
    assert "27.00 °C" in result.stdout
    assert "61.25%" in result.stdout
    assert "Total buckets: 1" in result.stdout


def test_api_client_reports_http_errors() -> None:
    client = ApiClient(load_config(base_url="http://dash"))
    client._client = httpx.Client(  # type: ignore[attr-defined]
        base_url="http://dash",
        transport=httpx.MockTransport(
            lambda request: httpx.Response(422, json={"detail": "bad page"})
        ),
    )

    with pytest.raises(typer.Exit):
        client.get_history(page=1)
    client.close()


def test_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://env-host:8080/")
    monkeypatch.setenv("CLI_TIMEOUT", "not-a-number")

    config = load_config()

    assert config.base_url == "http://env-host:8080"
    assert config.timeout == 10.0
