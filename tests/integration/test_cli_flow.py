"""CLI commands against a real engine (no network needed)."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
import structlog

from relayplay.interfaces.cli.cli import start

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _isolated_cache(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RELAYPLAY_CACHE_DIR", str(tmp_path / "cli-cache"))


@pytest.fixture(autouse=True)
def _logs_to_stderr():
    """Keep stdout for the JSON payload, as the configured CLI does."""
    structlog.configure(logger_factory=structlog.PrintLoggerFactory(file=sys.stderr))
    yield
    structlog.reset_defaults()


def _run(argv: list[str]) -> int:
    with patch("relayplay.interfaces.cli.cli.configure_logging", return_value={}):
        return start(argv)


def test_resolve_torrent(capsys: pytest.CaptureFixture[str]) -> None:
    code = _run(["resolve", "magnet:?xt=urn:btih:abc"])

    assert code == 0
    body = json.loads(capsys.readouterr().out)
    assert body["media"]["kind"] == "torrent"
    assert body["media"]["id"] == "tor:magnet:?xt=urn:btih:abc"
    assert body["candidates"] == []


def test_resolve_direct_link_without_proxy(capsys: pytest.CaptureFixture[str]) -> None:
    code = _run(["resolve", "files.example.com/video.mp4"])

    assert code == 0
    body = json.loads(capsys.readouterr().out)
    assert body["candidates"] == [
        {"url": "https://files.example.com/video.mp4", "label": "primary"}
    ]
    assert body["download_url"] == "https://files.example.com/video.mp4"


def test_download_url_with_proxy(capsys: pytest.CaptureFixture[str]) -> None:
    code = _run(
        ["download-url", "files.example.com/v.mp4", "--proxy-url", "https://p.test"]
    )

    assert code == 0
    body = json.loads(capsys.readouterr().out)
    assert body["download_url"] == "https://p.test/?url=https%3A%2F%2Ffiles.example.com%2Fv.mp4"


def test_blank_input_exits_2(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["resolve", "  "]) == 2
    assert "Invalid input" in capsys.readouterr().err
