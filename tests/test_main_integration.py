import json
import logging
from pathlib import Path

import pytest

from globalip_memo.address import IpVersion
from globalip_memo.config import AppConfig, SourceDescriptor
from globalip_memo.main import main, run
from globalip_memo.pipeline import RunSummary


class _Response:
    def __init__(self, text: str) -> None:
        self.text = text

    def raise_for_status(self) -> None:
        return None


class _Session:
    def __init__(self, bodies: dict[str, str]) -> None:
        self.bodies = bodies

    def get(self, url: str, timeout: int) -> _Response:
        return _Response(self.bodies[url])

    def close(self) -> None:
        return None


def _config(tmp_path: Path, sources: list[SourceDescriptor]) -> AppConfig:
    return AppConfig(
        home=tmp_path,
        config_path=tmp_path / "globalip-config.json",
        output_path=tmp_path / "globalip.txt",
        ip_version=IpVersion.V4,
        sources=sources,
        dry_run=False,
        log_level="info",
        request_timeout_seconds=10,
        max_workers=2,
    )


def test_run_end_to_end(tmp_path: Path) -> None:
    cfg = _config(
        tmp_path,
        [
            SourceDescriptor(url="https://api.ipify.org"),
            SourceDescriptor(url="https://ifconfig.me/ip"),
        ],
    )
    session = _Session({"https://api.ipify.org": "203.0.113.10\n", "https://ifconfig.me/ip": "203.0.113.10"})
    summary = run(cfg, logger=logging.getLogger("test"), session=session)  # type: ignore[arg-type]
    assert summary.updated is True
    assert (tmp_path / "globalip.txt").read_text(encoding="utf-8") == "203.0.113.10"


def test_main_reports_success(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / "globalip-config.json").write_text(
        json.dumps({"methods": [{"type": "plain", "url": "https://api.ipify.org"}]}), encoding="utf-8"
    )
    captured: dict[str, AppConfig] = {}

    def _fake_run(config: AppConfig, logger: logging.Logger) -> RunSummary:
        captured["config"] = config
        return RunSummary(address=None, previous=None, updated=False)  # type: ignore[arg-type]

    monkeypatch.setattr("globalip_memo.main.run", _fake_run)
    assert main(["--home", str(tmp_path)]) == 0
    assert captured["config"].sources == [SourceDescriptor(url="https://api.ipify.org")]


def test_main_returns_error_when_no_source_resolves(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / "globalip-config.json").write_text(
        json.dumps({"methods": [{"type": "plain", "url": "https://api.ipify.org"}]}), encoding="utf-8"
    )
    (tmp_path / "globalip.txt").write_text("203.0.113.5", encoding="utf-8")
    monkeypatch.setattr("globalip_memo.pipeline.build_session", lambda ip_version: _Session({"https://api.ipify.org": "garbage"}))

    assert main(["--home", str(tmp_path)]) == 1
    assert (tmp_path / "globalip.txt").read_text(encoding="utf-8") == "203.0.113.5"


def test_main_configuration_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--home", str(tmp_path)]) == 2
    assert "Configuration error" in capsys.readouterr().err
