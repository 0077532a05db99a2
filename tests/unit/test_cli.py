"""Unit tests for the inspect CLI."""

from __future__ import annotations

import io
import json
import sys
from pathlib import Path

import pytest

from zenaton_serializer import __version__, cli
from zenaton_serializer.serializer import Serializer
from zenaton_serializer.wire import parse_envelope


@pytest.fixture(autouse=True)
def isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("LOG_LEVEL", "ZENATON_SERIALIZER_MAX_DEPTH", "ZENATON_SERIALIZER_ALLOW_TYPE_IMPORT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)


def _write(tmp_path: Path, payload: str) -> str:
    path = tmp_path / "payload.json"
    path.write_text(payload, encoding="utf-8")
    return str(path)


def test_inspect_reference_payload(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    shared = {"k": 1}
    payload = Serializer().encode([shared, shared, lambda: None, "x"])

    assert cli.main(["inspect", _write(tmp_path, payload)]) == 0

    summary = json.loads(capsys.readouterr().out)
    assert summary == {
        "shape": "reference",
        "root": "@zenaton#0",
        "slots": 3,
        "entries": {"record": 0, "sequence": 2, "closure": 1},
        "legacy_closures": 0,
        "types": [],
        "dangling": [],
    }


def test_inspect_reads_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b'{"d": 5}')))

    assert cli.main(["inspect", "-"]) == 0

    summary = json.loads(capsys.readouterr().out)
    assert summary["shape"] == "inline"
    assert summary["root"] == 5
    assert summary["slots"] == 0


def test_inspect_reports_dangling_references(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    payload = '{"o":"@zenaton#0","s":{"0":{"n":"Node","p":{"next":"@zenaton#4"}}}}'

    assert cli.main(["inspect", _write(tmp_path, payload)]) == 1

    summary = json.loads(capsys.readouterr().out)
    assert summary["types"] == ["Node"]
    assert summary["dangling"] == [4]


def test_inspect_legacy_payload(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    payload = '{"c":"@zenaton#0","s":["YmxvYg=="]}'

    assert cli.main(["inspect", _write(tmp_path, payload)]) == 0

    summary = json.loads(capsys.readouterr().out)
    assert summary["shape"] == "legacy_closure"
    assert summary["legacy_closures"] == 1


@pytest.mark.parametrize(
    ("payload", "error"),
    [
        ('{"o":', "MalformedPayloadError"),
        ('{"x": 1}', "UnrecognizedEnvelopeError"),
    ],
)
def test_inspect_rejects_bad_payloads(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], payload: str, error: str
) -> None:
    assert cli.main(["inspect", _write(tmp_path, payload)]) == 1

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith(f"{error}: ")


def test_inspect_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["inspect", str(tmp_path / "missing.json")]) == 1
    assert "Cannot read payload" in capsys.readouterr().err


def test_invalid_settings_exit_with_configuration_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("ZENATON_SERIALIZER_MAX_DEPTH", "0")

    assert cli.main(["inspect", _write(tmp_path, '{"d": 1}')]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--version"])

    assert excinfo.value.code == 0
    assert capsys.readouterr().out.strip() == f"zenaton-serializer {__version__}"


def test_summarize_legacy_array_root() -> None:
    summary = cli.summarize(parse_envelope({"a": ["@zenaton#0"], "s": [{"a": []}]}))

    assert summary["root"] == "<inline>"
    assert summary["entries"]["sequence"] == 1
