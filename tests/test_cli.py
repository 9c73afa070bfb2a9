"""Tests for the command-line interface (no network access)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from wikidesc.app import cli


def _config(tmp_path: Path) -> str:
    path = tmp_path / "config.toml"
    path.write_text(
        f'[paths]\nstate_dir = "{(tmp_path / "state").as_posix()}"\n',
        encoding="utf-8",
    )
    return str(path)


def _run(tmp_path: Path, capsys: pytest.CaptureFixture[str], *argv: str) -> tuple[int, object]:
    code = cli.main(["--config", _config(tmp_path), "--log-plain", *argv])
    out = capsys.readouterr().out.strip().splitlines()
    return code, json.loads(out[-1]) if out else None


def test_policy_show_and_set(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(tmp_path, capsys, "policy", "show") == (0, ["en"])
    assert _run(tmp_path, capsys, "policy", "set", "fr", "de") == (0, ["de", "fr"])
    assert _run(tmp_path, capsys, "policy", "show") == (0, ["de", "fr"])


def test_status_defaults_to_false(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(tmp_path, capsys, "status") == (0, {"made_authenticated_edit": False})


def test_publish_blocked_language(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code, payload = _run(
        tmp_path,
        capsys,
        "publish",
        "--url",
        "https://en.wikipedia.org/wiki/London",
        "--description",
        "Capital of England and the United Kingdom",
    )

    assert code == 1
    assert isinstance(payload, dict)
    assert payload["outcome"] == "policy_blocked"


def test_publish_malformed_target(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code, payload = _run(
        tmp_path, capsys, "publish", "--language", "fr", "--description", "capitale"
    )

    assert code == 1
    assert isinstance(payload, dict)
    assert payload["outcome"] == "malformed_target"


def test_missing_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([]) == 1
    assert "usage" in capsys.readouterr().err


def test_publish_unparseable_url(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code, payload = _run(
        tmp_path,
        capsys,
        "publish",
        "--url",
        "https://[fr.wikipedia.org/wiki/Londres",
        "--description",
        "capitale",
    )

    assert code == 1
    assert isinstance(payload, dict)
    assert payload["outcome"] == "malformed_target"
