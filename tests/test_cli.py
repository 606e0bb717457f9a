"""Tests for csprojgraph CLI entrypoints."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

import csprojgraph.main as main
from csprojgraph.cli import scan as scan_module


def test_main_dispatches_scan_command(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Verify that `main` parses args and dispatches scan_command."""

    monkeypatch.setattr(main, "setup_logging", lambda *a, **k: None)

    captured: dict[str, object] = {}

    def fake_scan_command(args) -> int:
        captured["args"] = args
        return 0

    monkeypatch.setattr(main, "scan_command", fake_scan_command)

    argv = [
        "csprojgraph",
        "-v",
        "scan",
        str(tmp_path),
        "-o",
        str(tmp_path / "graph.json"),
        "-c",
        "nuget.conflict_policy = 'first'",
    ]
    monkeypatch.setattr(sys, "argv", argv)

    exit_code = main.main()

    assert exit_code == 0
    parsed = captured["args"]
    assert parsed.verbose is True
    assert parsed.workdir == str(tmp_path)
    assert parsed.output == str(tmp_path / "graph.json")
    assert parsed.config == "nuget.conflict_policy = 'first'"


def test_scan_workdir_defaults_to_current_directory(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main, "setup_logging", lambda *a, **k: None)
    captured: dict[str, object] = {}

    def fake_scan_command(args) -> int:
        captured["args"] = args
        return 0

    monkeypatch.setattr(main, "scan_command", fake_scan_command)
    monkeypatch.setattr(sys, "argv", ["csprojgraph", "scan"])

    assert main.main() == 0
    assert captured["args"].workdir == "."


def test_main_requires_command(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    """Ensure missing subcommands make the CLI print help and fail."""

    monkeypatch.setattr(main, "setup_logging", lambda *a, **k: None)
    monkeypatch.setattr(sys, "argv", ["csprojgraph"])

    exit_code = main.main()

    assert exit_code == 1
    help_output = capsys.readouterr().out
    assert "csprojgraph" in help_output


def _write_workspace(tmp_path: Path) -> tuple:
    workdir = tmp_path / "repo"
    workdir.mkdir()
    (workdir / "App.csproj").write_text(
        '<Project Sdk="Microsoft.NET.Sdk"><PropertyGroup>'
        "<TargetFramework>net472</TargetFramework></PropertyGroup></Project>",
        encoding="utf-8",
    )
    (workdir / "Program.cs").write_text("class P {}\n", encoding="utf-8")

    mono = tmp_path / "mono"
    (mono / "4.6.1-api").mkdir(parents=True)
    (mono / "4.6.1-api" / "mscorlib.dll").write_bytes(b"MZ")
    config = json.dumps(
        {
            "nuget": {"package_cache": str(tmp_path / "packages")},
            "runtime": {"mono_root": str(mono)},
        }
    )
    return workdir, config


def test_scan_command_writes_json_export(tmp_path: Path) -> None:
    workdir, config = _write_workspace(tmp_path)
    output = tmp_path / "out" / "resolution.json"
    args = SimpleNamespace(workdir=str(workdir), config=config, output=str(output))

    exit_code = scan_module.scan_command(args)

    assert exit_code == 0
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["runtime"] == {
        "runtime": "mono",
        "target_framework": "net472",
        "language_version": "7.3",
    }
    assert data["build_order"] == ["App.csproj"]
    assert data["projects"][0]["source_files"] == ["Program.cs"]
    assert data["projects"][0]["libraries"] == [
        str(tmp_path / "mono" / "4.6.1-api" / "mscorlib.dll")
    ]


def test_scan_command_reports_fatal_errors(tmp_path: Path) -> None:
    args = SimpleNamespace(workdir=str(tmp_path / "missing"), config=None, output=None)

    assert scan_module.scan_command(args) == 1


def test_scan_command_rejects_invalid_config(tmp_path: Path) -> None:
    args = SimpleNamespace(
        workdir=str(tmp_path), config='{"nuget": {"conflict_policy": "lowest"}}', output=None
    )

    assert scan_module.scan_command(args) == 1
