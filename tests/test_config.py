"""Configuration schema and loader tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from csprojgraph.config.schema import NugetConfig, ParserConfig, ResolverConfig
from csprojgraph.runtime.config_loader import load_resolver_config


def test_default_configuration() -> None:
    config = load_resolver_config(None)

    assert config.parser.project_extension == "csproj"
    assert config.parser.exclude_dirs == ["bin", "obj"]
    assert config.nuget.lock_manifest == "obj/project.assets.json"
    assert config.nuget.conflict_policy == "highest"
    assert config.runtime.netstandard_runtime_alias == "netcoreapp3.1"
    assert "net48" in config.runtime.mono_target_frameworks


def test_load_from_toml_file(tmp_path: Path) -> None:
    path = tmp_path / "csprojgraph.toml"
    path.write_text(
        '[nuget]\npackage_cache = "/opt/packages"\nconflict_policy = "first"\n'
        '[runtime]\ndotnet_root = "/opt/dotnet"\n',
        encoding="utf-8",
    )

    config = load_resolver_config(path)

    assert config.nuget.cache_root() == Path("/opt/packages")
    assert config.nuget.conflict_policy == "first"
    assert config.runtime.dotnet_root == "/opt/dotnet"


def test_load_from_inline_json() -> None:
    config = load_resolver_config('{"parser": {"source_extension": ".cs", "exclude_dirs": ["bin"]}}')

    assert config.parser.source_extension == "cs"
    assert config.parser.exclude_dirs == ["bin"]


def test_round_trip_through_dict() -> None:
    original = ResolverConfig.default()

    assert ResolverConfig.from_dict(original.to_dict()) == original


def test_load_from_inline_toml() -> None:
    config = load_resolver_config('[nuget]\nlock_manifest = "obj/x.json"\n')

    assert config.nuget.lock_manifest == "obj/x.json"


def test_json_file_is_read_by_suffix(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text('  {"runtime": {"mono_root": "/opt/mono"}}', encoding="utf-8")

    assert load_resolver_config(str(path)).runtime.mono_root == "/opt/mono"


def test_json_file_must_hold_an_object(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError):
        load_resolver_config(path)


@pytest.mark.parametrize("text", ["[1, 2]", "{not json", "nuget = ["])
def test_unreadable_inline_configuration(text: str) -> None:
    with pytest.raises(ValueError):
        load_resolver_config(text)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"recognized_sdks": []},
        {"default_language_version": "99"},
        {"project_extension": "."},
    ],
)
def test_invalid_parser_config(kwargs: dict) -> None:
    with pytest.raises(ValidationError):
        ParserConfig(**kwargs)


def test_invalid_conflict_policy() -> None:
    with pytest.raises(ValidationError):
        NugetConfig(conflict_policy="lowest")


def test_package_cache_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("NUGET_PACKAGES", str(tmp_path / "cache"))

    assert NugetConfig().cache_root() == tmp_path / "cache"

    monkeypatch.delenv("NUGET_PACKAGES")
    assert NugetConfig().cache_root() == Path.home() / ".nuget" / "packages"
