"""Binary path resolution tests against a fake runtime and package cache."""

from __future__ import annotations

from pathlib import Path

import pytest

from csprojgraph.config.schema import ResolverConfig
from csprojgraph.graph.models.schema import ProjectDescriptor
from csprojgraph.parsers.base import MissingRuntimeLibraryError
from csprojgraph.parsers.msbuild.language import LanguageVersion
from csprojgraph.parsers.nuget.linker import (
    AssemblyResolver,
    VariantFamily,
    classify_variant,
    framework_version_prefix,
    rank_variants,
)
from csprojgraph.runtime.runtime_config import RuntimeConfig, RuntimeFlavor

DOTNET_CORE = ["System.Private.CoreLib.dll", "System.Runtime.dll", "System.Console.dll"]


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"MZ")
    return path


def _config(tmp_path: Path, **runtime) -> ResolverConfig:
    return ResolverConfig.from_dict(
        {
            "nuget": {"package_cache": str(tmp_path / "packages")},
            "runtime": {
                "mono_root": str(tmp_path / "mono"),
                "dotnet_root": str(tmp_path / "dotnet"),
                **runtime,
            },
        }
    )


def _dotnet_dir(tmp_path: Path, version: str = "6.0.25") -> Path:
    shared = tmp_path / "dotnet" / "shared" / "Microsoft.NETCore.App" / version
    for name in DOTNET_CORE + ["mscorlib.dll", "netstandard.dll"]:
        _touch(shared / name)
    return shared


def _mono_dirs(tmp_path: Path) -> Path:
    api = tmp_path / "mono" / "4.6.1-api"
    _touch(api / "mscorlib.dll")
    _touch(tmp_path / "mono" / "4.5" / "Facades" / "netstandard.dll")
    return api


def _package(tmp_path: Path, name: str, version: str, variant: str, dll: str = "") -> Path:
    dll = dll or f"{name}.dll"
    return _touch(tmp_path / "packages" / name.lower() / version / "lib" / variant / dll)


def _project(packages: dict) -> ProjectDescriptor:
    return ProjectDescriptor(
        name="App.csproj",
        target_framework="net6.0",
        source_files=("Program.cs",),
        package_references=packages,
    )


def _dotnet(tfm: str = "net6.0") -> RuntimeConfig:
    return RuntimeConfig(RuntimeFlavor.DOTNET, tfm, LanguageVersion.CSHARP10)


def _mono(tfm: str = "net472") -> RuntimeConfig:
    return RuntimeConfig(RuntimeFlavor.MONO, tfm, LanguageVersion.CSHARP7_3)


def test_classify_variant() -> None:
    assert classify_variant("netstandard2.0").family is VariantFamily.STANDARD
    assert classify_variant("net472").family is VariantFamily.LEGACY
    assert classify_variant("net472").version == (4, 7, 2)
    assert classify_variant("net6.0") is None
    assert classify_variant("portable-net45+win8") is None


def test_rank_variants_uses_compatibility_table() -> None:
    names = ["net45", "netstandard1.3", "net6.0", "netstandard2.0", "net461"]

    dotnet = [v.name for v in rank_variants(names, RuntimeFlavor.DOTNET)]
    mono = [v.name for v in rank_variants(names, RuntimeFlavor.MONO)]

    assert dotnet == ["netstandard2.0", "netstandard1.3", "net461", "net45"]
    assert mono == ["net461", "net45", "netstandard2.0", "netstandard1.3"]


def test_framework_version_prefix() -> None:
    assert framework_version_prefix("net6.0") == "6.0"
    assert framework_version_prefix("netcoreapp3.1") == "3.1"
    assert framework_version_prefix("net48") is None


def test_dotnet_runtime_dir_picks_highest_installed_patch(tmp_path: Path) -> None:
    _dotnet_dir(tmp_path, "6.0.5")
    expected = _dotnet_dir(tmp_path, "6.0.25")
    _dotnet_dir(tmp_path, "7.0.1")

    resolver = AssemblyResolver(_dotnet(), _config(tmp_path))

    assert resolver.runtime_library_dir() == expected


def test_dotnet_runtime_dir_honours_configured_version(tmp_path: Path) -> None:
    resolver = AssemblyResolver(
        _dotnet(), _config(tmp_path, dotnet_framework_versions={"net6.0": "6.0.1"})
    )

    assert resolver.runtime_library_dir().name == "6.0.1"


def test_netstandard_primary_uses_runtime_alias(tmp_path: Path) -> None:
    expected = _dotnet_dir(tmp_path, "3.1.32")

    resolver = AssemblyResolver(_dotnet("netstandard2.0"), _config(tmp_path))

    assert resolver.runtime_library_dir() == expected


def test_project_without_packages_gets_only_extras(tmp_path: Path) -> None:
    shared = _dotnet_dir(tmp_path)

    libraries = AssemblyResolver(_dotnet(), _config(tmp_path)).resolve_libraries(_project({}))

    assert libraries == [str(shared / name) for name in DOTNET_CORE]


def test_package_and_dependency_resolve_to_two_binaries_plus_extras(tmp_path: Path) -> None:
    shared = _dotnet_dir(tmp_path)
    p_dll = _package(tmp_path, "P", "1.0.0", "netstandard2.0")
    q_dll = _package(tmp_path, "Q", "2.0.0", "netstandard2.0")

    libraries = AssemblyResolver(_dotnet(), _config(tmp_path)).resolve_libraries(
        _project({"P": "1.0.0", "Q": "2.0.0"})
    )

    assert libraries == [str(p_dll), str(q_dll)] + [
        str(shared / name) for name in DOTNET_CORE + ["netstandard.dll"]
    ]


def test_runtime_provided_binary_wins_over_cache(tmp_path: Path) -> None:
    shared = _dotnet_dir(tmp_path)
    _touch(shared / "System.Text.Json.dll")
    _package(tmp_path, "System.Text.Json", "6.0.0", "netstandard2.0")

    libraries = AssemblyResolver(_dotnet(), _config(tmp_path)).resolve_libraries(
        _project({"System.Text.Json": "6.0.0"})
    )

    assert libraries[0] == str(shared / "System.Text.Json.dll")
    assert str(shared / "netstandard.dll") not in libraries


def test_mono_prefers_legacy_variant_and_adds_mscorlib(tmp_path: Path) -> None:
    api = _mono_dirs(tmp_path)
    legacy = _package(tmp_path, "Newtonsoft.Json", "12.0.3", "net45")
    _package(tmp_path, "Newtonsoft.Json", "12.0.3", "netstandard2.0")

    libraries = AssemblyResolver(_mono(), _config(tmp_path)).resolve_libraries(
        _project({"Newtonsoft.Json": "12.0.3"})
    )

    assert libraries == [str(legacy), str(api / "mscorlib.dll")]


def test_mono_standard_variant_uses_facade_netstandard(tmp_path: Path) -> None:
    api = _mono_dirs(tmp_path)
    standard = _package(tmp_path, "Lib", "1.0.0", "netstandard2.0")

    libraries = AssemblyResolver(_mono(), _config(tmp_path)).resolve_libraries(
        _project({"Lib": "[1.0.0]"})
    )

    facade = tmp_path / "mono" / "4.5" / "Facades" / "netstandard.dll"
    assert libraries == [str(standard), str(api / "mscorlib.dll"), str(facade)]


def test_dotnet_legacy_only_package_requires_mscorlib(tmp_path: Path) -> None:
    shared = _dotnet_dir(tmp_path)
    legacy = _package(tmp_path, "Old", "1.0.0", "net40")

    libraries = AssemblyResolver(_dotnet(), _config(tmp_path)).resolve_libraries(
        _project({"Old": "1.0.0"})
    )

    assert libraries[0] == str(legacy)
    assert str(shared / "mscorlib.dll") in libraries


def test_named_binary_is_preferred_inside_variant(tmp_path: Path) -> None:
    _dotnet_dir(tmp_path)
    _package(tmp_path, "Pkg", "1.0.0", "netstandard2.0", dll="A.Helper.dll")
    named = _package(tmp_path, "Pkg", "1.0.0", "netstandard2.0", dll="Pkg.dll")

    libraries = AssemblyResolver(_dotnet(), _config(tmp_path)).resolve_libraries(
        _project({"Pkg": "1.0.0"})
    )

    assert libraries[0] == str(named)


def test_localized_resources_are_never_selected(tmp_path: Path) -> None:
    _dotnet_dir(tmp_path)
    core = _package(tmp_path, "My.Pkg", "1.0.0", "netstandard2.0", dll="mypkg.core.dll")
    _package(tmp_path, "My.Pkg", "1.0.0", "netstandard2.0", dll="cs/mypkg.core.resources.dll")
    _package(tmp_path, "My.Pkg", "1.0.0", "netstandard2.0", dll="aa.resources.dll")

    libraries = AssemblyResolver(_dotnet(), _config(tmp_path)).resolve_libraries(
        _project({"My.Pkg": "1.0.0"})
    )

    assert libraries[0] == str(core)


def test_missing_package_directories_are_skipped(tmp_path: Path) -> None:
    shared = _dotnet_dir(tmp_path)
    (tmp_path / "packages" / "nolib" / "1.0.0").mkdir(parents=True)
    _package(tmp_path, "Unknown", "1.0.0", "portable-net45+win8")

    libraries = AssemblyResolver(_dotnet(), _config(tmp_path)).resolve_libraries(
        _project({"Absent": "1.0.0", "NoLib": "1.0.0", "Unknown": "1.0.0"})
    )

    assert libraries == [str(shared / name) for name in DOTNET_CORE]


def test_missing_extra_is_fatal(tmp_path: Path) -> None:
    resolver = AssemblyResolver(_mono(), _config(tmp_path))

    with pytest.raises(MissingRuntimeLibraryError) as excinfo:
        resolver.resolve_libraries(_project({}))

    assert "mscorlib.dll" in str(excinfo.value)
