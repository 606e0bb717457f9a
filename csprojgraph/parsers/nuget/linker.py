"""Map resolved packages to concrete binary paths.

For every package of a project one binary is chosen:

1. a like-named library shipped with the selected runtime wins;
2. otherwise the package cache is searched under
   ``<cache>/<name>/<version>/lib/<variant>/``, ranking the variant
   directories with an explicit compatibility table.

Runtime-provided extras (core library, ``netstandard.dll`` facade, ...) are
appended afterwards; a missing extra aborts the pass.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from csprojgraph.config.schema import ResolverConfig
from csprojgraph.graph.models.schema import ProjectDescriptor
from csprojgraph.parsers.base import MissingRuntimeLibraryError
from csprojgraph.parsers.nuget.versions import parse_version, resolve_version
from csprojgraph.runtime.runtime_config import RuntimeConfig, RuntimeFlavor

logger = logging.getLogger("csprojgraph.parsers.nuget.linker")


class VariantFamily(str, Enum):
    """Families of target-environment variant directories."""

    STANDARD = "standard"
    LEGACY = "legacy"


@dataclass(frozen=True)
class VariantRule:
    pattern: "re.Pattern[str]"
    family: VariantFamily


# Variant directory names -> family. Anything unmatched (portable-*, net6.0,
# netcoreapp*, uap*, ...) is not considered compatible.
VARIANT_RULES: Tuple[VariantRule, ...] = (
    VariantRule(re.compile(r"^netstandard(\d+)\.(\d+)$"), VariantFamily.STANDARD),
    VariantRule(re.compile(r"^net([1-4])(\d)(\d?)$"), VariantFamily.LEGACY),
)

FAMILY_PREFERENCE: Dict[RuntimeFlavor, Tuple[VariantFamily, ...]] = {
    RuntimeFlavor.DOTNET: (VariantFamily.STANDARD, VariantFamily.LEGACY),
    RuntimeFlavor.MONO: (VariantFamily.LEGACY, VariantFamily.STANDARD),
}

NETSTANDARD_DLL = "netstandard.dll"
MSCORLIB_DLL = "mscorlib.dll"
DOTNET_CORE_DLLS = ("System.Private.CoreLib.dll", "System.Runtime.dll", "System.Console.dll")
RESOURCES_SUFFIX = ".resources.dll"

_FRAMEWORK_VERSION_RE = re.compile(r"^(?:netcoreapp|net)(\d+)\.(\d+)$")


@dataclass(frozen=True)
class Variant:
    """One recognised variant directory of a package's ``lib`` tree."""

    name: str
    family: VariantFamily
    version: Tuple[int, ...]


@dataclass
class LibrarySelection:
    """Libraries chosen for one project and the extras they oblige."""

    libraries: List[str] = field(default_factory=list)
    needs_netstandard: bool = False
    needs_mscorlib: bool = False

    def add(self, path: str) -> None:
        if path not in self.libraries:
            self.libraries.append(path)


def classify_variant(name: str) -> Optional[Variant]:
    """Return the variant for a directory name, or None if unrecognised."""
    lowered = name.lower()
    for rule in VARIANT_RULES:
        match = rule.pattern.match(lowered)
        if match:
            version = tuple(int(g) for g in match.groups() if g)
            return Variant(name=name, family=rule.family, version=version)
    return None


def rank_variants(names: Sequence[str], runtime: RuntimeFlavor) -> List[Variant]:
    """Order recognised variants by family preference, newest first."""
    order = {family: i for i, family in enumerate(FAMILY_PREFERENCE[runtime])}
    variants = [v for v in (classify_variant(n) for n in names) if v is not None]

    def sort_key(variant: Variant) -> tuple:
        padded = (variant.version + (0, 0, 0))[:3]
        return (order[variant.family], tuple(-part for part in padded), variant.name)

    return sorted(variants, key=sort_key)


def framework_version_prefix(target_framework: str) -> Optional[str]:
    """Return ``major.minor`` for ``netX.Y``/``netcoreappX.Y`` monikers."""
    match = _FRAMEWORK_VERSION_RE.match(target_framework)
    if not match:
        return None
    return f"{match.group(1)}.{match.group(2)}"


class AssemblyResolver:
    """Resolve a project's packages to binaries for one runtime config."""

    def __init__(
        self, runtime_config: RuntimeConfig, config: Optional[ResolverConfig] = None
    ) -> None:
        self.runtime_config = runtime_config
        self.config = config or ResolverConfig()
        self.layout = self.config.runtime
        self.cache_root = self.config.nuget.cache_root()
        self._runtime_dir: Optional[Path] = None
        self._runtime_dir_known = False

    def runtime_library_dir(self) -> Optional[Path]:
        """Directory of the runtime-provided libraries, if it can be located."""
        if not self._runtime_dir_known:
            self._runtime_dir = self._find_runtime_library_dir()
            self._runtime_dir_known = True
            logger.debug("Runtime library directory: %s", self._runtime_dir)
        return self._runtime_dir

    def _find_runtime_library_dir(self) -> Optional[Path]:
        if self.runtime_config.runtime is RuntimeFlavor.MONO:
            return Path(self.layout.mono_root) / self.layout.mono_api_dir

        target_framework = self.runtime_config.target_framework
        if target_framework.startswith("netstandard"):
            # A library-only primary project still needs a concrete runtime.
            target_framework = self.layout.netstandard_runtime_alias

        shared = Path(self.layout.dotnet_root) / "shared" / "Microsoft.NETCore.App"
        explicit = self.layout.dotnet_framework_versions.get(target_framework)
        if explicit:
            return shared / explicit

        prefix = framework_version_prefix(target_framework)
        if prefix is None or not shared.is_dir():
            return None
        return _highest_installed(shared, prefix)

    def system_library_path(self, dll_name: str) -> Optional[Path]:
        """Return the runtime-provided copy of ``dll_name`` when it exists."""
        if (
            self.runtime_config.runtime is RuntimeFlavor.MONO
            and dll_name.lower() == NETSTANDARD_DLL
        ):
            candidate = Path(self.layout.mono_root) / self.layout.mono_facades_dir / dll_name
        else:
            directory = self.runtime_library_dir()
            if directory is None:
                return None
            candidate = directory / dll_name
        return candidate if candidate.is_file() else None

    def resolve_libraries(self, project: ProjectDescriptor) -> List[str]:
        """Return one binary per package plus the required runtime extras.

        Raises:
            MissingRuntimeLibraryError: If a required extra is not installed.
            UnsupportedVersionRangeError: If a package version cannot be resolved.
        """
        selection = LibrarySelection()
        for name, requirement in project.package_references.items():
            path = self.resolve_package(name, requirement, selection)
            if path is not None:
                selection.add(path)

        for extra in self.required_extras(selection):
            path = self.system_library_path(extra)
            if path is None:
                raise MissingRuntimeLibraryError(
                    extra,
                    self.runtime_config.runtime.value,
                    self.runtime_config.target_framework,
                )
            selection.add(str(path.absolute()))

        logger.info("Project %s: %d library file(s)", project.name, len(selection.libraries))
        return selection.libraries

    def required_extras(self, selection: LibrarySelection) -> List[str]:
        """Runtime-provided libraries not listed in project files."""
        runtime = self.runtime_config.runtime
        extras: List[str] = []
        if runtime is RuntimeFlavor.MONO or selection.needs_mscorlib:
            extras.append(MSCORLIB_DLL)
        if runtime is RuntimeFlavor.DOTNET:
            extras.extend(DOTNET_CORE_DLLS)
        if selection.needs_netstandard:
            extras.append(NETSTANDARD_DLL)
        return extras

    def resolve_package(
        self, name: str, requirement: str, selection: LibrarySelection
    ) -> Optional[str]:
        """Return the binary path of one package, or None if none is usable."""
        system_path = self.system_library_path(f"{name}.dll")
        if system_path is not None:
            logger.info("Using runtime-provided library for %s: %s", name, system_path)
            return str(system_path.absolute())

        search_path = self.cache_root / name.lower()
        if not search_path.is_dir():
            logger.warning("No local package directory for %s: %s", name, search_path)
            return None

        version = resolve_version(search_path, requirement)
        lib_dir = search_path / version / "lib"
        if not lib_dir.is_dir():
            logger.warning("No such package directory: %s", lib_dir)
            return None

        chosen = self.select_binary(lib_dir, name)
        if chosen is None:
            logger.warning("No compatible library found for %s %s", name, version)
            return None

        variant, dll = chosen
        if variant.family is VariantFamily.STANDARD:
            selection.needs_netstandard = True
        else:
            selection.needs_mscorlib = True
        logger.info("Using library %s (%s)", dll, variant.name)
        return str(dll.absolute())

    def select_binary(
        self, lib_dir: Path, package_name: str
    ) -> Optional[Tuple[Variant, Path]]:
        """Pick the best variant directory of ``lib_dir`` and a binary in it."""
        names = [p.name for p in lib_dir.iterdir() if p.is_dir()]
        wanted = f"{package_name.lower()}.dll"
        for variant in rank_variants(names, self.runtime_config.runtime):
            dlls = sorted(
                p
                for p in (lib_dir / variant.name).glob("*.dll")
                if p.is_file() and not p.name.lower().endswith(RESOURCES_SUFFIX)
            )
            if not dlls:
                continue
            preferred = [p for p in dlls if p.name.lower() == wanted]
            return variant, (preferred or dlls)[0]
        return None


def _highest_installed(shared: Path, prefix: str) -> Optional[Path]:
    candidates = []
    for entry in shared.iterdir():
        if not entry.is_dir():
            continue
        if entry.name != prefix and not entry.name.startswith(prefix + "."):
            continue
        version = parse_version(entry.name)
        if version is not None:
            candidates.append((version, entry))
    if not candidates:
        return None
    return max(candidates)[1]


__all__ = [
    "VariantFamily",
    "Variant",
    "LibrarySelection",
    "classify_variant",
    "rank_variants",
    "framework_version_prefix",
    "AssemblyResolver",
]
