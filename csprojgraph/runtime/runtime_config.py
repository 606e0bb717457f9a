"""Process-wide runtime configuration derived from the project set."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Sequence

from csprojgraph.config.schema import DEFAULT_MONO_TARGET_FRAMEWORKS, RuntimeLayoutConfig
from csprojgraph.graph.models.schema import ProjectDescriptor
from csprojgraph.parsers.base import NoProjectsFoundError
from csprojgraph.parsers.msbuild.language import LanguageVersion

logger = logging.getLogger("csprojgraph.runtime.runtime_config")


class RuntimeFlavor(str, Enum):
    """Binary-layout family a resolved project set runs on."""

    MONO = "mono"
    DOTNET = "dotnet"


@dataclass(frozen=True)
class RuntimeConfig:
    """Runtime flavor, target framework and language version for one pass."""

    runtime: RuntimeFlavor
    target_framework: str
    language_version: LanguageVersion

    def to_dict(self) -> Dict[str, Any]:
        return {
            "runtime": self.runtime.value,
            "target_framework": self.target_framework,
            "language_version": self.language_version.display,
        }


def select_runtime_flavor(
    target_framework: str, mono_frameworks: Optional[Iterable[str]] = None
) -> RuntimeFlavor:
    """Pick the runtime flavor for a target framework.

    Older .NET Framework and early .NET Core monikers run on mono; every
    other moniker, ``netstandard*`` included, runs on dotnet.
    """
    frameworks = set(
        mono_frameworks if mono_frameworks is not None else DEFAULT_MONO_TARGET_FRAMEWORKS
    )
    if target_framework in frameworks:
        return RuntimeFlavor.MONO
    return RuntimeFlavor.DOTNET


def select_runtime_config(
    projects: Sequence[ProjectDescriptor],
    root_name: Optional[str] = None,
    config: Optional[RuntimeLayoutConfig] = None,
) -> RuntimeConfig:
    """Derive the runtime configuration from the assembled project set.

    Args:
        projects: Every project of the graph.
        root_name: Canonical name of the primary project. Defaults to the
            last project in discovery order, which is the root.
        config: Runtime layout configuration.

    Raises:
        NoProjectsFoundError: If ``projects`` is empty.
    """
    if not projects:
        raise NoProjectsFoundError("Cannot select a runtime without projects")
    config = config or RuntimeLayoutConfig()

    primary = projects[-1]
    if root_name is not None:
        primary = next((p for p in projects if p.name == root_name), primary)

    runtime = select_runtime_flavor(primary.target_framework, config.mono_target_frameworks)
    language = max(p.language_version for p in projects)

    runtime_config = RuntimeConfig(
        runtime=runtime,
        target_framework=primary.target_framework,
        language_version=language,
    )
    logger.info(
        "Runtime config: runtime=%s target_framework=%s language_version=%s",
        runtime.value,
        primary.target_framework,
        language.display,
    )
    return runtime_config


__all__ = [
    "RuntimeFlavor",
    "RuntimeConfig",
    "select_runtime_flavor",
    "select_runtime_config",
]
