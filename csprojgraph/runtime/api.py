"""Library-facing entry point for a full resolution pass.

``resolve_workspace`` discovers the project graph under a working
directory, selects the runtime configuration once, then completes every
project's package closure and binary list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

import networkx as nx

from csprojgraph.config.schema import ResolverConfig
from csprojgraph.graph.builder import ProjectGraphBuilder, build_order
from csprojgraph.graph.models.schema import ProjectDescriptor
from csprojgraph.parsers.base import (
    NoProjectsFoundError,
    NoSourceFilesError,
    WorkspaceError,
)
from csprojgraph.parsers.msbuild.config_parser import CsprojParser
from csprojgraph.parsers.msbuild.props import resolve_build_properties
from csprojgraph.parsers.nuget.assets import read_lock_manifest
from csprojgraph.parsers.nuget.closure import expand_package_closure
from csprojgraph.parsers.nuget.linker import AssemblyResolver
from csprojgraph.runtime.runtime_config import RuntimeConfig, select_runtime_config

logger = logging.getLogger("csprojgraph.runtime.api")


@dataclass
class WorkspaceResolution:
    """Result of one resolution pass.

    Attributes:
        working_directory: Absolute working directory.
        projects: Resolved projects in discovery order.
        runtime: Runtime configuration shared by every project.
        graph: Project reference graph (A -> B when A references B).
        root_project: Canonical name of the root project.
    """

    working_directory: Path
    projects: List[ProjectDescriptor]
    runtime: RuntimeConfig
    graph: nx.DiGraph = field(default_factory=nx.DiGraph)
    root_project: Optional[str] = None

    def get_project(self, name: str) -> Optional[ProjectDescriptor]:
        for project in self.projects:
            if project.name == name:
                return project
        return None

    def build_order(self) -> List[str]:
        """Project names, every project after the projects it references."""
        return build_order(self.graph)


def resolve_workspace(
    working_dir: Union[str, Path], config: Optional[ResolverConfig] = None
) -> WorkspaceResolution:
    """Resolve the project graph rooted at ``working_dir``.

    Args:
        working_dir: Directory holding the root project file.
        config: Optional ResolverConfig. When omitted,
            ``ResolverConfig.default()`` is used.

    Returns:
        WorkspaceResolution with every project's libraries set.

    Raises:
        ResolutionError: Any fatal condition of the pass.
    """
    config = config or ResolverConfig.default()
    root = Path(working_dir).expanduser()
    if not root.is_dir():
        raise WorkspaceError(f"Working directory does not exist: {root}")
    root = root.resolve()
    logger.info("Resolving workspace %s", root)

    properties = resolve_build_properties(root, config.parser.props_file_name)
    parser = CsprojParser(root, config=config.parser, properties=properties)
    builder = ProjectGraphBuilder(root, parser)
    projects = builder.build(".")

    if not projects:
        raise NoProjectsFoundError(f"No valid projects found in {root}")
    if not any(project.source_files for project in projects):
        raise NoSourceFilesError(f"No source files found in {root}")

    runtime = select_runtime_config(projects, builder.root_name, config.runtime)
    resolver = AssemblyResolver(runtime, config)

    resolved: List[ProjectDescriptor] = []
    for project in projects:
        resolved.append(_complete_project(root, project, resolver, config))

    return WorkspaceResolution(
        working_directory=root,
        projects=resolved,
        runtime=runtime,
        graph=builder.graph,
        root_project=builder.root_name,
    )


def _complete_project(
    root: Path,
    project: ProjectDescriptor,
    resolver: AssemblyResolver,
    config: ResolverConfig,
) -> ProjectDescriptor:
    manifest = root / project.directory / config.nuget.lock_manifest
    records = read_lock_manifest(manifest)

    pinned = list(project.package_references)
    closure = expand_package_closure(
        project.package_references,
        records,
        pinned=pinned,
        policy=config.nuget.conflict_policy,
    )
    if closure.changed:
        logger.info(
            "Project %s: %d package(s) added, %d upgraded",
            project.name,
            len(closure.added),
            len(closure.upgraded),
        )

    return project.with_libraries(resolver.resolve_libraries(project))


__all__ = ["WorkspaceResolution", "resolve_workspace"]
