"""Project graph builder.

Starting from the root project directory, project references are followed
recursively. Every physical project is parsed at most once: a canonical
name that has already been resolved short-circuits, and a name that is
still being resolved further up the call stack is a reference cycle.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Set

import networkx as nx

from csprojgraph.graph.models.schema import ProjectDescriptor
from csprojgraph.parsers.base import (
    DuplicateProjectError,
    ProjectCycleError,
    RecoverableError,
)
from csprojgraph.parsers.msbuild.config_parser import CsprojParser, ProjectFile
from csprojgraph.utils.path_utils import (
    normalize_rel_path,
    project_directory,
    resolve_reference,
)

logger = logging.getLogger("csprojgraph.graph.builder")


class ProjectGraphBuilder:
    """Resolve project references into a flat, deduplicated project list.

    Children are appended before their parents, but consumers should look
    projects up by name rather than rely on list order.
    """

    def __init__(self, working_dir: Path, parser: CsprojParser) -> None:
        self.working_dir = Path(working_dir).resolve()
        self.parser = parser
        self.projects: List[ProjectDescriptor] = []
        self.root_name: Optional[str] = None
        self._by_name: Dict[str, ProjectDescriptor] = {}
        self._in_progress: List[str] = []
        # Names whose project file was read and turned out not to be a project.
        self._rejected: Set[str] = set()
        self._graph = nx.DiGraph()

    @property
    def graph(self) -> nx.DiGraph:
        """Reference graph; an edge A -> B means A references B."""
        return self._graph

    def get(self, name: str) -> Optional[ProjectDescriptor]:
        return self._by_name.get(name)

    def build(self, root_dir: str = ".") -> List[ProjectDescriptor]:
        """Discover the project graph rooted at ``root_dir``.

        Returns:
            List[ProjectDescriptor]: Projects in discovery order (empty when
            no valid project was found at the root).

        Raises:
            ProjectCycleError: If project references form a cycle.
        """
        try:
            self.root_name = self._resolve(normalize_rel_path(root_dir), 0)
        except RecoverableError as exc:
            logger.warning("Failed to read root project in %s: %s", root_dir, exc)
            self.root_name = None

        logger.info(
            "Project graph: %d project(s), %d reference(s)",
            self._graph.number_of_nodes(),
            self._graph.number_of_edges(),
        )
        return list(self.projects)

    def _resolve(self, dir_path_rel: str, depth: int) -> Optional[str]:
        logger.debug("Resolving project in %s (depth=%d)", dir_path_rel, depth)

        located = self.parser.locate(dir_path_rel)
        if located is None:
            logger.info("No project file found in %s", dir_path_rel)
            return None
        name, path = located

        if name in self._by_name:
            logger.debug("Project %s already resolved", name)
            return name

        if name in self._in_progress:
            start = self._in_progress.index(name)
            raise ProjectCycleError(self._in_progress[start:] + [name])

        if name in self._rejected:
            logger.debug("Project %s was rejected before", name)
            return None

        try:
            project_file = self.parser.parse_file(dir_path_rel, name, path)
        except RecoverableError:
            self._rejected.add(name)
            raise
        if project_file is None:
            self._rejected.add(name)
            return None

        self._in_progress.append(name)
        try:
            references: List[str] = []
            for reference in project_file.project_references:
                child = self._resolve_reference(project_file, reference, depth)
                if child is not None and child not in references:
                    references.append(child)
        finally:
            self._in_progress.pop()

        self._register(
            ProjectDescriptor(
                name=name,
                target_framework=project_file.target_framework,
                source_files=tuple(project_file.source_files),
                project_references=tuple(references),
                package_references=dict(project_file.package_references),
                language_version=project_file.language_version,
                nullable=project_file.nullable,
            )
        )
        return name

    def _resolve_reference(
        self, project_file: ProjectFile, reference: str, depth: int
    ) -> Optional[str]:
        target = resolve_reference(self.working_dir, project_file.directory, reference)
        logger.debug("%s references %s -> %s", project_file.name, reference, target)

        try:
            child = self._resolve(project_directory(target), depth + 1)
        except RecoverableError as exc:
            logger.warning(
                "Failed to read project %s referenced by %s: %s",
                target,
                project_file.name,
                exc,
            )
            return None

        if child is None:
            logger.warning(
                "Dropping reference %s from %s: no valid project found",
                reference,
                project_file.name,
            )
        return child

    def _register(self, descriptor: ProjectDescriptor) -> None:
        if descriptor.name in self._by_name:
            raise DuplicateProjectError(
                f"Project {descriptor.name} registered twice"
            )
        self._by_name[descriptor.name] = descriptor
        self.projects.append(descriptor)

        self._graph.add_node(
            descriptor.name, target_framework=descriptor.target_framework
        )
        for child in descriptor.project_references:
            self._graph.add_edge(descriptor.name, child)
        logger.info("Added project %s", descriptor.name)


def build_order(graph: nx.DiGraph) -> List[str]:
    """Return project names with every project after the ones it references."""
    return list(reversed(list(nx.lexicographical_topological_sort(graph))))


__all__ = ["ProjectGraphBuilder", "build_order"]
