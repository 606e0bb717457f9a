"""Project descriptor model handed to the compiler/workspace service.

Descriptors are immutable: the library list is filled in by producing a
new descriptor with :meth:`ProjectDescriptor.with_libraries`, which may
only happen once. The package-reference mapping is the one mutable part;
the closure resolver extends it in place before libraries are resolved.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

from csprojgraph.parsers.base import LibrariesAlreadySetError
from csprojgraph.parsers.msbuild.language import LanguageVersion
from csprojgraph.utils.path_utils import project_directory

logger = logging.getLogger("csprojgraph.graph.models.schema")


@dataclass(frozen=True)
class ProjectDescriptor:
    """One compilable project.

    Attributes:
        name: Canonical project name (posix path of the project file
            relative to the working directory).
        target_framework: Target framework moniker, e.g. ``net6.0``.
        source_files: Source files relative to the working directory.
        project_references: Canonical names of referenced projects.
        package_references: Package name -> version requirement.
        language_version: Language version used by the project.
        nullable: Whether nullable reference types are enabled.
        libraries: Absolute binary paths, ``None`` until resolved.
    """

    name: str
    target_framework: str
    source_files: Tuple[str, ...] = ()
    project_references: Tuple[str, ...] = ()
    # Mutable, so left out of the hash.
    package_references: Dict[str, str] = field(default_factory=dict, hash=False)
    language_version: LanguageVersion = LanguageVersion.CSHARP7_3
    nullable: bool = False
    libraries: Optional[Tuple[str, ...]] = None

    @property
    def directory(self) -> str:
        """Project directory relative to the working directory."""
        return project_directory(self.name)

    def with_libraries(self, libraries: Iterable[str]) -> "ProjectDescriptor":
        """Return a copy of this descriptor with its library list set.

        Raises:
            LibrariesAlreadySetError: If the libraries are already set.
        """
        if self.libraries is not None:
            raise LibrariesAlreadySetError(
                f"Libraries of {self.name} are set already"
            )
        return dataclasses.replace(self, libraries=tuple(libraries))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "target_framework": self.target_framework,
            "source_files": list(self.source_files),
            "project_references": list(self.project_references),
            "package_references": dict(self.package_references),
            "language_version": self.language_version.display,
            "nullable": self.nullable,
            "libraries": list(self.libraries) if self.libraries is not None else None,
        }


__all__ = ["ProjectDescriptor"]
