"""Base detector and parser interfaces plus the resolver exception hierarchy.

Each build-descriptor flavour implements two interfaces:
1. Detector - Lightweight lookup of the descriptor file in one directory
2. Parser - Detailed parsing of that descriptor into a project record
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger("csprojgraph.parsers.base")


# =============================================================================
# Custom Exception Hierarchy
# =============================================================================

class RecoverableError(Exception):
    """Base class for recoverable business errors.

    These errors indicate expected failure conditions that can be handled
    gracefully by skipping the current candidate and continuing processing.
    """
    pass


class ConfigurationError(RecoverableError):
    """Project file error - can skip current project and continue.

    Raised when a build descriptor (e.g., App.csproj) is malformed, has no
    recognised SDK, or lacks a target framework.
    """
    pass


class DetectionError(RecoverableError):
    """Descriptor detection error - can skip current directory and continue.

    Raised when a candidate directory cannot be listed.
    """
    pass


class ResolutionError(Exception):
    """Base class for fatal errors that abort the whole resolution pass."""
    pass


class WorkspaceError(ResolutionError):
    """The working directory is missing or not a directory."""
    pass


class NoProjectsFoundError(ResolutionError):
    """No project descriptor could be parsed under the working directory."""
    pass


class NoSourceFilesError(ResolutionError):
    """The discovered projects contain no source files at all."""
    pass


class ProjectCycleError(ResolutionError):
    """A project reference chain re-enters a project still being resolved."""

    def __init__(self, cycle: list) -> None:
        self.cycle = list(cycle)
        super().__init__(
            "Project reference cycle detected: " + " -> ".join(self.cycle)
        )


class DuplicateProjectError(ResolutionError):
    """The same canonical project name was registered twice."""
    pass


class PropertyFileError(ResolutionError):
    """An inherited build-property file could not be parsed."""
    pass


class LockManifestError(ResolutionError):
    """A package-lock manifest exists but cannot be interpreted."""
    pass


class InvalidVersionRequirementError(ResolutionError):
    """A package version requirement is empty or syntactically invalid."""
    pass


class UnsupportedVersionRangeError(ResolutionError):
    """A version requirement uses a range form that is not resolved.

    Raised instead of guessing whenever a requirement cannot be mapped to a
    single installed version deterministically.
    """
    pass


class MissingRuntimeLibraryError(ResolutionError):
    """A required runtime-provided library is not installed."""

    def __init__(self, library: str, runtime: str, target_framework: str) -> None:
        self.library = library
        self.runtime = runtime
        self.target_framework = target_framework
        super().__init__(
            f"{library} not found for: {runtime} / {target_framework}"
        )


class LibrariesAlreadySetError(ResolutionError):
    """A project's library list was assigned more than once."""
    pass


class BaseDetector(ABC):
    """Base class for descriptor detectors.

    Detectors perform a lightweight lookup to identify the build descriptor
    of one candidate directory.
    """

    NAME: str = "base"

    def __init__(self, config: Optional[Any] = None) -> None:
        """Initialize detector.

        Args:
            config: Optional parser configuration slice.
        """
        self.config = config
        logger.debug("Detector %s initialized", self.NAME)

    @abstractmethod
    def detect(self, directory: Path) -> Optional[Path]:
        """Detect the descriptor file in a directory.

        Args:
            directory: Absolute directory path.

        Returns:
            Optional[Path]: Descriptor path, or None when there is none.
        """
        raise NotImplementedError


class BaseParser(ABC):
    """Base class for descriptor parsers.

    Parsers read one detected descriptor and return a structured record
    consumed by the graph builder.
    """

    NAME: str = "base"

    def __init__(
        self,
        workspace_root: Path,
        config: Optional[Any] = None,
    ) -> None:
        """Initialize parser.

        Args:
            workspace_root: Working directory every relative path refers to.
            config: Optional parser configuration.
        """
        self.workspace_root = workspace_root
        self.config = config
        logger.debug("Parser %s initialized for %s", self.NAME, workspace_root)

    @abstractmethod
    def parse(self, dir_path_rel: str) -> Optional[Any]:
        """Parse the project living in a directory.

        Args:
            dir_path_rel: Directory relative to the workspace root.

        Returns:
            Parsed record, or None when the directory holds no project.
        """
        raise NotImplementedError


__all__ = [
    "RecoverableError",
    "ConfigurationError",
    "DetectionError",
    "ResolutionError",
    "WorkspaceError",
    "NoProjectsFoundError",
    "NoSourceFilesError",
    "ProjectCycleError",
    "DuplicateProjectError",
    "PropertyFileError",
    "LockManifestError",
    "InvalidVersionRequirementError",
    "UnsupportedVersionRangeError",
    "MissingRuntimeLibraryError",
    "LibrariesAlreadySetError",
    "BaseDetector",
    "BaseParser",
]
