"""SDK-style project file parser producing project records."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from csprojgraph.config.schema import ParserConfig
from csprojgraph.parsers.base import BaseParser, ConfigurationError
from csprojgraph.parsers.msbuild.detector import MsBuildDetector
from csprojgraph.parsers.msbuild.language import (
    LanguageVersion,
    parse_language_version,
    parse_nullable,
)
from csprojgraph.parsers.msbuild.props import expand_macro, inherited_defaults
from csprojgraph.parsers.msbuild.xml_utils import (
    child_text,
    get_attribute,
    iter_groups,
    local_name,
)
from csprojgraph.utils.path_utils import (
    canonical_project_name,
    relative_source_path,
    to_posix,
)
from csprojgraph.utils.scanner import scan_files

logger = logging.getLogger("csprojgraph.parsers.msbuild.config_parser")


@dataclass
class ProjectFile:
    """Everything read from one project file, before references are resolved."""

    name: str
    path: Path
    directory: str
    sdk: str
    target_framework: str
    language_version: LanguageVersion
    nullable: bool
    source_files: List[str] = field(default_factory=list)
    project_references: List[str] = field(default_factory=list)
    package_references: Dict[str, str] = field(default_factory=dict)


class CsprojParser(BaseParser):
    """Parse ``*.csproj`` files relative to a working directory."""

    NAME = "csproj"

    def __init__(
        self,
        workspace_root: Path,
        config: Optional[ParserConfig] = None,
        properties: Optional[Mapping[str, str]] = None,
        detector: Optional[MsBuildDetector] = None,
    ) -> None:
        super().__init__(workspace_root, config=config or ParserConfig())
        self.properties: Dict[str, str] = dict(properties or {})
        self.default_language, self.default_nullable = inherited_defaults(
            self.properties, self.config
        )
        self.detector = detector or MsBuildDetector(self.config)
        # Canonical names of every project file read so far, in read order.
        self.parsed_files: List[str] = []

    def locate(self, dir_path_rel: str) -> Optional[Tuple[str, Path]]:
        """Return the canonical name and path of the project in a directory."""
        directory = self.workspace_root / dir_path_rel
        project_file = self.detector.detect(directory)
        if project_file is None:
            return None
        return canonical_project_name(dir_path_rel, project_file.name), project_file

    def parse(self, dir_path_rel: str) -> Optional[ProjectFile]:
        """Parse the project in ``dir_path_rel``.

        Returns:
            Optional[ProjectFile]: The project, or None when the directory
            has no project file or the project has no source files.

        Raises:
            ConfigurationError: If the project file is malformed or unsupported.
        """
        located = self.locate(dir_path_rel)
        if located is None:
            return None
        name, path = located
        return self.parse_file(dir_path_rel, name, path)

    def parse_file(
        self, dir_path_rel: str, name: str, path: Path
    ) -> Optional[ProjectFile]:
        """Parse a located project file (see :meth:`parse`)."""
        logger.info("Reading project file %s", path)
        self.parsed_files.append(name)

        try:
            tree = ET.parse(path)
        except (OSError, ET.ParseError) as exc:
            raise ConfigurationError(f"Failed to parse {path}: {exc}") from exc

        root = tree.getroot()
        if local_name(root) != "Project":
            raise ConfigurationError(
                f"{path}: root element is <{local_name(root)}>, expected <Project>"
            )

        sdk = get_attribute(root, "Sdk")
        if sdk is None:
            raise ConfigurationError(f"{path}: missing Sdk attribute")
        sdk = sdk.strip()
        if sdk not in self.config.recognized_sdks:
            raise ConfigurationError(f"{path}: unsupported Sdk {sdk!r}")

        target_framework, lang_text, nullable_text = self._read_properties(root)
        if not target_framework:
            raise ConfigurationError(f"{path}: no TargetFramework declared")

        project_refs, package_refs, removes = self._read_items(root, path)

        project = ProjectFile(
            name=name,
            path=path,
            directory=dir_path_rel,
            sdk=sdk,
            target_framework=target_framework,
            language_version=parse_language_version(lang_text, self.default_language),
            nullable=parse_nullable(nullable_text, self.default_nullable),
            project_references=project_refs,
            package_references=package_refs,
        )

        project.source_files = self.discover_source_files(
            dir_path_rel, path.parent, removes
        )
        if not project.source_files:
            logger.warning("Project %s has no source files, skipping", name)
            return None

        logger.debug(
            "Parsed %s: sdk=%s tfm=%s lang=%s nullable=%s sources=%d refs=%d packages=%d",
            name,
            project.sdk,
            project.target_framework,
            project.language_version.display,
            project.nullable,
            len(project.source_files),
            len(project.project_references),
            len(project.package_references),
        )
        return project

    def discover_source_files(
        self, dir_path_rel: str, project_dir: Path, removes: List[str]
    ) -> List[str]:
        """Scan the project directory tree for source files."""
        pattern = f"*.{self.config.source_extension}"
        found = scan_files(
            project_dir,
            [pattern],
            ignore_names=list(self.config.exclude_dirs),
            exclude_globs=removes,
        )
        resolved_dir = project_dir.resolve()
        return sorted(
            relative_source_path(dir_path_rel, p, resolved_dir) for p in found
        )

    def _read_properties(
        self, root: ET.Element
    ) -> Tuple[Optional[str], Optional[str], Optional[str]]:
        target_framework: Optional[str] = None
        target_frameworks: Optional[str] = None
        lang_text: Optional[str] = None
        nullable_text: Optional[str] = None

        for group in iter_groups(root, "PropertyGroup"):
            for elem in group:
                name = local_name(elem)
                text = (elem.text or "").strip()
                if name == "TargetFramework":
                    target_framework = expand_macro(text, self.properties)
                elif name == "TargetFrameworks":
                    target_frameworks = expand_macro(text, self.properties)
                elif name == "LangVersion":
                    lang_text = text
                elif name == "Nullable":
                    nullable_text = text

        if not target_framework and target_frameworks:
            first = [t.strip() for t in target_frameworks.split(";") if t.strip()]
            if first:
                logger.info(
                    "Multi-targeting project, using first framework %s of %s",
                    first[0],
                    target_frameworks,
                )
                target_framework = first[0]

        return target_framework, lang_text, nullable_text

    def _read_items(
        self, root: ET.Element, path: Path
    ) -> Tuple[List[str], Dict[str, str], List[str]]:
        project_refs: List[str] = []
        package_refs: Dict[str, str] = {}
        removes: List[str] = []

        for group in iter_groups(root, "ItemGroup"):
            for elem in group:
                name = local_name(elem)
                if name == "ProjectReference":
                    include = get_attribute(elem, "Include")
                    if include:
                        logger.debug("Found project reference: %s", include)
                        project_refs.append(include.strip())
                elif name == "PackageReference":
                    self._add_package_reference(elem, package_refs, path)
                elif name == "Compile":
                    remove = get_attribute(elem, "Remove")
                    if remove:
                        removes.extend(_split_globs(remove))
                    include = get_attribute(elem, "Include")
                    if include:
                        logger.debug("Explicit Compile Include ignored: %s", include)

        return project_refs, package_refs, removes

    def _add_package_reference(
        self, elem: ET.Element, package_refs: Dict[str, str], path: Path
    ) -> None:
        include = get_attribute(elem, "Include")
        if not include:
            return
        include = include.strip()
        version = get_attribute(elem, "Version")
        if version is None:
            version = child_text(elem, "Version")
        if not version:
            logger.warning(
                "%s: PackageReference %s has no version, skipping", path, include
            )
            return

        version = expand_macro(version, self.properties).strip()
        if include in package_refs:
            logger.warning(
                "%s: duplicate PackageReference %s (%s), keeping %s",
                path,
                include,
                version,
                package_refs[include],
            )
            return
        logger.debug("Found package reference: %s %s", include, version)
        package_refs[include] = version


def _split_globs(value: str) -> List[str]:
    globs = []
    for part in value.split(";"):
        part = to_posix(part.strip())
        if part.startswith("./"):
            part = part[2:]
        if part:
            globs.append(part)
    return globs


__all__ = ["ProjectFile", "CsprojParser"]
