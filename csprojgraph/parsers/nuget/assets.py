"""Package-lock manifest (``project.assets.json``) reader.

The manifest's ``targets`` section holds exactly one target whose children
map ``name/version`` keys to per-package records. Records that declare
``dependencies`` become :class:`NugetDependency` entries.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping

from csprojgraph.parsers.base import LockManifestError

logger = logging.getLogger("csprojgraph.parsers.nuget.assets")


@dataclass
class NugetDependency:
    """Declared dependencies of one resolved package version."""

    name: str
    version: str
    dependencies: Dict[str, str] = field(default_factory=dict)


def read_lock_manifest(path: Path) -> List[NugetDependency]:
    """Read the dependency records of a lock manifest.

    A missing manifest yields no records; packages that need it will then
    fail later when their binaries cannot be located.

    Raises:
        LockManifestError: If the manifest exists but cannot be interpreted.
    """
    if not path.is_file():
        logger.warning(
            "File not found: %s. It is required to resolve package dependencies; "
            "try restoring the packages.",
            path,
        )
        return []

    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise LockManifestError(f"Failed to read {path}: {exc}") from exc

    try:
        return parse_lock_manifest(data)
    except LockManifestError as exc:
        raise LockManifestError(f"{path}: {exc}") from exc


def parse_lock_manifest(data: Mapping[str, Any]) -> List[NugetDependency]:
    """Extract dependency records from a parsed lock manifest."""
    if not isinstance(data, Mapping):
        raise LockManifestError("top-level value is not an object")

    targets = data.get("targets")
    if not isinstance(targets, Mapping):
        raise LockManifestError("missing 'targets' section")
    if len(targets) != 1:
        raise LockManifestError(f"'targets' has unexpected item count: {len(targets)}")

    target_name, packages = next(iter(targets.items()))
    logger.debug("Lock manifest target: %s", target_name)
    if not isinstance(packages, Mapping):
        raise LockManifestError(f"target {target_name} is not an object")

    records: List[NugetDependency] = []
    for key, record in packages.items():
        parts = key.split("/")
        if len(parts) != 2 or not all(parts):
            raise LockManifestError(f"package key parse failed for: {key}")
        name, version = parts

        if not isinstance(record, Mapping):
            raise LockManifestError(f"record for {key} is not an object")
        if record.get("type") == "project":
            continue
        deps = record.get("dependencies")
        if not deps:
            continue
        if not isinstance(deps, Mapping):
            raise LockManifestError(f"dependencies of {key} are not an object")

        entry = NugetDependency(name=name, version=version)
        for dep_name, dep_version in deps.items():
            if dep_name not in entry.dependencies:
                entry.dependencies[dep_name] = str(dep_version)
        logger.debug("Package %s %s depends on %s", name, version, entry.dependencies)
        records.append(entry)

    return records


__all__ = ["NugetDependency", "read_lock_manifest", "parse_lock_manifest"]
