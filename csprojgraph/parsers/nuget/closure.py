"""Transitive package closure over lock-manifest dependency records.

This is a fixed-point expansion over a static dependency map, not a
constraint solver. The package set stays a mapping of name -> one version;
when a transitive requirement names a package that is already present at
another version, the conflict policy decides which version survives.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from csprojgraph.parsers.nuget.assets import NugetDependency
from csprojgraph.parsers.nuget.versions import compare_versions, exact_version

logger = logging.getLogger("csprojgraph.parsers.nuget.closure")

POLICY_HIGHEST = "highest"
POLICY_FIRST = "first"


@dataclass
class ClosureResult:
    """Outcome of one closure expansion."""

    added: List[str] = field(default_factory=list)
    upgraded: Dict[str, Tuple[str, str]] = field(default_factory=dict)
    iterations: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.added or self.upgraded)


def expand_package_closure(
    package_refs: Dict[str, str],
    records: Sequence[NugetDependency],
    pinned: Optional[Iterable[str]] = None,
    policy: str = POLICY_HIGHEST,
) -> ClosureResult:
    """Add every transitive dependency to ``package_refs`` in place.

    Args:
        package_refs: Package name -> version requirement; extended in place.
        records: Dependency records from the lock manifest.
        pinned: Names whose version never changes (direct references).
        policy: ``highest`` lets a higher transitive version replace a lower
            transitive one; ``first`` keeps the first version seen.

    Returns:
        ClosureResult: Names added, versions upgraded, and the number of
        passes that changed the set.
    """
    index: Dict[Tuple[str, str], NugetDependency] = {}
    for record in records:
        index.setdefault((record.name.lower(), exact_version(record.version)), record)
    pinned_keys = {name.lower() for name in (pinned or ())}
    result = ClosureResult()

    while True:
        present = {name.lower(): name for name in package_refs}
        new_refs: Dict[str, Tuple[str, str]] = {}
        upgrades: Dict[str, str] = {}

        for name, version in list(package_refs.items()):
            record = index.get((name.lower(), exact_version(version)))
            if record is None:
                continue
            for dep_name, dep_version in record.dependencies.items():
                key = dep_name.lower()
                if key in present:
                    existing = present[key]
                    if policy == POLICY_HIGHEST and key not in pinned_keys:
                        current = upgrades.get(existing, package_refs[existing])
                        if compare_versions(dep_version, current) == 1:
                            upgrades[existing] = dep_version
                    elif dep_version != package_refs[existing]:
                        logger.debug(
                            "Keeping %s %s, ignoring %s required by %s",
                            existing,
                            package_refs[existing],
                            dep_version,
                            name,
                        )
                    continue
                if key in new_refs:
                    if (
                        policy == POLICY_HIGHEST
                        and compare_versions(dep_version, new_refs[key][1]) == 1
                    ):
                        new_refs[key] = (new_refs[key][0], dep_version)
                    continue
                new_refs[key] = (dep_name, dep_version)

        if not new_refs and not upgrades:
            break

        result.iterations += 1
        logger.debug(
            "Closure pass %d: %d package(s), %d new, %d upgraded",
            result.iterations,
            len(package_refs),
            len(new_refs),
            len(upgrades),
        )

        for dep_name, dep_version in new_refs.values():
            package_refs[dep_name] = dep_version
            result.added.append(dep_name)

        for existing, new_version in upgrades.items():
            old_version = package_refs[existing]
            logger.info(
                "Version conflict for %s: %s replaced by higher %s",
                existing,
                old_version,
                new_version,
            )
            package_refs[existing] = new_version
            first_old = result.upgraded.get(existing, (old_version, new_version))[0]
            result.upgraded[existing] = (first_old, new_version)

    return result


__all__ = [
    "POLICY_HIGHEST",
    "POLICY_FIRST",
    "ClosureResult",
    "expand_package_closure",
]
