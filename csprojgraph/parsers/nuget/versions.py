"""Package version requirement handling.

Only the requirement forms needed to pick one installed version directory
are supported: an exact bare version, and the exact-match range ``[X]``.
Every other range form fails loudly instead of approximating.
"""

import logging
from pathlib import Path
from typing import Optional

from packaging.version import InvalidVersion
from packaging.version import Version as PkgVersion

from csprojgraph.parsers.base import (
    InvalidVersionRequirementError,
    UnsupportedVersionRangeError,
)

logger = logging.getLogger("csprojgraph.parsers.nuget.versions")

_RANGE_OPENERS = ("[", "(")
_RANGE_CLOSERS = ("]", ")")


def is_range(requirement: str) -> bool:
    return any(c in requirement for c in _RANGE_OPENERS + _RANGE_CLOSERS)


def resolve_version(search_path: Path, requirement: str) -> str:
    """Map a version requirement to one installed version directory name.

    Args:
        search_path: Package directory in the local cache
            (``<cache>/<lower-cased package name>``).
        requirement: Version requirement as written in the project.

    Returns:
        str: The version directory name.

    Raises:
        InvalidVersionRequirementError: If the requirement is empty or malformed.
        UnsupportedVersionRangeError: If the requirement cannot be mapped to
            a single version deterministically.
    """
    if requirement is None or not requirement.strip():
        raise InvalidVersionRequirementError("Package version is empty")

    requirement = requirement.strip()
    ranged = is_range(requirement)
    wildcard = "*" in requirement

    logger.debug(
        "Resolving version %s (range=%s, wildcard=%s)", requirement, ranged, wildcard
    )

    if ranged and wildcard:
        raise UnsupportedVersionRangeError(
            f"Floating version ranges are not supported: {requirement}"
        )

    if not ranged:
        if wildcard:
            raise UnsupportedVersionRangeError(
                f"Floating versions are not supported: {requirement}"
            )
        # A bare version means "minimum version, inclusive"; only an exact
        # installed match is accepted.
        for candidate in (requirement, requirement.lower()):
            if (search_path / candidate).is_dir():
                return candidate
        raise UnsupportedVersionRangeError(
            f"Version {requirement} is not installed under {search_path}; "
            "resolving a minimum-inclusive version to a higher one is not supported"
        )

    if requirement[0] not in _RANGE_OPENERS:
        raise InvalidVersionRequirementError(
            f"Invalid range start {requirement[0]!r} in {requirement}"
        )
    if requirement[-1] not in _RANGE_CLOSERS:
        raise InvalidVersionRequirementError(
            f"Invalid range end {requirement[-1]!r} in {requirement}"
        )

    if "," not in requirement and requirement[0] == "[" and requirement[-1] == "]":
        exact = requirement[1:-1].strip()
        if not exact:
            raise InvalidVersionRequirementError(f"Empty exact range: {requirement}")
        return exact

    raise UnsupportedVersionRangeError(
        f"Version range is not supported: {requirement}"
    )


def exact_version(requirement: str) -> str:
    """Return ``X`` for an exact range ``[X]``, else the requirement itself."""
    stripped = requirement.strip()
    if (
        len(stripped) > 2
        and stripped[0] == "["
        and stripped[-1] == "]"
        and "," not in stripped
    ):
        return stripped[1:-1].strip()
    return stripped


def version_floor(requirement: str) -> str:
    """Return the lower bound written in a requirement.

    Examples:
        >>> version_floor("4.3.0")
        '4.3.0'
        >>> version_floor("[1.0.0, 2.0.0)")
        '1.0.0'
    """
    stripped = requirement.strip()
    if stripped[:1] in _RANGE_OPENERS:
        stripped = stripped[1:]
    if stripped[-1:] in _RANGE_CLOSERS:
        stripped = stripped[:-1]
    return stripped.split(",", 1)[0].strip()


def parse_version(text: str) -> Optional[PkgVersion]:
    try:
        return PkgVersion(text)
    except InvalidVersion:
        logger.debug("Unparseable version %r", text)
        return None


def compare_versions(left: str, right: str) -> Optional[int]:
    """Compare the floors of two requirements.

    Returns:
        Optional[int]: -1, 0 or 1, or None when either side is unparseable.
    """
    a = parse_version(version_floor(left))
    b = parse_version(version_floor(right))
    if a is None or b is None:
        return None
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


__all__ = [
    "resolve_version",
    "exact_version",
    "version_floor",
    "parse_version",
    "compare_versions",
]
