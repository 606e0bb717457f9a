"""C# language version and nullable-mode values as written in project files."""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Optional

logger = logging.getLogger("csprojgraph.parsers.msbuild.language")


class LanguageVersion(IntEnum):
    """Language versions, numbered so that ``max()`` picks the newest.

    ``DEFAULT`` sorts lowest; ``LATEST_MAJOR``, ``PREVIEW`` and ``LATEST``
    sort above every numbered version.
    """

    DEFAULT = 0
    CSHARP1 = 1
    CSHARP2 = 2
    CSHARP3 = 3
    CSHARP4 = 4
    CSHARP5 = 5
    CSHARP6 = 6
    CSHARP7 = 7
    CSHARP7_1 = 701
    CSHARP7_2 = 702
    CSHARP7_3 = 703
    CSHARP8 = 800
    CSHARP9 = 900
    CSHARP10 = 1000
    CSHARP11 = 1100
    CSHARP12 = 1200
    LATEST_MAJOR = 2**31 - 3
    PREVIEW = 2**31 - 2
    LATEST = 2**31 - 1

    @property
    def display(self) -> str:
        """Return the spelling used in project files (``7.3``, ``latest``)."""
        for text, member in _LANGUAGE_VERSIONS.items():
            if member is self:
                return text
        return self.name.lower()


_LANGUAGE_VERSIONS = {
    "default": LanguageVersion.DEFAULT,
    "iso-1": LanguageVersion.CSHARP1,
    "iso-2": LanguageVersion.CSHARP2,
    "3": LanguageVersion.CSHARP3,
    "4": LanguageVersion.CSHARP4,
    "5": LanguageVersion.CSHARP5,
    "6": LanguageVersion.CSHARP6,
    "7": LanguageVersion.CSHARP7,
    "7.1": LanguageVersion.CSHARP7_1,
    "7.2": LanguageVersion.CSHARP7_2,
    "7.3": LanguageVersion.CSHARP7_3,
    "8.0": LanguageVersion.CSHARP8,
    "9.0": LanguageVersion.CSHARP9,
    "10.0": LanguageVersion.CSHARP10,
    "11.0": LanguageVersion.CSHARP11,
    "12.0": LanguageVersion.CSHARP12,
    "latestmajor": LanguageVersion.LATEST_MAJOR,
    "preview": LanguageVersion.PREVIEW,
    "latest": LanguageVersion.LATEST,
}

# Alternate spellings accepted by the compiler.
_ALIASES = {
    "1": "iso-1",
    "2": "iso-2",
    "3.0": "3",
    "4.0": "4",
    "5.0": "5",
    "6.0": "6",
    "7.0": "7",
    "8": "8.0",
    "9": "9.0",
    "10": "10.0",
    "11": "11.0",
    "12": "12.0",
}

_NULLABLE_ENABLED = {"enable", "warnings", "annotations"}
_NULLABLE_DISABLED = {"disable"}


def lookup_language_version(text: Optional[str]) -> Optional[LanguageVersion]:
    """Map a ``LangVersion`` value to a LanguageVersion, or None if unknown."""
    if text is None:
        return None
    key = text.strip().lower()
    key = _ALIASES.get(key, key)
    return _LANGUAGE_VERSIONS.get(key)


def parse_language_version(
    text: Optional[str], fallback: LanguageVersion
) -> LanguageVersion:
    """Parse a ``LangVersion`` value, keeping ``fallback`` when absent or unknown."""
    if text is None:
        return fallback
    parsed = lookup_language_version(text)
    if parsed is None:
        logger.warning("Unknown LangVersion %r, keeping %s", text, fallback.display)
        return fallback
    return parsed


def parse_nullable(text: Optional[str], fallback: bool) -> bool:
    """Parse a ``Nullable`` value, keeping ``fallback`` when absent or unknown."""
    if text is None:
        return fallback
    key = text.strip().lower()
    if key in _NULLABLE_ENABLED:
        return True
    if key in _NULLABLE_DISABLED:
        return False
    logger.warning("Unknown Nullable value %r, keeping %s", text, fallback)
    return fallback


__all__ = [
    "LanguageVersion",
    "lookup_language_version",
    "parse_language_version",
    "parse_nullable",
]
