"""Inherited build properties from the nearest ``Directory.Build.props``.

The props file is looked up from a starting directory upwards until the
filesystem root; the nearest one wins. Its property groups are flattened
into a ``"$(Name)" -> value`` mapping so that project files can substitute
macro values directly.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from csprojgraph.config.schema import ParserConfig
from csprojgraph.parsers.base import PropertyFileError
from csprojgraph.parsers.msbuild.language import (
    LanguageVersion,
    lookup_language_version,
    parse_language_version,
    parse_nullable,
)
from csprojgraph.parsers.msbuild.xml_utils import iter_groups, local_name

logger = logging.getLogger("csprojgraph.parsers.msbuild.props")

DEFAULT_PROPS_FILE = "Directory.Build.props"

_MACRO_RE = re.compile(r"^\$\(([A-Za-z_][A-Za-z0-9_.\-]*)\)$")


def macro_name(name: str) -> str:
    """Return the macro key used for a property name (``$(Name)``)."""
    return f"$({name})"


def find_props_file(
    start_dir: Path, file_name: str = DEFAULT_PROPS_FILE
) -> Optional[Path]:
    """Find the nearest props file in ``start_dir`` or any ancestor.

    Args:
        start_dir: Directory to start from.
        file_name: Props file name.

    Returns:
        Optional[Path]: The nearest props file, or None.
    """
    current = Path(start_dir).resolve()
    for directory in (current, *current.parents):
        candidate = directory / file_name
        if candidate.is_file():
            logger.info("Found build properties file: %s", candidate)
            return candidate
    return None


def read_build_properties(path: Path) -> Dict[str, str]:
    """Parse every property group of a props file into a macro mapping.

    Only attribute-less property elements are taken; conditional ones
    depend on evaluation that is not performed here.

    Raises:
        PropertyFileError: If the file cannot be read or parsed.
    """
    try:
        tree = ET.parse(path)
    except (OSError, ET.ParseError) as exc:
        raise PropertyFileError(f"Failed to parse {path}: {exc}") from exc

    props: Dict[str, str] = {}
    for group in iter_groups(tree.getroot(), "PropertyGroup"):
        for elem in group:
            name = local_name(elem)
            if not name or elem.attrib:
                continue
            key = macro_name(name)
            value = (elem.text or "").strip()
            if key in props:
                logger.debug("Property %s redefined: %r -> %r", key, props[key], value)
            props[key] = value
            logger.debug("Property %s => %s", key, value)
    return props


def resolve_build_properties(
    start_dir: Path, file_name: str = DEFAULT_PROPS_FILE
) -> Dict[str, str]:
    """Return the inherited property mapping for ``start_dir``.

    A missing props file is not an error; an empty mapping is returned.
    """
    props_file = find_props_file(start_dir, file_name)
    if props_file is None:
        logger.info("%s file not found above %s", file_name, start_dir)
        return {}
    return read_build_properties(props_file)


def inherited_defaults(
    props: Mapping[str, str], config: Optional[ParserConfig] = None
) -> Tuple[LanguageVersion, bool]:
    """Return the default (language version, nullable) every project inherits."""
    config = config or ParserConfig()
    baseline = lookup_language_version(config.default_language_version)
    if baseline is None:
        baseline = LanguageVersion.CSHARP7_3
    language = parse_language_version(props.get(macro_name("LangVersion")), baseline)
    nullable = parse_nullable(props.get(macro_name("Nullable")), config.default_nullable)
    return language, nullable


def expand_macro(value: str, props: Mapping[str, str]) -> str:
    """Substitute ``value`` when it is exactly one known ``$(Name)`` macro."""
    stripped = value.strip()
    if not _MACRO_RE.match(stripped):
        return value
    if stripped in props:
        return props[stripped]
    logger.warning("Unknown property macro %s left unexpanded", stripped)
    return value


__all__ = [
    "DEFAULT_PROPS_FILE",
    "macro_name",
    "find_props_file",
    "read_build_properties",
    "resolve_build_properties",
    "inherited_defaults",
    "expand_macro",
]
