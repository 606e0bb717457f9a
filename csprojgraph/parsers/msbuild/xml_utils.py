"""ElementTree helpers shared by the project-file and props-file readers."""

import xml.etree.ElementTree as ET
from typing import Iterator, Optional


def local_name(elem: ET.Element) -> str:
    """Return the tag of ``elem`` without its namespace prefix."""
    tag = elem.tag
    if not isinstance(tag, str):
        return ""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def iter_groups(root: ET.Element, group: str) -> Iterator[ET.Element]:
    """Yield ``PropertyGroup``/``ItemGroup`` elements in document order."""
    for elem in root.iter():
        if local_name(elem) == group:
            yield elem


def child_text(elem: ET.Element, name: str) -> Optional[str]:
    """Return the stripped text of the first direct child called ``name``."""
    for child in elem:
        if local_name(child) == name:
            return (child.text or "").strip()
    return None


def get_attribute(elem: ET.Element, name: str) -> Optional[str]:
    """Return an attribute value, matching the name case-insensitively."""
    value = elem.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, val in elem.attrib.items():
        if key.lower() == lowered:
            return val
    return None
