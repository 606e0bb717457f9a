"""MSBuild project and props file components."""

__all__ = [
    "language",
    "props",
    "detector",
    "config_parser",
    "xml_utils",
]
