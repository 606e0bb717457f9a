"""Configuration schema and validation for csprojgraph."""

from .schema import (
    NugetConfig,
    ParserConfig,
    ResolverConfig,
    RuntimeLayoutConfig,
)

__all__ = [
    "NugetConfig",
    "ParserConfig",
    "ResolverConfig",
    "RuntimeLayoutConfig",
]
