"""NuGet package resolution components."""

__all__ = [
    "assets",
    "closure",
    "versions",
    "linker",
]
