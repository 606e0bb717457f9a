"""csprojgraph - .NET project graph discovery and package binary resolution."""

__version__ = "0.1.0"
