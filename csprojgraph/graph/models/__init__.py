"""Graph data models."""

from .schema import ProjectDescriptor

__all__ = ["ProjectDescriptor"]
