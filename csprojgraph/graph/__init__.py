"""Project graph construction and models."""

from .builder import ProjectGraphBuilder, build_order
from .models.schema import ProjectDescriptor

__all__ = ["ProjectGraphBuilder", "ProjectDescriptor", "build_order"]
