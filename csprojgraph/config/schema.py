"""Configuration schema definitions using Pydantic for validation.

This module provides strongly-typed configuration classes for the
descriptor parser, the package resolver and the runtime library layout.
Using Pydantic ensures configuration errors are caught early with clear
error messages.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_MONO_TARGET_FRAMEWORKS = [
    "net11",
    "net20",
    "net35",
    "net40", "net403",
    "net45", "net451", "net452",
    "net46", "net461", "net462",
    "net47", "net471", "net472",
    "net48",
    "netcoreapp1.0", "netcoreapp1.1",
    "netcoreapp2.0", "netcoreapp2.1", "netcoreapp2.2",
]


class ParserConfig(BaseModel):
    """Configuration for build-descriptor parsing.

    Attributes:
        project_extension: Descriptor file extension (without dot).
        source_extension: Source file extension (without dot).
        props_file_name: Name of the inherited build-property file.
        recognized_sdks: Accepted values of the root ``Sdk`` attribute.
        exclude_dirs: Directory names never scanned for sources.
        default_language_version: Baseline language version.
        default_nullable: Baseline nullable mode.
    """

    project_extension: str = "csproj"
    source_extension: str = "cs"
    props_file_name: str = "Directory.Build.props"
    recognized_sdks: List[str] = Field(default_factory=lambda: ["Microsoft.NET.Sdk"])
    exclude_dirs: List[str] = Field(default_factory=lambda: ["bin", "obj"])
    default_language_version: str = "7.3"
    default_nullable: bool = False

    model_config = {"extra": "allow"}  # Allow extra fields for extensibility

    @field_validator("project_extension", "source_extension")
    @classmethod
    def strip_dot(cls, v: str) -> str:
        """Accept extensions written with or without a leading dot."""
        v = v.strip().lstrip(".")
        if not v:
            raise ValueError("extension must not be empty")
        return v

    @field_validator("recognized_sdks")
    @classmethod
    def validate_sdks(cls, v: List[str]) -> List[str]:
        """Validate that at least one SDK is recognised."""
        if not v:
            raise ValueError("recognized_sdks must contain at least one SDK")
        return v

    @field_validator("default_language_version")
    @classmethod
    def validate_language_version(cls, v: str) -> str:
        """Validate the baseline language version against known values."""
        from csprojgraph.parsers.msbuild.language import lookup_language_version

        if lookup_language_version(v) is None:
            raise ValueError(f"Unknown language version '{v}'")
        return v


class NugetConfig(BaseModel):
    """Configuration for package resolution.

    Attributes:
        package_cache: Local package cache root. ``None`` means
            ``$NUGET_PACKAGES`` or ``~/.nuget/packages``.
        lock_manifest: Lock manifest path relative to each project directory.
        conflict_policy: ``highest`` or ``first`` for transitive conflicts.
    """

    package_cache: Optional[str] = None
    lock_manifest: str = "obj/project.assets.json"
    conflict_policy: str = "highest"

    model_config = {"extra": "allow"}

    @field_validator("conflict_policy")
    @classmethod
    def validate_policy(cls, v: str) -> str:
        """Validate the version conflict policy."""
        valid = {"highest", "first"}
        if v not in valid:
            raise ValueError(f"Invalid conflict policy '{v}'. Valid policies: {valid}")
        return v

    def cache_root(self) -> Path:
        """Return the effective package cache root."""
        if self.package_cache:
            return Path(self.package_cache).expanduser()
        env_cache = os.getenv("NUGET_PACKAGES")
        if env_cache:
            return Path(env_cache).expanduser()
        return Path.home() / ".nuget" / "packages"


class RuntimeLayoutConfig(BaseModel):
    """Where runtime-provided libraries live for each runtime flavor.

    Attributes:
        mono_root: Mono installation library root.
        mono_api_dir: Reference-assembly directory under ``mono_root``.
        mono_facades_dir: Facade directory holding ``netstandard.dll``.
        dotnet_root: .NET installation root.
        dotnet_framework_versions: Explicit target framework -> installed
            ``Microsoft.NETCore.App`` version overrides.
        netstandard_runtime_alias: Concrete framework used when the primary
            project targets ``netstandard*``.
        mono_target_frameworks: Target frameworks that select mono.
    """

    mono_root: str = "/usr/lib/mono"
    mono_api_dir: str = "4.6.1-api"
    mono_facades_dir: str = "4.5/Facades"
    dotnet_root: str = "/usr/share/dotnet"
    dotnet_framework_versions: Dict[str, str] = Field(default_factory=dict)
    netstandard_runtime_alias: str = "netcoreapp3.1"
    mono_target_frameworks: List[str] = Field(
        default_factory=lambda: list(DEFAULT_MONO_TARGET_FRAMEWORKS)
    )

    model_config = {"extra": "allow"}


class ResolverConfig(BaseModel):
    """Top-level configuration for a resolution pass.

    Attributes:
        parser: Descriptor parser configuration.
        nuget: Package resolution configuration.
        runtime: Runtime library layout configuration.
    """

    parser: ParserConfig = Field(default_factory=ParserConfig)
    nuget: NugetConfig = Field(default_factory=NugetConfig)
    runtime: RuntimeLayoutConfig = Field(default_factory=RuntimeLayoutConfig)

    @classmethod
    def default(cls) -> "ResolverConfig":
        """Return the built-in default configuration."""
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResolverConfig":
        """Create configuration from dictionary.

        Args:
            data: Configuration dictionary.

        Returns:
            ResolverConfig instance.

        Raises:
            ValidationError: If configuration is invalid.
        """
        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Configuration as dictionary.
        """
        return self.model_dump()
