"""Scan command implementation."""

import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from csprojgraph.export.json import export_json
from csprojgraph.parsers.base import ResolutionError
from csprojgraph.runtime.api import WorkspaceResolution, resolve_workspace
from csprojgraph.runtime.config_loader import load_resolver_config

logger = logging.getLogger("csprojgraph.cli.scan")


def scan_command(args) -> int:
    """Execute scan command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        int: Exit code.
    """
    workdir = getattr(args, "workdir", ".")
    output = getattr(args, "output", None)
    logger.debug("Working directory: %s", workdir)
    if output:
        logger.debug("Output: %s", output)

    try:
        config = load_resolver_config(getattr(args, "config", None))
    except (OSError, ValueError, ValidationError) as e:
        logger.error("Failed to load configuration: %s", e)
        return 1

    try:
        resolution = resolve_workspace(workdir, config)
    except ResolutionError as e:
        logger.error("Resolution failed: %s", e)
        return 1

    print_resolution(resolution)

    if output:
        try:
            export_json(resolution, Path(output))
        except OSError as e:
            logger.error("Failed to write %s: %s", output, e)
            return 1

    return 0


def print_resolution(
    resolution: WorkspaceResolution, console: Optional[Console] = None
) -> None:
    """Render a resolution as a table followed by the runtime and build order."""
    console = console or Console()

    table = Table(title=f"Projects in {resolution.working_directory}")
    table.add_column("Project", style="cyan")
    table.add_column("Framework")
    table.add_column("C#")
    table.add_column("Nullable")
    table.add_column("Sources", justify="right")
    table.add_column("Libraries", justify="right")
    table.add_column("References")

    for project in resolution.projects:
        table.add_row(
            project.name,
            project.target_framework,
            project.language_version.display,
            "enable" if project.nullable else "disable",
            str(len(project.source_files)),
            str(len(project.libraries or ())),
            ", ".join(project.project_references),
        )

    console.print(table)
    runtime = resolution.runtime
    console.print(
        f"Runtime: [bold]{runtime.runtime.value}[/bold] "
        f"{runtime.target_framework}, C# {runtime.language_version.display}"
    )
    console.print("Build order: " + " -> ".join(resolution.build_order()))
