"""JSON export for workspace resolutions."""

import json
import logging
from pathlib import Path

from csprojgraph.runtime.api import WorkspaceResolution

logger = logging.getLogger("csprojgraph.export.json")


def export_json(resolution: WorkspaceResolution, output_path: Path) -> None:
    """Export a resolution to JSON format.

    Args:
        resolution: Resolution to export.
        output_path: Output file path.
    """
    logger.info("Exporting resolution to JSON: %s", output_path)

    output_path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "working_directory": str(resolution.working_directory),
        "root_project": resolution.root_project,
        "runtime": resolution.runtime.to_dict(),
        "projects": [project.to_dict() for project in resolution.projects],
        "build_order": resolution.build_order(),
    }

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)

    logger.info("JSON export completed: %d projects", len(resolution.projects))
