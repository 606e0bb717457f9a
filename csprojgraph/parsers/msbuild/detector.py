"""MSBuild detector locating the project file of one directory."""

import logging
from pathlib import Path
from typing import Optional

from csprojgraph.parsers.base import BaseDetector, DetectionError

logger = logging.getLogger("csprojgraph.parsers.msbuild.detector")


class MsBuildDetector(BaseDetector):
    """Detector for SDK-style project files.

    Only one project file is expected per directory; when several exist the
    first one in sorted order is used.
    """

    NAME = "msbuild"
    DEFAULT_EXTENSION = "csproj"

    def detect(self, directory: Path) -> Optional[Path]:
        """Detect the project file in ``directory``.

        Raises:
            DetectionError: If the directory exists but cannot be listed.
        """
        extension = getattr(self.config, "project_extension", None) or self.DEFAULT_EXTENSION

        if not directory.is_dir():
            logger.debug("Not a directory: %s", directory)
            return None

        try:
            candidates = sorted(
                p for p in directory.glob(f"*.{extension}") if p.is_file()
            )
        except OSError as exc:
            raise DetectionError(f"Cannot list {directory}: {exc}") from exc

        if not candidates:
            logger.debug("No *.%s file in %s", extension, directory)
            return None

        if len(candidates) > 1:
            logger.warning(
                "Multiple *.%s files in %s, using %s",
                extension,
                directory,
                candidates[0].name,
            )
        logger.debug("Detected project file: %s", candidates[0])
        return candidates[0]


__all__ = ["MsBuildDetector"]
