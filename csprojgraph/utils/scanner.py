"""Source file scanner using scandir and generator pattern."""

import fnmatch
import logging
import os
from pathlib import Path
from typing import Generator, List, Optional

logger = logging.getLogger("csprojgraph.utils.scanner")

VCS_DIRS = [".git", ".svn", ".hg", ".vs"]


def _glob_match(str_path: str, pattern: str) -> bool:
    """Match a root-relative posix path against an anchored glob.

    ``**/`` may match zero directories, as in project-file globs.
    """
    if fnmatch.fnmatch(str_path, pattern):
        return True
    if pattern.startswith("**/") and fnmatch.fnmatch(str_path, pattern[3:]):
        return True
    return False


def _is_ignored(
    str_path: str,
    name: str,
    is_dir: bool,
    ignore_names: List[str],
    exclude_globs: List[str],
) -> bool:
    """Check if a path matches any ignore name or exclusion glob.

    Ignore names match a directory at any depth (``obj`` skips both
    ``obj/`` and ``Lib/obj/``); exclusion globs are anchored at the scan root.
    """
    if is_dir and name in ignore_names:
        return True

    for pattern in exclude_globs:
        if _glob_match(str_path, pattern):
            return True
        # A directory is excluded when everything below it would be.
        if is_dir and _glob_match(str_path + "/", pattern):
            return True

    return False


def scan_files(
    root_path: Path,
    patterns: List[str],
    ignore_names: Optional[List[str]] = None,
    exclude_globs: Optional[List[str]] = None,
) -> Generator[Path, None, None]:
    """Scan files matching patterns, respecting ignores.

    Args:
        root_path: Root directory to scan.
        patterns: List of glob patterns to include (e.g. ['*.cs']).
        ignore_names: Directory names skipped at any depth.
        exclude_globs: Root-relative globs whose matches are skipped.

    Yields:
        Path objects for matching files.
    """
    root_path = root_path.resolve()
    ignores = list(ignore_names or []) + VCS_DIRS
    excludes = list(exclude_globs or [])

    stack = [root_path]

    while stack:
        current_dir = stack.pop()

        try:
            # Sort for deterministic order
            entries = sorted(os.scandir(current_dir), key=lambda e: e.name)
        except (PermissionError, FileNotFoundError) as exc:
            logger.debug("Skipping unreadable directory %s: %s", current_dir, exc)
            continue

        dirs = []
        files = []

        for entry in entries:
            path = Path(entry.path)
            str_path = path.relative_to(root_path).as_posix()
            is_dir = entry.is_dir()

            if _is_ignored(str_path, entry.name, is_dir, ignores, excludes):
                continue

            if is_dir:
                dirs.append(path)
            elif entry.is_file():
                files.append((path, str_path))

        # Add dirs to stack (reversed to maintain order when popping)
        stack.extend(reversed(dirs))

        for file_path, str_path in files:
            for pattern in patterns:
                if fnmatch.fnmatch(file_path.name, pattern) or fnmatch.fnmatch(
                    str_path, pattern
                ):
                    yield file_path
                    break
