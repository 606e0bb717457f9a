"""Path normalization utilities for canonical project names."""
import os
from pathlib import Path
from typing import Union


def to_posix(path: str) -> str:
    """Return ``path`` with every separator written as ``/``.

    Project files written on Windows use backslashes in references and
    globs, so both separators are accepted.
    """
    return path.replace("\\", "/")


def normalize_rel_path(path: str) -> str:
    """
    Normalize a relative path to the canonical posix form.

    Examples:
        >>> normalize_rel_path("./Lib/../Lib/Lib.csproj")
        'Lib/Lib.csproj'
        >>> normalize_rel_path("")
        '.'
    """
    if not path:
        return "."
    return to_posix(os.path.normpath(to_posix(path)))


def canonical_project_name(dir_path_rel: str, file_name: str) -> str:
    """
    Build the canonical project name from its directory and descriptor name.

    Examples:
        >>> canonical_project_name(".", "App.csproj")
        'App.csproj'
        >>> canonical_project_name("src/Lib", "Lib.csproj")
        'src/Lib/Lib.csproj'
    """
    return normalize_rel_path(os.path.join(to_posix(dir_path_rel), file_name))


def project_directory(project_name: str) -> str:
    """
    Return the directory part of a canonical project name.

    Examples:
        >>> project_directory("Lib/Lib.csproj")
        'Lib'
        >>> project_directory("App.csproj")
        '.'
    """
    return normalize_rel_path(os.path.dirname(project_name))


def resolve_reference(
    working_dir: Union[Path, str],
    referencing_dir_rel: str,
    reference: str,
) -> str:
    """
    Resolve a project reference to a canonical path from the working dir.

    The reference is relative to the referencing project's directory. The
    result keeps the referenced file name; ``..`` segments survive when the
    referenced project lives outside the working directory.

    Examples:
        >>> resolve_reference("/ws", "App", "../Lib/Lib.csproj")
        'Lib/Lib.csproj'
    """
    working_dir = os.path.normpath(str(working_dir))
    absolute = os.path.normpath(
        os.path.join(working_dir, to_posix(referencing_dir_rel), to_posix(reference))
    )
    return normalize_rel_path(os.path.relpath(absolute, working_dir))


def relative_source_path(dir_path_rel: str, file_path: Path, project_dir: Path) -> str:
    """Express a file found under ``project_dir`` relative to the working dir."""
    rel = file_path.relative_to(project_dir)
    return normalize_rel_path(os.path.join(to_posix(dir_path_rel), rel.as_posix()))
