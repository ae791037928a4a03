"""Structural checks for source/destination path pairs.

CMS modules are folders whose name ends in ``.module``. Modules cannot be
nested, and files that belong to a module only make sense inside a module on
the remote side as well.
"""

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from .paths import get_cwd

logger = logging.getLogger(__name__)

MODULE_EXTENSION = ".module"


def _split(path: str) -> list[str]:
    return [part for part in path.replace("\\", "/").split("/") if part]


def is_module_folder(path: str) -> bool:
    """Check if the last segment of ``path`` is a ``.module`` folder name."""
    parts = _split(path)
    return bool(parts) and parts[-1].endswith(MODULE_EXTENSION)


def is_module_folder_child(path: str) -> bool:
    """Check if ``path`` lies inside a ``.module`` folder.

    Examples:
        >>> is_module_folder_child("theme/hero.module/module.html")
        True
        >>> is_module_folder_child("theme/hero.module")
        False
    """
    return any(part.endswith(MODULE_EXTENSION) for part in _split(path)[:-1])


def contains_module_folder(local_path: Path) -> bool:
    """Check if a local directory has a ``.module`` folder anywhere below it."""
    if not local_path.is_dir():
        return False
    try:
        for _dirpath, dirnames, _filenames in os.walk(local_path):
            if any(name.endswith(MODULE_EXTENSION) for name in dirnames):
                return True
    except OSError as e:
        logger.debug(f"Could not walk {local_path}: {e}")
    return False


def _project_relative(resolved: Path, cwd: Path, src: str) -> str:
    # Directories above the working directory are not part of the project
    if resolved.is_absolute() and resolved.is_relative_to(cwd):
        return resolved.relative_to(cwd).as_posix()
    return Path(os.path.normpath(src)).as_posix()


def validate_src_and_dest_paths(
    src: str,
    dest: str,
    local_path: Optional[Union[str, Path]] = None,
    cwd: Optional[Union[str, Path]] = None,
) -> list[str]:
    """Check a local source against a remote destination.

    Every rule is evaluated so that all problems are reported at once.

    Args:
        src: Local source path as given by the user
        dest: Remote destination path
        local_path: Resolved absolute source path (defaults to ``src``)
        cwd: Working directory; only the part of the source below it is
            checked for module folders (defaults to the current directory)

    Returns:
        List of problem descriptions, empty if the pair is valid
    """
    issues: list[str] = []
    resolved = Path(local_path) if local_path is not None else Path(src)
    src_posix = _project_relative(resolved, Path(cwd) if cwd else get_cwd(), src)

    if ".." in PurePosixPath(dest.replace("\\", "/")).parts:
        issues.append(
            f'The destination path "{dest}" cannot contain ".." segments'
        )

    dest_in_module = is_module_folder_child(dest)

    if is_module_folder(resolved.as_posix()) and dest_in_module:
        issues.append(
            f'The source "{src}" is a module folder and the destination '
            f'"{dest}" is inside a module. Modules cannot be nested.'
        )
    elif dest_in_module and contains_module_folder(resolved):
        issues.append(
            f'The source "{src}" contains a module folder and the destination '
            f'"{dest}" is inside a module. Modules cannot be nested.'
        )

    if is_module_folder_child(src_posix) and not (
        dest_in_module or is_module_folder(dest)
    ):
        issues.append(
            f'The source "{src}" is inside a module folder but the destination '
            f'"{dest}" is not. Module files must be uploaded into a module.'
        )

    return issues
