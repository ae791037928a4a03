"""Local and remote path helpers."""

import os
import posixpath
import stat
from enum import Enum
from pathlib import Path
from typing import Optional, Union

# File types the Design Manager accepts
ALLOWED_EXTENSIONS = frozenset(
    {
        "css",
        "js",
        "json",
        "html",
        "txt",
        "md",
        "jpg",
        "jpeg",
        "png",
        "gif",
        "map",
        "svg",
        "ttf",
        "woff",
        "woff2",
        "zip",
    }
)


class PathKind(str, Enum):
    """What a local path points at."""

    FILE = "file"
    DIRECTORY = "directory"
    INVALID = "invalid"


def get_cwd() -> Path:
    """Get the working directory used to resolve relative paths."""
    return Path(os.getcwd())


def resolve_local_path(
    path: Union[str, Path], cwd: Optional[Union[str, Path]] = None
) -> Path:
    """Resolve ``path`` against ``cwd`` (default: current directory).

    Args:
        path: Relative or absolute local path
        cwd: Base directory for relative paths

    Returns:
        Absolute, normalized path
    """
    base = Path(cwd) if cwd is not None else get_cwd()
    return Path(os.path.normpath(base / Path(path).expanduser()))


def classify_path(path: Union[str, Path]) -> PathKind:
    """Classify a path as file, directory or invalid.

    Filesystem errors (missing path, permission denied, I/O errors) all
    classify as ``PathKind.INVALID``.
    """
    try:
        mode = os.stat(path).st_mode
    except (OSError, ValueError):
        return PathKind.INVALID

    if stat.S_ISREG(mode):
        return PathKind.FILE
    if stat.S_ISDIR(mode):
        return PathKind.DIRECTORY
    return PathKind.INVALID


def convert_to_unix_path(path: str) -> str:
    """Normalize a path to forward slashes for the remote path space.

    Native separators and backslashes become ``/``, repeated separators and
    ``.`` segments are collapsed. Applying it twice gives the same result.

    Examples:
        >>> convert_to_unix_path("css\\\\site.css")
        'css/site.css'
        >>> convert_to_unix_path("/css//./site.css")
        '/css/site.css'
    """
    unix_path = path.replace(os.sep, "/").replace("\\", "/")
    if not unix_path:
        return unix_path
    normalized = posixpath.normpath(unix_path)
    # normpath keeps a leading "//" as-is, remote paths never need it
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def get_extension(path: Union[str, Path]) -> str:
    """Get the lower-cased extension of ``path`` without the leading dot."""
    return Path(path).suffix.lstrip(".").lower()


def is_allowed_extension(path: Union[str, Path]) -> bool:
    """Check if a file may be uploaded based on its extension.

    Examples:
        >>> is_allowed_extension("site.css")
        True
        >>> is_allowed_extension("notes.docx")
        False
    """
    return get_extension(path) in ALLOWED_EXTENSIONS
