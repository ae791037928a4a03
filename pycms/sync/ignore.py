"""Ignore rules for uploads.

Rules come from two places: a built-in default list and ``.hsignore`` files.
Both use gitignore syntax (``pathspec``'s ``gitwildmatch`` flavour). Patterns
from an ``.hsignore`` file are matched relative to the directory holding the
file, the built-in patterns relative to the root passed to
``IgnoreFilter.should_ignore``.

Specs are consulted in load order (defaults, then ignore files from the
outermost directory inward) and the last one with a matching pattern
decides, so a nested ``!pattern`` can re-include what an outer file
excluded.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from pathspec import PathSpec

from ..config import CONFIG_FILE_NAME

logger = logging.getLogger(__name__)

IGNORE_FILE_NAME = ".hsignore"

DEFAULT_IGNORE_PATTERNS = [
    CONFIG_FILE_NAME,
    "node_modules",
    "__pycache__",
    ".*",
    "*.log",
    "*.swp",
    "*.swo",
    "*~",
    "Thumbs.db",
]


@dataclass
class IgnoreSpec:
    """Compiled patterns from a single source."""

    spec: PathSpec
    """gitwildmatch patterns in file order"""

    base: Optional[Path] = None
    """Directory the patterns are relative to (None: the filter's root)"""

    source: Optional[Path] = None
    """Ignore file the patterns were read from (None for built-in rules)"""

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        base: Optional[Path] = None,
        source: Optional[Path] = None,
    ) -> "IgnoreSpec":
        return cls(PathSpec.from_lines("gitwildmatch", lines), base, source)

    def __len__(self) -> int:
        # Blank and comment lines compile to patterns that never match
        return sum(1 for p in self.spec.patterns if p.include is not None)

    def check(self, relative_path: str) -> Optional[bool]:
        """Match a path relative to ``base``.

        Args:
            relative_path: Forward-slash path, with a trailing ``/`` for
                directories

        Returns:
            True if excluded, False if re-included by a ``!`` pattern, None
            if no pattern matched
        """
        return self.spec.check_file(relative_path).include


def load_ignore_file(path: Path) -> Optional[IgnoreSpec]:
    """Load patterns from an ignore file.

    Args:
        path: Path to a ``.hsignore`` file

    Returns:
        IgnoreSpec anchored at the file's directory, or None if the file
        cannot be read
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read ignore file {path}: {e}")
        return None

    ignore_spec = IgnoreSpec.from_lines(
        content.splitlines(), base=path.parent, source=path
    )
    logger.debug(f"Loaded {len(ignore_spec)} ignore rule(s) from {path}")
    return ignore_spec


def find_ignore_files(root: Path) -> list[Path]:
    """Find ``.hsignore`` files in ``root`` and its ancestors.

    Returns:
        Ignore files ordered from the outermost directory to ``root``
    """
    found = []
    for directory in [root, *root.parents]:
        candidate = directory / IGNORE_FILE_NAME
        if candidate.is_file():
            found.append(candidate)
    return list(reversed(found))


def _relative_posix(path: Path, base: Path, is_dir: bool) -> Optional[str]:
    try:
        relative = path.relative_to(base).as_posix()
    except ValueError:
        return None
    if relative == ".":
        return None
    return relative + "/" if is_dir else relative


class IgnoreFilter:
    """Decides whether local paths are excluded from uploads.

    Examples:
        >>> ignore_filter = IgnoreFilter.from_directory(Path("/project"))
        >>> ignore_filter.should_ignore(Path("/project/node_modules/x.js"),
        ...                             Path("/project"))
        True
    """

    def __init__(self, specs: Optional[list[IgnoreSpec]] = None):
        self.specs: list[IgnoreSpec] = list(specs or [])
        self._loaded_dirs: set[Path] = set()

    @classmethod
    def from_patterns(cls, patterns: list[str]) -> "IgnoreFilter":
        """Build a filter from bare patterns, relative to the filter root."""
        return cls([IgnoreSpec.from_lines(patterns)])

    @classmethod
    def from_directory(
        cls, root: Path, include_defaults: bool = True
    ) -> "IgnoreFilter":
        """Build a filter with default rules plus ``.hsignore`` files.

        Args:
            root: Project root; ignore files are searched from here upward
            include_defaults: Whether to start with ``DEFAULT_IGNORE_PATTERNS``
        """
        ignore_filter = (
            cls.from_patterns(DEFAULT_IGNORE_PATTERNS) if include_defaults else cls()
        )
        for ignore_file in find_ignore_files(Path(root).absolute()):
            ignore_filter._add_file(ignore_file)
        return ignore_filter

    def _add_file(self, ignore_file: Path) -> None:
        self._loaded_dirs.add(ignore_file.parent)
        ignore_spec = load_ignore_file(ignore_file)
        if ignore_spec is not None:
            self.specs.append(ignore_spec)

    def load_from_directory(self, directory: Path) -> None:
        """Add rules from ``directory/.hsignore`` if present and not yet loaded."""
        directory = directory.absolute()
        if directory in self._loaded_dirs:
            return
        ignore_file = directory / IGNORE_FILE_NAME
        if ignore_file.is_file():
            self._add_file(ignore_file)
        else:
            self._loaded_dirs.add(directory)

    def should_ignore(
        self,
        path: Union[str, Path],
        root: Union[str, Path],
        is_dir: Optional[bool] = None,
    ) -> bool:
        """Check whether ``path`` is excluded.

        Args:
            path: Absolute local path
            root: Directory that specs without their own base apply to
            is_dir: Whether ``path`` is a directory (probed when None)

        Returns:
            True if the last spec with a matching pattern excludes the path
        """
        path = Path(path)
        root = Path(root)
        if is_dir is None:
            is_dir = path.is_dir()

        ignored = False
        for ignore_spec in self.specs:
            relative = _relative_posix(path, ignore_spec.base or root, is_dir)
            if relative is None:
                continue
            result = ignore_spec.check(relative)
            if result is not None:
                ignored = result

        if ignored:
            logger.debug(f"Ignoring {path}")
        return ignored
