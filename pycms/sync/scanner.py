"""Directory scanning for folder uploads."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..paths import is_allowed_extension
from .ignore import IgnoreFilter

logger = logging.getLogger(__name__)


@dataclass
class LocalFile:
    """Represents a local file selected for upload."""

    path: Path
    """Absolute path to the file"""

    relative_path: str
    """Path relative to the scanned folder (always forward slashes)"""

    size: int
    """File size in bytes"""

    @classmethod
    def from_path(cls, file_path: Path, base_path: Path) -> "LocalFile":
        """Create LocalFile from a path.

        Args:
            file_path: Absolute path to the file
            base_path: Base path for calculating relative paths

        Returns:
            LocalFile instance
        """
        # Use as_posix() to ensure forward slashes on all platforms
        relative_path = file_path.relative_to(base_path).as_posix()
        return cls(
            path=file_path,
            relative_path=relative_path,
            size=file_path.stat().st_size,
        )


class DirectoryScanner:
    """Walks a folder and collects the files that should be uploaded.

    Ignored files and directories, as well as files whose extension is not
    allowed, are skipped without any message. ``.hsignore`` files found in
    scanned directories are added to the filter as the walk descends.

    Examples:
        >>> scanner = DirectoryScanner(IgnoreFilter.from_directory(cwd), cwd)
        >>> files = scanner.scan_local(Path("/project/assets"))
        >>> [f.relative_path for f in files]
        ['css/site.css', 'js/main.js']
    """

    def __init__(
        self,
        ignore_filter: Optional[IgnoreFilter] = None,
        root: Optional[Path] = None,
        check_extensions: bool = True,
    ):
        """Initialize directory scanner.

        Args:
            ignore_filter: Rules to apply (no filtering when None)
            root: Directory ignore rules are relative to (defaults to the
                scanned folder, which also replaces a root it is not under)
            check_extensions: Whether to skip files with disallowed extensions
        """
        self.ignore_filter = ignore_filter
        self.root = root
        self.check_extensions = check_extensions
        self.skipped: list[Path] = []

    def should_skip(self, path: Path, root: Path, is_dir: bool) -> bool:
        """Check if a path should be left out of the upload."""
        if self.ignore_filter is not None and self.ignore_filter.should_ignore(
            path, root, is_dir=is_dir
        ):
            return True
        if not is_dir and self.check_extensions and not is_allowed_extension(path):
            logger.debug(f"Skipping (extension): {path}")
            return True
        return False

    def scan_local(
        self, directory: Path, base_path: Optional[Path] = None
    ) -> list[LocalFile]:
        """Recursively scan a local directory.

        Args:
            directory: Directory to scan
            base_path: Base path for calculating relative paths (defaults to
                directory)

        Returns:
            List of LocalFile objects in walk order (entries sorted by name)
        """
        if base_path is None:
            base_path = directory
            self.skipped = []
        root = self.root or base_path
        if not base_path.is_relative_to(root):
            # Built-in rules still apply to folders outside the root
            root = base_path

        files: list[LocalFile] = []

        try:
            if self.ignore_filter is not None:
                self.ignore_filter.load_from_directory(directory)

            for item in sorted(directory.iterdir()):
                is_dir = item.is_dir()
                if self.should_skip(item, root, is_dir):
                    self.skipped.append(item)
                    continue

                if is_dir:
                    files.extend(self.scan_local(item, base_path))
                elif item.is_file():
                    try:
                        files.append(LocalFile.from_path(item, base_path))
                    except OSError:
                        # Skip files we can't read
                        self.skipped.append(item)
        except PermissionError:
            # Skip directories we can't read
            logger.debug(f"Permission denied: {directory}")

        return files
