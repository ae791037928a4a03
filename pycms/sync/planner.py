"""Turn ``upload <src> <dest>`` arguments into an upload plan."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional, Union

from ..modules import validate_src_and_dest_paths
from ..paths import (
    PathKind,
    classify_path,
    convert_to_unix_path,
    get_cwd,
    is_allowed_extension,
    resolve_local_path,
)
from .ignore import IgnoreFilter
from .modes import Mode

logger = logging.getLogger(__name__)

PathValidator = Callable[..., list[str]]


class IssueKind(str, Enum):
    """Category of a problem found while planning."""

    SOURCE = "source"
    """Source is neither a file nor a folder"""

    DESTINATION = "destination"
    """Destination is missing"""

    STRUCTURE = "structure"
    """Source and destination are structurally incompatible"""

    EXTENSION = "extension"
    """File type cannot be uploaded"""

    IGNORED = "ignored"
    """File is excluded by an ignore rule"""


@dataclass(frozen=True)
class SyncIssue:
    """A user-facing problem that prevents the upload."""

    message: str
    kind: IssueKind


@dataclass(frozen=True)
class SyncTarget:
    """A validated local source and its remote destination."""

    kind: PathKind
    """FILE or DIRECTORY"""

    source: str
    """Source path exactly as the user passed it"""

    local_path: Path
    """Absolute local path"""

    remote_path: str
    """Remote path with forward slashes"""


@dataclass(frozen=True)
class SingleFilePlan:
    """Upload one file."""

    target: SyncTarget
    mode: Mode

    @property
    def query(self) -> dict[str, Any]:
        return self.mode.query


@dataclass(frozen=True)
class FolderPlan:
    """Upload a folder recursively."""

    target: SyncTarget
    mode: Mode
    cwd: Path
    """Working directory ignore rules are resolved against during the walk"""


UploadPlan = Union[SingleFilePlan, FolderPlan]


@dataclass
class PlanResult:
    """Outcome of planning: either a plan or the issues that prevent one."""

    plan: Optional[UploadPlan] = None
    issues: list[SyncIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.plan is not None and not self.issues

    @classmethod
    def rejected(cls, message: str, kind: IssueKind) -> "PlanResult":
        return cls(issues=[SyncIssue(message=message, kind=kind)])


def plan_upload(
    src: str,
    dest: Optional[str],
    mode: Mode,
    cwd: Optional[Path] = None,
    ignore_filter: Optional[IgnoreFilter] = None,
    validate_paths: PathValidator = validate_src_and_dest_paths,
) -> PlanResult:
    """Validate upload arguments and build a plan.

    Checks run in order and stop at the first failing step, except the
    source/destination structure check, which reports every problem it
    finds.

    Args:
        src: Local file or folder, relative to ``cwd`` or absolute
        dest: Remote destination path
        mode: Upload mode
        cwd: Working directory (defaults to the process working directory)
        ignore_filter: Ignore rules for single files (defaults to the rules
            found from ``cwd``)
        validate_paths: Structural src/dest check returning messages

    Returns:
        PlanResult with either ``plan`` or ``issues`` set
    """
    cwd = Path(cwd) if cwd is not None else get_cwd()

    if not dest:
        return PlanResult.rejected(
            "A destination path needs to be passed", IssueKind.DESTINATION
        )

    local_path = resolve_local_path(src, cwd)
    kind = classify_path(local_path)
    logger.debug(f"Source {local_path} classified as {kind.value}")
    if kind is PathKind.INVALID:
        return PlanResult.rejected(
            f'The path "{src}" is not a path to a file or folder', IssueKind.SOURCE
        )

    normalized_dest = convert_to_unix_path(dest)

    messages = validate_paths(src, dest, local_path=local_path, cwd=cwd)
    if messages:
        return PlanResult(
            issues=[SyncIssue(message=m, kind=IssueKind.STRUCTURE) for m in messages]
        )

    target = SyncTarget(
        kind=kind, source=src, local_path=local_path, remote_path=normalized_dest
    )

    if kind is PathKind.DIRECTORY:
        return PlanResult(plan=FolderPlan(target=target, mode=mode, cwd=cwd))

    if not is_allowed_extension(local_path):
        return PlanResult.rejected(
            f'The file "{src}" does not have a valid extension', IssueKind.EXTENSION
        )

    if ignore_filter is None:
        ignore_filter = IgnoreFilter.from_directory(cwd)
    ignore_root = cwd if local_path.is_relative_to(cwd) else local_path.parent
    if ignore_filter.should_ignore(local_path, ignore_root, is_dir=False):
        return PlanResult.rejected(
            f'The file "{src}" is being ignored via an .hsignore rule',
            IssueKind.IGNORED,
        )

    return PlanResult(plan=SingleFilePlan(target=target, mode=mode))
