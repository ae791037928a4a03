"""Upload planning and execution for PyCMS."""

from .engine import UploadExecutor, upload_folder
from .ignore import (
    DEFAULT_IGNORE_PATTERNS,
    IGNORE_FILE_NAME,
    IgnoreFilter,
    IgnoreSpec,
    load_ignore_file,
)
from .modes import Mode
from .planner import (
    FolderPlan,
    IssueKind,
    PlanResult,
    SingleFilePlan,
    SyncIssue,
    SyncTarget,
    UploadPlan,
    plan_upload,
)
from .scanner import DirectoryScanner, LocalFile

__all__ = [
    "UploadExecutor",
    "upload_folder",
    "Mode",
    "plan_upload",
    "PlanResult",
    "UploadPlan",
    "SingleFilePlan",
    "FolderPlan",
    "SyncTarget",
    "SyncIssue",
    "IssueKind",
    "DirectoryScanner",
    "LocalFile",
    "IgnoreFilter",
    "IgnoreSpec",
    "IGNORE_FILE_NAME",
    "DEFAULT_IGNORE_PATTERNS",
    "load_ignore_file",
]
