"""Execution of upload plans."""

import logging
import posixpath
from pathlib import Path
from typing import Any, Optional

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
)

from ..api import CmsClient
from ..errors import ApiErrorContext, log_api_upload_error, log_error
from ..exceptions import CmsAPIError, CmsUploadError
from ..output import OutputFormatter
from .ignore import IgnoreFilter
from .modes import Mode
from .planner import FolderPlan, SingleFilePlan, UploadPlan
from .scanner import DirectoryScanner

logger = logging.getLogger(__name__)


def upload_folder(
    client: CmsClient,
    account_id: int,
    src: Path,
    dest: str,
    mode: Mode,
    cwd: Path,
    out: Optional[OutputFormatter] = None,
    show_progress: bool = False,
) -> dict[str, Any]:
    """Upload every eligible file below ``src`` to ``dest``.

    Files are sent one at a time. A failing file is reported and the walk
    continues with the next one; the failures are raised together at the end.

    Args:
        client: CMS API client
        account_id: Target account
        src: Local folder (absolute)
        dest: Remote folder (forward slashes)
        mode: Upload mode
        cwd: Directory ignore rules are relative to
        out: Output formatter for per-file error reports
        show_progress: Whether to display a progress bar

    Returns:
        Dictionary with ``uploads``, ``errors`` and ``skips`` counts

    Raises:
        CmsUploadError: If at least one file failed to upload
    """
    out = out or OutputFormatter(quiet=True)
    scanner = DirectoryScanner(IgnoreFilter.from_directory(cwd), root=cwd)
    files = scanner.scan_local(src)
    logger.debug(
        f"Found {len(files)} file(s) to upload in {src}, "
        f"skipped {len(scanner.skipped)}"
    )

    stats = {"uploads": 0, "errors": 0, "skips": len(scanner.skipped)}
    failed: list[str] = []

    progress: Optional[Progress] = None
    if show_progress and files:
        progress = Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            transient=True,
        )

    try:
        task_id = None
        if progress is not None:
            progress.start()
            task_id = progress.add_task("[cyan]Uploading", total=len(files))

        for local_file in files:
            remote_path = posixpath.join(dest, local_file.relative_path)
            try:
                client.upload(account_id, local_file.path, remote_path, mode.query)
            except CmsAPIError as e:
                stats["errors"] += 1
                failed.append(local_file.relative_path)
                log_api_upload_error(
                    out,
                    e,
                    ApiErrorContext(
                        account_id=account_id,
                        request=remote_path,
                        payload=str(local_file.path),
                    ),
                )
            else:
                stats["uploads"] += 1
                logger.debug(f'Uploaded file "{local_file.path}" to "{remote_path}"')
            if progress is not None and task_id is not None:
                progress.advance(task_id)
    finally:
        if progress is not None:
            progress.stop()

    if failed:
        raise CmsUploadError(
            f"{len(failed)} of {len(files)} file(s) failed to upload: "
            + ", ".join(failed)
        )
    return stats


class UploadExecutor:
    """Runs an upload plan against the API and reports the outcome."""

    def __init__(
        self,
        client: CmsClient,
        out: OutputFormatter,
        account_id: int,
        show_progress: bool = False,
    ):
        self.client = client
        self.out = out
        self.account_id = account_id
        self.show_progress = show_progress

    def execute(self, plan: UploadPlan) -> bool:
        """Perform the transfer described by ``plan``.

        Returns:
            True if the transfer succeeded
        """
        if isinstance(plan, SingleFilePlan):
            return self._upload_file(plan)
        if isinstance(plan, FolderPlan):
            return self._upload_folder(plan)
        raise TypeError(f"Unsupported plan type: {type(plan).__name__}")

    def _upload_file(self, plan: SingleFilePlan) -> bool:
        target = plan.target
        try:
            self.client.upload(
                self.account_id, target.local_path, target.remote_path, plan.query
            )
        except CmsAPIError as e:
            self.out.error(
                f'Uploading file "{target.source}" to "{target.remote_path}" failed'
            )
            log_api_upload_error(
                self.out,
                e,
                ApiErrorContext(
                    account_id=self.account_id,
                    request=target.remote_path,
                    payload=target.source,
                ),
            )
            return False

        self.out.success(
            f'Uploaded file from "{target.source}" to "{target.remote_path}" '
            f"in the Design Manager of account {self.account_id}"
        )
        return True

    def _upload_folder(self, plan: FolderPlan) -> bool:
        target = plan.target
        self.out.info(
            f'Uploading files from "{target.source}" to "{target.remote_path}" '
            f"in the Design Manager of account {self.account_id}"
        )
        try:
            stats = upload_folder(
                self.client,
                self.account_id,
                target.local_path,
                target.remote_path,
                plan.mode,
                plan.cwd,
                out=self.out,
                show_progress=self.show_progress and not self.out.quiet,
            )
        except CmsAPIError as e:
            self.out.error("Uploading failed")
            log_error(self.out, e, {"account_id": self.account_id})
            return False

        self.out.success(
            f'Uploading files to "{target.remote_path}" in the Design Manager '
            f"is complete"
        )
        if stats["uploads"] == 0:
            self.out.warning("No files were uploaded.")
        return True
