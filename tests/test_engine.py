"""Tests for upload execution."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from pycms.api import CmsClient
from pycms.exceptions import CmsAPIError, CmsUploadError
from pycms.output import OutputFormatter
from pycms.paths import PathKind
from pycms.sync import (
    FolderPlan,
    Mode,
    SingleFilePlan,
    SyncTarget,
    UploadExecutor,
    plan_upload,
    upload_folder,
)
from pycms.sync.ignore import IGNORE_FILE_NAME


@pytest.fixture
def mock_client():
    """Create a mock CMS client."""
    return Mock(spec=CmsClient)


@pytest.fixture
def mock_output():
    """Create a mock output formatter."""
    output = Mock(spec=OutputFormatter)
    output.quiet = True
    return output


@pytest.fixture
def assets(temp_dir):
    """Create an assets folder with a mix of files."""
    root = temp_dir / "assets"
    (root / "css").mkdir(parents=True)
    (root / "css" / "site.css").write_text("body {}")
    (root / "js").mkdir()
    (root / "js" / "main.js").write_text("")
    (root / "notes.docx").write_text("")
    (root / "debug.log").write_text("")
    (root / "node_modules" / "lib").mkdir(parents=True)
    (root / "node_modules" / "lib" / "index.js").write_text("")
    return root


class TestUploadFolder:
    """Tests for upload_folder."""

    def test_uploads_eligible_files(self, mock_client, assets, temp_dir):
        """Test that allowed, non-ignored files are uploaded."""
        stats = upload_folder(
            mock_client, 123, assets, "/theme", Mode.PUBLISH, cwd=temp_dir
        )

        uploaded = [c.args[2] for c in mock_client.upload.call_args_list]
        assert uploaded == ["/theme/css/site.css", "/theme/js/main.js"]
        assert stats["uploads"] == 2
        assert stats["errors"] == 0
        assert stats["skips"] == 3

    def test_mode_query_sent(self, mock_client, assets, temp_dir):
        """Test that each file is uploaded with the mode query."""
        upload_folder(mock_client, 123, assets, "theme", Mode.DRAFT, cwd=temp_dir)

        for call in mock_client.upload.call_args_list:
            assert call.args[0] == 123
            assert call.args[3] == {"buffer": True}

    def test_hsignore_files_skipped_silently(
        self, mock_client, mock_output, assets, temp_dir
    ):
        """Test that ignore-rule matches are omitted without messages."""
        (temp_dir / IGNORE_FILE_NAME).write_text("css/\n")

        upload_folder(
            mock_client, 123, assets, "theme", Mode.PUBLISH, temp_dir, out=mock_output
        )

        uploaded = [c.args[2] for c in mock_client.upload.call_args_list]
        assert uploaded == ["theme/js/main.js"]
        mock_output.error.assert_not_called()
        mock_output.warning.assert_not_called()

    def test_nested_hsignore_applies_to_subtree(self, mock_client, assets, temp_dir):
        """Test that .hsignore inside the folder is picked up during the walk."""
        (assets / "js" / IGNORE_FILE_NAME).write_text("*.js\n")

        upload_folder(mock_client, 123, assets, "theme", Mode.PUBLISH, temp_dir)

        uploaded = [c.args[2] for c in mock_client.upload.call_args_list]
        assert uploaded == ["theme/css/site.css"]

    def test_failures_continue_then_raise(
        self, mock_client, mock_output, assets, temp_dir
    ):
        """Test that a failed file does not stop the others."""
        mock_client.upload.side_effect = [CmsAPIError("boom", status_code=500), None]

        with patch("pycms.sync.engine.log_api_upload_error") as mock_report:
            with pytest.raises(CmsUploadError, match="1 of 2 file"):
                upload_folder(
                    mock_client,
                    123,
                    assets,
                    "theme",
                    Mode.PUBLISH,
                    temp_dir,
                    out=mock_output,
                )

        assert mock_client.upload.call_count == 2
        mock_report.assert_called_once()
        context = mock_report.call_args.args[2]
        assert context.request == "theme/css/site.css"
        assert context.account_id == 123

    def test_folder_outside_working_directory(self, mock_client, temp_dir):
        """Test that built-in rules apply to a folder outside the cwd."""
        work = temp_dir / "work"
        work.mkdir()
        theme = temp_dir / "theme"
        (theme / "node_modules" / "lib").mkdir(parents=True)
        (theme / "node_modules" / "lib" / "index.js").write_text("")
        (theme / ".cache.js").write_text("")
        (theme / "main.js").write_text("")

        stats = upload_folder(mock_client, 1, theme, "theme", Mode.PUBLISH, work)

        uploaded = [c.args[2] for c in mock_client.upload.call_args_list]
        assert uploaded == ["theme/main.js"]
        assert stats["skips"] == 2

    def test_empty_folder(self, mock_client, temp_dir):
        """Test uploading a folder with nothing eligible."""
        empty = temp_dir / "empty"
        empty.mkdir()

        stats = upload_folder(mock_client, 1, empty, "x", Mode.PUBLISH, temp_dir)

        assert stats == {"uploads": 0, "errors": 0, "skips": 0}
        mock_client.upload.assert_not_called()


class TestUploadExecutorFile:
    """Tests for single-file execution."""

    def _plan(self, temp_dir: Path) -> SingleFilePlan:
        (temp_dir / "site.css").write_text("body {}")
        result = plan_upload("./site.css", "/css/site.css", Mode.PUBLISH, cwd=temp_dir)
        assert result.ok
        return result.plan

    def test_single_file_success(self, mock_client, mock_output, temp_dir):
        """Test the site.css scenario end to end."""
        plan = self._plan(temp_dir)
        executor = UploadExecutor(mock_client, mock_output, 123)

        assert executor.execute(plan) is True

        mock_client.upload.assert_called_once_with(
            123, temp_dir / "site.css", "/css/site.css", {"buffer": False}
        )
        message = mock_output.success.call_args.args[0]
        assert '"./site.css"' in message
        assert '"/css/site.css"' in message
        assert "123" in message

    def test_single_file_failure(self, mock_client, mock_output, temp_dir):
        """Test that a failed upload is reported with upload context."""
        plan = self._plan(temp_dir)
        error = CmsAPIError("bad request", status_code=400)
        mock_client.upload.side_effect = error
        executor = UploadExecutor(mock_client, mock_output, 123)

        with patch("pycms.sync.engine.log_api_upload_error") as mock_report, patch(
            "pycms.sync.engine.log_error"
        ) as mock_generic:
            assert executor.execute(plan) is False

        mock_output.error.assert_called_once_with(
            'Uploading file "./site.css" to "/css/site.css" failed'
        )
        mock_report.assert_called_once()
        reported_error, context = mock_report.call_args.args[1:]
        assert reported_error is error
        assert context.account_id == 123
        assert context.request == "/css/site.css"
        assert context.payload == "./site.css"
        mock_generic.assert_not_called()
        mock_output.success.assert_not_called()


class TestUploadExecutorFolder:
    """Tests for folder execution."""

    def _plan(self, assets: Path, cwd: Path) -> FolderPlan:
        target = SyncTarget(
            kind=PathKind.DIRECTORY,
            source="./assets",
            local_path=assets,
            remote_path="assets",
        )
        return FolderPlan(target=target, mode=Mode.PUBLISH, cwd=cwd)

    def test_folder_success(self, mock_client, mock_output, assets, temp_dir):
        """Test that a folder upload reports start and completion."""
        executor = UploadExecutor(mock_client, mock_output, 123)

        assert executor.execute(self._plan(assets, temp_dir)) is True

        mock_output.info.assert_called_once_with(
            'Uploading files from "./assets" to "assets" in the Design Manager '
            "of account 123"
        )
        mock_output.success.assert_called_once_with(
            'Uploading files to "assets" in the Design Manager is complete'
        )
        assert mock_client.upload.call_count == 2

    def test_folder_failure_reports_generic_error_once(
        self, mock_client, mock_output, assets, temp_dir
    ):
        """Test the assets scenario with a remote failure."""
        mock_client.upload.side_effect = CmsAPIError("unavailable", status_code=503)
        executor = UploadExecutor(mock_client, mock_output, 123)

        with patch("pycms.sync.engine.log_error") as mock_generic, patch(
            "pycms.sync.engine.log_api_upload_error"
        ):
            assert executor.execute(self._plan(assets, temp_dir)) is False

        mock_generic.assert_called_once()
        assert isinstance(mock_generic.call_args.args[1], CmsUploadError)
        assert mock_generic.call_args.args[2] == {"account_id": 123}
        mock_output.error.assert_called_once_with("Uploading failed")
        mock_output.success.assert_not_called()

    def test_unknown_plan_type(self, mock_client, mock_output):
        """Test that unsupported plans are refused."""
        executor = UploadExecutor(mock_client, mock_output, 123)
        with pytest.raises(TypeError):
            executor.execute(object())
