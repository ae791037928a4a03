"""Tests for upload planning."""

from unittest.mock import Mock, patch

import pytest

from pycms.paths import PathKind
from pycms.sync import (
    FolderPlan,
    IgnoreFilter,
    IssueKind,
    Mode,
    SingleFilePlan,
    plan_upload,
)
from pycms.sync.ignore import IGNORE_FILE_NAME


@pytest.fixture
def project(temp_dir):
    """Create a small project tree."""
    (temp_dir / "site.css").write_text("body {}")
    (temp_dir / "notes.docx").write_text("")
    (temp_dir / "assets").mkdir()
    (temp_dir / "assets" / "main.js").write_text("")
    return temp_dir


class TestPlanUploadFile:
    """Tests for planning single-file uploads."""

    def test_file_plan(self, project):
        """Test that a valid file produces a single-file plan."""
        result = plan_upload("./site.css", "/css/site.css", Mode.PUBLISH, cwd=project)

        assert result.ok
        assert result.issues == []
        assert isinstance(result.plan, SingleFilePlan)
        target = result.plan.target
        assert target.kind == PathKind.FILE
        assert target.source == "./site.css"
        assert target.local_path == project / "site.css"
        assert target.remote_path == "/css/site.css"
        assert result.plan.query == {"buffer": False}

    def test_draft_mode_query(self, project):
        """Test that the mode shapes the query parameters."""
        result = plan_upload("site.css", "css/site.css", Mode.DRAFT, cwd=project)
        assert result.plan.query == {"buffer": True}

    def test_dest_is_normalized(self, project):
        """Test that backslashes in the destination are converted."""
        result = plan_upload("site.css", "css\\site.css", Mode.PUBLISH, cwd=project)
        assert result.plan.target.remote_path == "css/site.css"

    def test_invalid_extension(self, project):
        """Test that files with disallowed extensions are rejected."""
        result = plan_upload("notes.docx", "notes.docx", Mode.PUBLISH, cwd=project)

        assert not result.ok
        assert result.plan is None
        assert len(result.issues) == 1
        assert result.issues[0].kind == IssueKind.EXTENSION
        assert "does not have a valid extension" in result.issues[0].message

    def test_ignored_file(self, project):
        """Test that an ignored file is rejected with a message."""
        (project / IGNORE_FILE_NAME).write_text("site.css\n")
        result = plan_upload("site.css", "css/site.css", Mode.PUBLISH, cwd=project)

        assert not result.ok
        assert len(result.issues) == 1
        assert result.issues[0].kind == IssueKind.IGNORED
        assert ".hsignore" in result.issues[0].message

    def test_default_rules_outside_working_directory(self, project):
        """Test that built-in rules apply to a file outside the cwd."""
        work = project / "work"
        work.mkdir()
        (project / ".hidden.css").write_text("")

        result = plan_upload("../.hidden.css", "hidden.css", Mode.PUBLISH, cwd=work)

        assert result.issues[0].kind == IssueKind.IGNORED

    def test_extension_checked_before_ignore(self, project):
        """Test that the extension check runs first."""
        ignore_filter = Mock(spec=IgnoreFilter)
        result = plan_upload(
            "notes.docx",
            "notes.docx",
            Mode.PUBLISH,
            cwd=project,
            ignore_filter=ignore_filter,
        )
        assert result.issues[0].kind == IssueKind.EXTENSION
        ignore_filter.should_ignore.assert_not_called()

    def test_custom_ignore_filter(self, project):
        """Test that a supplied ignore filter is used."""
        ignore_filter = IgnoreFilter.from_patterns(["*.css"])
        result = plan_upload(
            "site.css",
            "site.css",
            Mode.PUBLISH,
            cwd=project,
            ignore_filter=ignore_filter,
        )
        assert result.issues[0].kind == IssueKind.IGNORED


class TestPlanUploadFolder:
    """Tests for planning folder uploads."""

    def test_folder_plan(self, project):
        """Test that a directory produces a folder plan."""
        result = plan_upload("./assets", "/assets", Mode.PUBLISH, cwd=project)

        assert result.ok
        assert isinstance(result.plan, FolderPlan)
        assert result.plan.target.kind == PathKind.DIRECTORY
        assert result.plan.target.local_path == project / "assets"
        assert result.plan.cwd == project
        assert result.plan.mode == Mode.PUBLISH

    def test_folder_skips_file_checks(self, project):
        """Test that ignore rules are not consulted for folders."""
        ignore_filter = Mock(spec=IgnoreFilter)
        ignore_filter.should_ignore.return_value = True
        result = plan_upload(
            "assets", "assets", Mode.PUBLISH, cwd=project, ignore_filter=ignore_filter
        )
        assert result.ok
        ignore_filter.should_ignore.assert_not_called()


class TestPlanUploadValidation:
    """Tests for validation failures."""

    @pytest.mark.parametrize("src", ["missing.css", "nope/", "assets/missing"])
    def test_invalid_source_single_issue(self, project, src):
        """Test that a missing source yields exactly one issue."""
        result = plan_upload(src, "dest", Mode.PUBLISH, cwd=project)

        assert result.plan is None
        assert len(result.issues) == 1
        assert result.issues[0].kind == IssueKind.SOURCE
        assert result.issues[0].message == (
            f'The path "{src}" is not a path to a file or folder'
        )

    @pytest.mark.parametrize("dest", ["", None])
    def test_empty_dest_fails_before_filesystem(self, project, dest):
        """Test that an empty destination is reported before any probing."""
        ignore_filter = Mock(spec=IgnoreFilter)
        with patch("pycms.sync.planner.classify_path") as mock_classify:
            result = plan_upload(
                "site.css", dest, Mode.PUBLISH, cwd=project, ignore_filter=ignore_filter
            )

        mock_classify.assert_not_called()
        ignore_filter.should_ignore.assert_not_called()
        assert len(result.issues) == 1
        assert result.issues[0].kind == IssueKind.DESTINATION
        assert result.issues[0].message == "A destination path needs to be passed"

    def test_structure_issues_are_all_reported(self, project):
        """Test that every structural issue is returned."""
        validator = Mock(return_value=["first problem", "second problem"])
        result = plan_upload(
            "site.css",
            "css/site.css",
            Mode.PUBLISH,
            cwd=project,
            validate_paths=validator,
        )

        assert [issue.message for issue in result.issues] == [
            "first problem",
            "second problem",
        ]
        assert all(issue.kind == IssueKind.STRUCTURE for issue in result.issues)
        validator.assert_called_once_with(
            "site.css", "css/site.css", local_path=project / "site.css", cwd=project
        )

    def test_structure_checked_before_extension(self, project):
        """Test that structure issues win over a bad extension."""
        validator = Mock(return_value=["problem"])
        result = plan_upload(
            "notes.docx",
            "notes.docx",
            Mode.PUBLISH,
            cwd=project,
            validate_paths=validator,
        )
        assert result.issues[0].kind == IssueKind.STRUCTURE
