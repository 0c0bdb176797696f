import subprocess
import unittest
from unittest.mock import MagicMock, patch

import pytest

from core.contracts.models import CommitRequest, DiffRequest, FileDiff, MarkdownRequest
from core.tools.commit_composer import CommitComposer
from core.tools.diff_reader import DiffReader
from core.tools.report_writer import ReportWriter
from utils.errors import DiffReaderError

GIT_KWARGS = dict(cwd="/repo", capture_output=True, text=True, check=True, encoding="utf-8", errors="replace")


def _completed(stdout: str = "") -> MagicMock:
    process = MagicMock()
    process.returncode = 0
    process.stdout = stdout
    process.stderr = ""
    return process


def _fake_git(changed: str):
    def run(args, **kwargs):
        if args[1] == "rev-parse":
            return _completed("true\n")
        if args[1:3] == ["diff", "--name-only"]:
            return _completed(changed)
        return _completed(f"diff for {args[-1]}")
    return run


@patch("os.path.isdir", return_value=True)
class TestDiffReader(unittest.TestCase):

    @patch("subprocess.run")
    def test_returns_diffs_in_git_order(self, mock_run, _isdir):
        # Arrange
        mock_run.side_effect = _fake_git("src/app.py\x00README.md\x00")
        reader = DiffReader()

        # Act
        result = reader.execute(DiffRequest(root_dir="/repo"))

        # Assert
        self.assertEqual(result, [
            FileDiff(file="src/app.py", diff="diff for src/app.py"),
            FileDiff(file="README.md", diff="diff for README.md"),
        ])
        mock_run.assert_any_call(["git", "diff", "--name-only", "--relative", "-z"], **GIT_KWARGS)
        mock_run.assert_any_call(["git", "diff", "--", "src/app.py"], **GIT_KWARGS)

    @patch("subprocess.run")
    def test_excluded_files_never_appear(self, mock_run, _isdir):
        # Arrange
        mock_run.side_effect = _fake_git("dist\x00src/app.py\x00bun.lock\x00")
        reader = DiffReader()

        # Act
        result = reader.execute(DiffRequest(root_dir="/repo"))

        # Assert
        self.assertEqual([d.file for d in result], ["src/app.py"])
        requested = [call.args[0][-1] for call in mock_run.call_args_list]
        self.assertNotIn("dist", requested)
        self.assertNotIn("bun.lock", requested)

    @patch("subprocess.run")
    def test_custom_exclusions_and_staged(self, mock_run, _isdir):
        # Arrange
        mock_run.side_effect = _fake_git("package-lock.json\x00dist\x00")
        reader = DiffReader(exclude_files=["package-lock.json"], staged=True)

        # Act
        result = reader.execute(DiffRequest(root_dir="/repo"))

        # Assert
        self.assertEqual(result, [FileDiff(file="dist", diff="diff for dist")])
        mock_run.assert_any_call(["git", "diff", "--name-only", "--relative", "-z", "--cached"], **GIT_KWARGS)
        mock_run.assert_any_call(["git", "diff", "--cached", "--", "dist"], **GIT_KWARGS)

    @patch("subprocess.run")
    def test_no_changes(self, mock_run, _isdir):
        # Arrange
        mock_run.side_effect = _fake_git("")

        # Act
        result = DiffReader().execute(DiffRequest(root_dir="/repo"))

        # Assert
        self.assertEqual(result, [])

    @patch("subprocess.run")
    def test_not_a_repository(self, mock_run, _isdir):
        # Arrange
        mock_run.side_effect = subprocess.CalledProcessError(
            returncode=128, cmd="git rev-parse", stderr="fatal: not a git repository"
        )

        # Act & Assert
        with self.assertRaises(DiffReaderError) as cm:
            DiffReader().execute(DiffRequest(root_dir="/repo"))
        self.assertIn("Not a git repository", str(cm.exception))

    @patch("subprocess.run")
    def test_git_failure_propagates(self, mock_run, _isdir):
        # Arrange
        def run(args, **kwargs):
            if args[1] == "rev-parse":
                return _completed("true\n")
            raise subprocess.CalledProcessError(returncode=128, cmd="git diff", stderr="fatal: bad revision")
        mock_run.side_effect = run

        # Act & Assert
        with self.assertRaises(DiffReaderError) as cm:
            DiffReader().execute(DiffRequest(root_dir="/repo"))
        self.assertIn("bad revision", str(cm.exception))


def test_diff_reader_missing_directory(tmp_path):
    """A directory that does not exist aborts with DiffReaderError."""
    with pytest.raises(DiffReaderError, match="Directory not found"):
        DiffReader().execute(DiffRequest(root_dir=str(tmp_path / "missing")))


@patch("os.path.isdir", return_value=True)
class TestCommitComposer(unittest.TestCase):

    @patch("subprocess.run")
    def test_commit_success(self, mock_run, _isdir):
        # Arrange
        def run(args, **kwargs):
            if args[1] == "rev-parse":
                return _completed("0123456789abcdef\n")
            return _completed("[main 0123456] feat(auth): add login")
        mock_run.side_effect = run
        request = CommitRequest(root_dir="/repo", type="feat", scope="auth", description="add login")

        # Act
        result = CommitComposer().execute(request)

        # Assert
        self.assertTrue(result.success)
        self.assertEqual(result.message, "feat(auth): add login")
        self.assertEqual(result.hash, "0123456789abcdef")
        self.assertIsNone(result.error)
        mock_run.assert_any_call(["git", "commit", "-m", "feat(auth): add login"], **GIT_KWARGS)
        mock_run.assert_any_call(["git", "rev-parse", "HEAD"], **GIT_KWARGS)

    @patch("subprocess.run")
    def test_nothing_staged(self, mock_run, _isdir):
        # Arrange
        mock_run.side_effect = subprocess.CalledProcessError(
            returncode=1, cmd="git commit", output="nothing to commit, working tree clean", stderr=""
        )
        request = CommitRequest(root_dir="/repo", type="fix", description="bug")

        # Act
        result = CommitComposer().execute(request)

        # Assert
        self.assertFalse(result.success)
        self.assertIsNone(result.hash)
        self.assertEqual(result.message, "")
        self.assertIn("nothing to commit", result.error)

    @patch("subprocess.run", side_effect=FileNotFoundError)
    def test_git_not_installed(self, _run, _isdir):
        request = CommitRequest(root_dir="/repo", type="chore", description="bump")

        result = CommitComposer().execute(request)

        self.assertFalse(result.success)
        self.assertIn("Git is not installed", result.error)


def test_commit_composer_missing_directory(tmp_path):
    """Failures are returned, never raised."""
    request = CommitRequest(root_dir=str(tmp_path / "missing"), type="docs", description="readme")

    result = CommitComposer().execute(request)

    assert result.success is False
    assert result.hash is None
    assert "Directory not found" in result.error


def test_report_writer_plain_document(tmp_path):
    """Without metadata the document is just the heading and the content."""
    target = tmp_path / "review.md"
    request = MarkdownRequest(file_path=str(target), title="T", content="C")

    result = ReportWriter().execute(request)

    assert target.read_text(encoding="utf-8") == "# T\n\nC"
    assert result.success is True
    assert result.size == len("# T\n\nC")
    assert result.file_path == str(target)


def test_report_writer_front_matter(tmp_path):
    """Strings are written verbatim, other values as JSON."""
    target = tmp_path / "review.md"
    request = MarkdownRequest(
        file_path=str(target),
        title="Review",
        content="Looks good.",
        include_metadata=True,
        metadata={"author": "bot", "approved": True, "files": 3, "score": 0.5, "ticket": None},
    )

    ReportWriter().execute(request)

    assert target.read_text(encoding="utf-8") == (
        "---\n"
        "author: bot\n"
        "approved: true\n"
        "files: 3\n"
        "score: 0.5\n"
        "ticket: null\n"
        "---\n"
        "\n"
        "# Review\n"
        "\n"
        "Looks good."
    )


def test_report_writer_metadata_ignored_without_flag(tmp_path):
    """include_metadata=False never produces a front-matter delimiter."""
    target = tmp_path / "review.md"
    request = MarkdownRequest(
        file_path=str(target), title="T", content="C", include_metadata=False, metadata={"author": "bot"}
    )

    ReportWriter().execute(request)

    assert "---" not in target.read_text(encoding="utf-8")


def test_report_writer_empty_metadata(tmp_path):
    """An empty metadata mapping still produces the front-matter delimiters."""
    target = tmp_path / "review.md"
    request = MarkdownRequest(file_path=str(target), title="T", content="C", include_metadata=True, metadata={})

    result = ReportWriter().execute(request)

    assert target.read_text(encoding="utf-8") == "---\n---\n\n# T\n\nC"
    assert result.size == len("---\n---\n\n# T\n\nC")


def test_report_writer_overwrites(tmp_path):
    """Writing the same request twice leaves the same content, not two copies."""
    target = tmp_path / "review.md"
    target.write_text("stale content that is much longer than the report", encoding="utf-8")
    request = MarkdownRequest(file_path=str(target), title="T", content="C")

    ReportWriter().execute(request)
    first = target.read_text(encoding="utf-8")
    ReportWriter().execute(request)

    assert target.read_text(encoding="utf-8") == first == "# T\n\nC"


def test_report_writer_size_counts_bytes(tmp_path):
    target = tmp_path / "review.md"
    request = MarkdownRequest(file_path=str(target), title="Überblick", content="naïve café")

    result = ReportWriter().execute(request)

    assert result.size == len("# Überblick\n\nnaïve café".encode("utf-8"))
    assert result.size == target.stat().st_size


def test_report_writer_failure_is_returned(tmp_path):
    """A write into a missing directory is reported as a failed result."""
    target = tmp_path / "missing" / "review.md"
    request = MarkdownRequest(file_path=str(target), title="T", content="C")

    result = ReportWriter().execute(request)

    assert result.success is False
    assert result.size is None
    assert result.error
    assert not target.exists()
