import subprocess
from typing import List, Optional

from utils.errors import AIReviewException


def _run_git(args: List[str], cwd: Optional[str] = None) -> subprocess.CompletedProcess:
    """
    Runs a git command in the given working directory.

    Raises:
        FileNotFoundError: If git is not installed.
        subprocess.CalledProcessError: If the command exits with a non-zero status.
    """
    return subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
        encoding="utf-8",
        # Diffs of non-UTF-8 files still come back, with U+FFFD in place of bad bytes
        errors="replace",
    )


def _error_output(e: subprocess.CalledProcessError) -> str:
    # git reports some failures (e.g. "nothing to commit") on stdout only
    return (e.stderr or "").strip() or (e.stdout or "").strip() or str(e)


def is_git_repository(cwd: Optional[str] = None) -> bool:
    """Checks if the given directory is inside a Git working tree."""
    try:
        result = _run_git(["rev-parse", "--is-inside-work-tree"], cwd)
        return result.stdout.strip() == "true"
    except (subprocess.CalledProcessError, FileNotFoundError, NotADirectoryError):
        return False


def list_changed_files(cwd: Optional[str] = None, staged: bool = False) -> List[str]:
    """
    Lists the paths with uncommitted changes, in the order git reports them.

    Args:
        cwd: The working tree to inspect.
        staged: Compare the index against HEAD instead of the working tree against the index.

    Raises:
        AIReviewException: If the git command fails.
    """
    args = ["diff", "--name-only", "--relative", "-z"]
    if staged:
        args.append("--cached")
    try:
        result = _run_git(args, cwd)
    except FileNotFoundError:
        raise AIReviewException("Git is not installed or not in PATH.")
    except subprocess.CalledProcessError as e:
        raise AIReviewException(f"Failed to list changed files: {_error_output(e)}") from e
    return [path for path in result.stdout.split("\x00") if path]


def get_file_diff(path: str, cwd: Optional[str] = None, staged: bool = False) -> str:
    """
    Retrieves the diff of a single file.

    Raises:
        AIReviewException: If the git command fails.
    """
    args = ["diff"]
    if staged:
        args.append("--cached")
    args.extend(["--", path])
    try:
        return _run_git(args, cwd).stdout
    except FileNotFoundError:
        raise AIReviewException("Git is not installed or not in PATH.")
    except subprocess.CalledProcessError as e:
        raise AIReviewException(f"Failed to get git diff for {path}: {_error_output(e)}") from e


def commit(message: str, cwd: Optional[str] = None) -> None:
    """
    Creates a Git commit with the given message.

    Args:
        message: The commit message.
        cwd: The working tree to commit in.

    Raises:
        AIReviewException: If the git commit command fails.
    """
    try:
        _run_git(["commit", "-m", message], cwd)
    except FileNotFoundError:
        raise AIReviewException("Git is not installed or not in PATH.")
    except subprocess.CalledProcessError as e:
        raise AIReviewException(f"Failed to create commit: {_error_output(e)}")


def rev_parse(ref: str = "HEAD", cwd: Optional[str] = None) -> str:
    """
    Resolves a revision to its full object name.

    Raises:
        AIReviewException: If the ref cannot be resolved.
    """
    try:
        return _run_git(["rev-parse", ref], cwd).stdout.strip()
    except FileNotFoundError:
        raise AIReviewException("Git is not installed or not in PATH.")
    except subprocess.CalledProcessError as e:
        raise AIReviewException(f"Failed to resolve {ref}: {_error_output(e)}")
