import os
from typing import Iterable, List, Optional

from core.contracts.models import DiffRequest, FileDiff
from core.contracts.tool import Tool
from core.registry import tool_registry
from utils.errors import AIReviewException, DiffReaderError
from utils.git import get_file_diff, is_git_repository, list_changed_files
from utils.logger import logger

DEFAULT_EXCLUDE_FILES = ("dist", "bun.lock")


@tool_registry.register("get_file_changes_in_directory")
class DiffReader(Tool):
    """
    Reads the uncommitted changes of a git working tree, one diff per file.
    """

    description = "Get the code changes made in given directory"
    input_model = DiffRequest

    def __init__(self, exclude_files: Optional[Iterable[str]] = None, staged: bool = False):
        self.exclude_files = frozenset(DEFAULT_EXCLUDE_FILES if exclude_files is None else exclude_files)
        self.staged = staged

    def execute(self, request: DiffRequest) -> List[FileDiff]:
        """
        Lists the changed files with `git diff --name-only` and fetches each diff.

        Returns:
            The diffs in the order git lists the files, skipping excluded paths.

        Raises:
            DiffReaderError: If the directory is missing, is not a git working tree,
                or a git command fails.
        """
        root_dir = request.root_dir
        if not os.path.isdir(root_dir):
            raise DiffReaderError(f"Directory not found: {root_dir}")
        if not is_git_repository(root_dir):
            raise DiffReaderError(f"Not a git repository: {root_dir}")

        try:
            changed = list_changed_files(cwd=root_dir, staged=self.staged)
            logger.debug(f"{len(changed)} changed file(s) in {root_dir}")
            diffs = []
            for path in changed:
                if path in self.exclude_files:
                    logger.debug(f"Skipping excluded file: {path}")
                    continue
                diffs.append(FileDiff(file=path, diff=get_file_diff(path, cwd=root_dir, staged=self.staged)))
            return diffs
        except AIReviewException as e:
            raise DiffReaderError(f"Failed to read changes in {root_dir}: {e}") from e
