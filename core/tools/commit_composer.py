import os

from core.contracts.models import CommitRequest, CommitResult
from core.contracts.tool import Tool
from core.formatter.conventional import render_commit_message
from core.registry import tool_registry
from utils.errors import AIReviewException
from utils.git import commit, rev_parse
from utils.logger import logger

FALLBACK_ERROR = "Unknown error occurred during commit generation"


@tool_registry.register("generate_commit_message")
class CommitComposer(Tool):
    """
    Creates a git commit with a Conventional Commits message built from structured fields.
    Failures are reported in the result rather than raised.
    """

    description = "Generate and create a git commit with a conventional commit message format"
    input_model = CommitRequest

    def execute(self, request: CommitRequest) -> CommitResult:
        try:
            message = render_commit_message(request)
            if not os.path.isdir(request.root_dir):
                raise AIReviewException(f"Directory not found: {request.root_dir}")
            commit(message, cwd=request.root_dir)
            revision = rev_parse("HEAD", cwd=request.root_dir)
            logger.info(f"Created commit {revision[:8]} in {request.root_dir}")
            return CommitResult(message=message, success=True, hash=revision)
        except Exception as e:
            logger.warning(f"Commit in {request.root_dir} failed: {e}")
            return CommitResult(message="", success=False, error=str(e) or FALLBACK_ERROR)
