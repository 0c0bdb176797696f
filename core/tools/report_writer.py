from typing import Optional

from core.contracts.formatter import Formatter
from core.contracts.models import MarkdownRequest, MarkdownResult
from core.contracts.tool import Tool
from core.formatter.jinja_formatter import Jinja2Formatter
from core.registry import tool_registry
from utils.logger import logger

FALLBACK_ERROR = "Unknown error occurred during markdown file generation"


@tool_registry.register("generate_markdown_file")
class ReportWriter(Tool):
    """Writes a markdown document, optionally preceded by a front-matter block."""

    description = "Generate a markdown file with optional frontmatter metadata"
    input_model = MarkdownRequest

    def __init__(self, formatter: Optional[Formatter] = None):
        self.formatter = formatter or Jinja2Formatter()

    def execute(self, request: MarkdownRequest) -> MarkdownResult:
        try:
            document = self.formatter.render_markdown(request)
            # newline="" keeps the bytes on disk identical to the rendered text
            with open(request.file_path, "w", encoding="utf-8", newline="") as f:
                f.write(document)
            size = len(document.encode("utf-8"))
            logger.info(f"Wrote {size} bytes to {request.file_path}")
            return MarkdownResult(file_path=request.file_path, success=True, size=size)
        except Exception as e:
            logger.warning(f"Writing {request.file_path} failed: {e}")
            return MarkdownResult(file_path=request.file_path, success=False, error=str(e) or FALLBACK_ERROR)
