import json
import math
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader

from core.contracts.formatter import Formatter
from core.contracts.models import MarkdownRequest
from utils.errors import FormatterError


def frontmatter_value(value: Any) -> str:
    """Strings go into front-matter verbatim, everything else as its JSON text."""
    if isinstance(value, str):
        return value
    if isinstance(value, float):
        # 1.0 -> 1, nan -> null
        if not math.isfinite(value):
            return "null"
        if value.is_integer():
            return str(int(value))
    return json.dumps(value)


class Jinja2Formatter(Formatter):
    def __init__(
        self,
        template_dir: Optional[str] = None,
        template_name: str = "report.md.j2",
    ):
        if template_dir is None:
            # Default template directory relative to this file
            template_dir = str(Path(__file__).parent / "templates")

        self.template_dir = template_dir
        self.template_name = template_name
        try:
            self.env = Environment(
                loader=FileSystemLoader(self.template_dir),
                trim_blocks=True,
                lstrip_blocks=True,
            )
            self.env.filters["frontmatter_value"] = frontmatter_value
        except Exception as e:
            raise FormatterError(f"Failed to initialize Jinja2 environment: {e}") from e

    def render_markdown(self, request: MarkdownRequest) -> str:
        try:
            template = self.env.get_template(self.template_name)
            return template.render(request=request)
        except Exception as e:
            raise FormatterError(f"Failed to render template {self.template_name}: {e}") from e
