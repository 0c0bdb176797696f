from typing import Protocol
from .models import MarkdownRequest

class Formatter(Protocol):
    def render_markdown(self, request: MarkdownRequest) -> str:
        ...
