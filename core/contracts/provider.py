from typing import AsyncIterator, Protocol, Sequence

from .models import Message, ProviderEvent
from .tool import ToolSpec


class LLMProvider(Protocol):
    """A protocol for LLM providers."""

    def stream(
        self,
        system: str,
        messages: Sequence[Message],
        tools: Sequence[ToolSpec],
    ) -> AsyncIterator[ProviderEvent]:
        """
        Runs one model step and streams its output.

        Args:
            system: The system prompt.
            messages: The conversation so far.
            tools: The tools the model may call.

        Returns:
            An async iterator of text deltas and tool calls, ending with a ModelFinish event.
        """
        ...
