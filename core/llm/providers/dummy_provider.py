from typing import AsyncIterator, List, Optional, Sequence, Tuple
import asyncio

from core.contracts.models import Message, ModelFinish, ProviderEvent, TextDelta, ToolCallEvent
from core.contracts.provider import LLMProvider
from core.contracts.tool import ToolSpec
from config.models import ModelConfig
from core.registry import provider_registry


@provider_registry.register("dummy")
class DummyProvider(LLMProvider):
    """
    A scripted provider for tests and offline runs.

    Each call to `stream` replays the next scripted step. When the script runs
    out, the last step repeats, so a script that always calls a tool keeps the
    agent busy until its step ceiling.
    """

    def __init__(
        self,
        config: ModelConfig,
        steps: Optional[List[List[ProviderEvent]]] = None,
        response: str = "test response",
        delay: float = 0.0,
    ):
        self.config = config
        self._steps = steps or [[TextDelta(text=word + " ") for word in response.split()]]
        self._delay = delay
        self.calls: List[Tuple[str, List[Message], List[str]]] = []

    async def stream(
        self,
        system: str,
        messages: Sequence[Message],
        tools: Sequence[ToolSpec],
    ) -> AsyncIterator[ProviderEvent]:
        index = min(len(self.calls), len(self._steps) - 1)
        self.calls.append((system, list(messages), [tool.name for tool in tools]))
        has_tool_calls = False
        for event in self._steps[index]:
            if self._delay:
                await asyncio.sleep(self._delay)  # Simulate network delay
            if isinstance(event, ToolCallEvent):
                has_tool_calls = True
            if isinstance(event, ModelFinish):
                continue
            yield event
        yield ModelFinish(finish_reason="tool-calls" if has_tool_calls else "stop")
