import asyncio
from typing import AsyncIterator, Dict, List, Optional, Sequence

from config.models import Config
from core.contracts.models import (
    AgentEvent,
    AssistantMessage,
    Message,
    ModelFinish,
    StepFinish,
    TextDelta,
    ToolCall,
    ToolCallEvent,
    ToolResultEvent,
    ToolResultMessage,
    UserMessage,
)
from core.contracts.provider import LLMProvider
from core.contracts.tool import ToolSpec
from core.llm.router import get_provider
from core.prompts import SYSTEM_PROMPT, build_instruction
from core.tools import build_toolset, dispatch, tool_options_from_config
from utils.logger import logger


class ReviewAgent:
    """
    The tool-calling loop behind a review.

    Each step sends the system prompt, the conversation and the tool specs to
    the provider and streams the reply. Tool calls in the reply are validated
    and executed one at a time, their outcomes are appended to the
    conversation, and the next step starts. The run ends after a step with no
    tool calls, or once `review.max_steps` steps have run.
    """

    def __init__(
        self,
        config: Config,
        provider: Optional[LLMProvider] = None,
        tools: Optional[Sequence[ToolSpec]] = None,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        """
        Args:
            config: The configuration object.
            provider: Overrides the provider named in `config.model`.
            tools: Overrides the default toolset built from the tool registry.
            system_prompt: The system guidance sent with every step.
        """
        self.config = config
        self.provider = provider if provider is not None else get_provider(config.model)
        if tools is None:
            tools = build_toolset(tool_options_from_config(config.review))
        self.tools: List[ToolSpec] = list(tools)
        self._tools_by_name: Dict[str, ToolSpec] = {tool.name: tool for tool in self.tools}
        self.system_prompt = system_prompt
        self.max_steps = config.review.max_steps
        self.messages: List[Message] = []
        self.steps_taken = 0

    def instruction_for(self, target_dir: str) -> str:
        if self.config.review.instruction:
            return build_instruction(target_dir, self.config.review.instruction)
        return build_instruction(target_dir)

    async def review(self, target_dir: str) -> AsyncIterator[AgentEvent]:
        """Reviews the uncommitted changes in `target_dir`."""
        async for event in self.run(self.instruction_for(target_dir)):
            yield event

    async def run(self, instruction: str) -> AsyncIterator[AgentEvent]:
        """
        Runs the loop for one instruction, yielding events as they happen.

        Text deltas are yielded as soon as the provider produces them; the
        consumer decides how to display them.

        Raises:
            ProviderError: If a model request fails.
            DiffReaderError: If the changes of a directory cannot be read.
        """
        self.messages = [UserMessage(content=instruction)]
        self.steps_taken = 0
        logger.info(f"Starting review with {len(self.tools)} tools, at most {self.max_steps} steps")

        for step in range(1, self.max_steps + 1):
            self.steps_taken = step
            text_parts: List[str] = []
            calls: List[ToolCall] = []
            finish_reason = "stop"

            logger.debug(f"Step {step}: awaiting model output")
            async for event in self.provider.stream(self.system_prompt, self.messages, self.tools):
                if isinstance(event, TextDelta):
                    text_parts.append(event.text)
                    yield event
                elif isinstance(event, ToolCallEvent):
                    calls.append(event.call)
                    yield event
                elif isinstance(event, ModelFinish):
                    finish_reason = event.finish_reason

            self.messages.append(AssistantMessage(text="".join(text_parts), tool_calls=calls))

            if calls:
                outcomes = []
                for call in calls:
                    logger.info(f"Step {step}: calling tool '{call.name}'")
                    # One call at a time: at most one commit may be in flight per working tree
                    outcome = await asyncio.to_thread(dispatch, call, self._tools_by_name)
                    if not outcome.success:
                        logger.info(f"Tool '{call.name}' reported failure: {outcome.error or outcome.output}")
                    outcomes.append(outcome)
                    yield ToolResultEvent(outcome=outcome)
                self.messages.append(ToolResultMessage(outcomes=outcomes))

            yield StepFinish(step=step, finish_reason=finish_reason, tool_calls=len(calls))

            if not calls:
                logger.info(f"Model finished after {step} step(s) ({finish_reason})")
                break
        else:
            logger.warning(f"Stopped after reaching the limit of {self.max_steps} steps")

    async def aclose(self) -> None:
        """Releases the provider's HTTP client, if it has one."""
        close = getattr(self.provider, "aclose", None)
        if close is not None:
            await close()
