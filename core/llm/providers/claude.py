import os
import httpx
import json
from typing import Any, AsyncIterator, Dict, List, Sequence

from core.contracts.models import (
    AssistantMessage,
    Message,
    ModelFinish,
    ProviderEvent,
    TextDelta,
    ToolCallEvent,
    ToolResultMessage,
    UserMessage,
)
from core.contracts.provider import LLMProvider
from core.contracts.tool import ToolSpec
from config.models import ModelConfig
from core.llm.streaming import ToolCallBuffer, normalize_finish_reason, parse_sse_data
from core.registry import provider_registry
from utils.errors import ProviderError
from utils.logger import logger

@provider_registry.register("claude")
class ClaudeProvider(LLMProvider):
    """
    A streaming tool-calling provider for the Anthropic Messages API.
    """

    def __init__(self, config: ModelConfig):
        self.config = config
        self._api_key = config.api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self._api_key:
            raise ProviderError("Anthropic API key not found. Please set it in the config or as an environment variable ANTHROPIC_API_KEY.")

        self._client = httpx.AsyncClient(
            base_url=config.base_url or "https://api.anthropic.com/v1",
            headers={
                "x-api-key": self._api_key,
                "anthropic-version": "2023-06-01",
                "Content-Type": "application/json",
            },
            timeout=self.config.timeout_sec,
        )

    @staticmethod
    def _convert_messages(messages: Sequence[Message]) -> List[Dict[str, Any]]:
        """
        Converts the conversation to Messages API turns. Tool results travel
        back as `tool_result` blocks inside a user turn.
        """
        converted: List[Dict[str, Any]] = []
        for message in messages:
            if isinstance(message, UserMessage):
                converted.append({"role": "user", "content": message.content})
            elif isinstance(message, AssistantMessage):
                blocks: List[Dict[str, Any]] = []
                if message.text:
                    blocks.append({"type": "text", "text": message.text})
                for call in message.tool_calls:
                    blocks.append({"type": "tool_use", "id": call.id, "name": call.name, "input": call.arguments})
                if blocks:
                    converted.append({"role": "assistant", "content": blocks})
            elif isinstance(message, ToolResultMessage):
                converted.append({
                    "role": "user",
                    "content": [
                        {
                            "type": "tool_result",
                            "tool_use_id": outcome.call_id,
                            "content": json.dumps(outcome.as_content()),
                            "is_error": not outcome.success,
                        }
                        for outcome in message.outcomes
                    ],
                })
        return converted

    def _build_payload(self, system: str, messages: Sequence[Message], tools: Sequence[ToolSpec]) -> dict:
        payload = {
            "model": self.config.name,
            "system": system,
            "messages": self._convert_messages(messages),
            "max_tokens": self.config.max_tokens,  # Anthropic requires max_tokens
            "stream": True,
        }
        if tools:
            payload["tools"] = [
                {"name": tool.name, "description": tool.description, "input_schema": tool.input_schema}
                for tool in tools
            ]
        payload.update(self.config.parameters)
        return payload

    async def _process_stream(self, response: httpx.Response) -> AsyncIterator[ProviderEvent]:
        """
        Processes a streaming response from the Claude API.
        """
        buffer = ToolCallBuffer()
        stop_reason = None
        async for line in response.aiter_lines():
            data_str = parse_sse_data(line)
            if data_str is None:
                continue
            try:
                chunk = json.loads(data_str)
            except json.JSONDecodeError:
                logger.debug(f"Skipping malformed stream chunk: {data_str[:200]}")
                continue

            chunk_type = chunk.get("type")
            if chunk_type == "content_block_start":
                block = chunk.get("content_block", {})
                if block.get("type") == "tool_use":
                    buffer.add(chunk.get("index", 0), call_id=block.get("id"), name=block.get("name"))
            elif chunk_type == "content_block_delta":
                delta = chunk.get("delta", {})
                if delta.get("type") == "text_delta":
                    content = delta.get("text")
                    if content:
                        yield TextDelta(text=content)
                elif delta.get("type") == "input_json_delta":
                    buffer.add(chunk.get("index", 0), arguments=delta.get("partial_json"))
            elif chunk_type == "message_delta":
                stop_reason = chunk.get("delta", {}).get("stop_reason") or stop_reason
            elif chunk_type == "error":
                message = chunk.get("error", {}).get("message", data_str)
                raise ProviderError(f"Anthropic stream error: {message}")
            elif chunk_type == "message_stop":
                break

        for call in buffer.finish():
            yield ToolCallEvent(call=call)
        yield ModelFinish(finish_reason=normalize_finish_reason(stop_reason))

    async def stream(
        self,
        system: str,
        messages: Sequence[Message],
        tools: Sequence[ToolSpec],
    ) -> AsyncIterator[ProviderEvent]:
        """
        Streams one Messages API step, including any tool_use blocks.
        """
        payload = self._build_payload(system, messages, tools)
        logger.debug(f"Requesting {self.config.name} from Anthropic with {len(payload['messages'])} messages")
        try:
            async with self._client.stream("POST", "/messages", json=payload) as response:
                response.raise_for_status()
                async for event in self._process_stream(response):
                    yield event
        except httpx.HTTPStatusError as e:
            error_body = await e.response.aread()
            try:
                error_details = json.loads(error_body)
                error_message = error_details.get("error", {}).get("message", error_body.decode())
            except json.JSONDecodeError:
                error_message = error_body.decode()
            raise ProviderError(f"Anthropic API error ({e.response.status_code}): {error_message}") from e
        except httpx.TimeoutException as e:
            raise ProviderError(f"Request to Anthropic timed out: {e}") from e
        except httpx.RequestError as e:
            raise ProviderError(f"An unexpected network error occurred: {e}") from e

    async def aclose(self) -> None:
        await self._client.aclose()
