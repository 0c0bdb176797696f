import os
import httpx
import json
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple

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


@provider_registry.register("openai")
class OpenAIProvider(LLMProvider):
    """
    A streaming tool-calling provider for the OpenAI Chat Completions API.
    Subclasses point it at other services that speak the same protocol.
    """

    display_name = "OpenAI"
    default_base_url: Optional[str] = "https://api.openai.com/v1"
    api_key_env: Tuple[str, ...] = ("OPENAI_API_KEY",)
    default_api_key: Optional[str] = None

    def __init__(self, config: ModelConfig):
        self.config = config
        self._api_key = config.api_key or self._api_key_from_env() or self.default_api_key
        if not self._api_key:
            raise ProviderError(
                f"{self.display_name} API key not found. Please set it in the config or as an "
                f"environment variable {' or '.join(self.api_key_env)}."
            )

        base_url = config.base_url or self.default_base_url
        if not base_url:
            raise ProviderError(f"{self.display_name} provider requires a `base_url` to be set in the config.")

        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.config.timeout_sec,
        )

    def _api_key_from_env(self) -> Optional[str]:
        for name in self.api_key_env:
            value = os.getenv(name)
            if value:
                return value
        return None

    @staticmethod
    def _convert_messages(messages: Sequence[Message]) -> List[Dict[str, Any]]:
        converted: List[Dict[str, Any]] = []
        for message in messages:
            if isinstance(message, UserMessage):
                converted.append({"role": "user", "content": message.content})
            elif isinstance(message, AssistantMessage):
                entry: Dict[str, Any] = {"role": "assistant", "content": message.text or None}
                if message.tool_calls:
                    entry["tool_calls"] = [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {"name": call.name, "arguments": json.dumps(call.arguments)},
                        }
                        for call in message.tool_calls
                    ]
                converted.append(entry)
            elif isinstance(message, ToolResultMessage):
                for outcome in message.outcomes:
                    converted.append({
                        "role": "tool",
                        "tool_call_id": outcome.call_id,
                        "content": json.dumps(outcome.as_content()),
                    })
        return converted

    @staticmethod
    def _convert_tools(tools: Sequence[ToolSpec]) -> List[Dict[str, Any]]:
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.input_schema,
                },
            }
            for tool in tools
        ]

    def _build_payload(self, system: str, messages: Sequence[Message], tools: Sequence[ToolSpec]) -> dict:
        payload = {
            "model": self.config.name,
            "messages": [{"role": "system", "content": system}, *self._convert_messages(messages)],
            "stream": True,
            **self.config.parameters,
        }
        if tools:
            payload["tools"] = self._convert_tools(tools)
        return payload

    async def _process_stream(self, response: httpx.Response) -> AsyncIterator[ProviderEvent]:
        """Turns SSE chunks into text deltas, then the completed tool calls, then a finish event."""
        buffer = ToolCallBuffer()
        finish_reason = None
        async for line in response.aiter_lines():
            chunk_str = parse_sse_data(line)
            if chunk_str is None:
                continue
            if chunk_str == "[DONE]":
                break
            try:
                chunk = json.loads(chunk_str)
            except json.JSONDecodeError:
                logger.debug(f"Skipping malformed stream chunk: {chunk_str[:200]}")
                continue
            if "error" in chunk:
                message = chunk["error"].get("message", chunk_str) if isinstance(chunk["error"], dict) else chunk["error"]
                raise ProviderError(f"{self.display_name} stream error: {message}")

            choices = chunk.get("choices") or [{}]
            choice = choices[0]
            delta = choice.get("delta") or {}
            content = delta.get("content")
            if content:
                yield TextDelta(text=content)
            for position, tool_delta in enumerate(delta.get("tool_calls") or []):
                function = tool_delta.get("function") or {}
                buffer.add(
                    tool_delta.get("index", position),
                    call_id=tool_delta.get("id"),
                    name=function.get("name"),
                    arguments=function.get("arguments"),
                )
            if choice.get("finish_reason"):
                finish_reason = choice["finish_reason"]

        for call in buffer.finish():
            yield ToolCallEvent(call=call)
        yield ModelFinish(finish_reason=normalize_finish_reason(finish_reason))

    async def _error_message(self, response: httpx.Response) -> str:
        error_body = await response.aread()
        try:
            error_details = json.loads(error_body)
            if isinstance(error_details, list) and error_details:
                error_details = error_details[0]
            return error_details.get("error", {}).get("message", error_body.decode())
        except (json.JSONDecodeError, AttributeError):
            return error_body.decode()

    async def stream(
        self,
        system: str,
        messages: Sequence[Message],
        tools: Sequence[ToolSpec],
    ) -> AsyncIterator[ProviderEvent]:
        """
        Streams one chat completion step, including any tool calls the model makes.
        """
        payload = self._build_payload(system, messages, tools)
        logger.debug(f"Requesting {self.config.name} from {self.display_name} with {len(payload['messages'])} messages")
        try:
            async with self._client.stream("POST", "/chat/completions", json=payload) as response:
                response.raise_for_status()
                async for event in self._process_stream(response):
                    yield event
        except httpx.HTTPStatusError as e:
            error_message = await self._error_message(e.response)
            raise ProviderError(f"{self.display_name} API error ({e.response.status_code}): {error_message}") from e
        except httpx.TimeoutException as e:
            raise ProviderError(f"Request to {self.display_name} timed out: {e}") from e
        except httpx.RequestError as e:
            raise ProviderError(f"An unexpected network error occurred: {e}") from e

    async def aclose(self) -> None:
        await self._client.aclose()
