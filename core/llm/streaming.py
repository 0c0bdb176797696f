import json
from typing import Any, Dict, List, Optional

from core.contracts.models import ToolCall

FINISH_REASONS = {
    "stop": "stop",
    "end_turn": "stop",
    "stop_sequence": "stop",
    "tool_calls": "tool-calls",
    "tool_use": "tool-calls",
    "function_call": "tool-calls",
    "length": "length",
    "max_tokens": "length",
    "content_filter": "content-filter",
}


def normalize_finish_reason(reason: Optional[str]) -> str:
    """Maps provider-specific stop reasons onto one vocabulary."""
    if not reason:
        return "stop"
    return FINISH_REASONS.get(reason, reason)


def parse_sse_data(line: str) -> Optional[str]:
    """Returns the payload of an SSE `data:` line, or None for any other line."""
    line = line.strip()
    if not line.startswith("data:"):
        return None
    data = line[len("data:"):].strip()
    return data or None


class ToolCallBuffer:
    """
    Collects tool calls whose arguments arrive as JSON fragments across many
    stream chunks, keyed by the position the provider gives each call.
    """

    def __init__(self) -> None:
        self._calls: Dict[int, Dict[str, Any]] = {}

    def __bool__(self) -> bool:
        return bool(self._calls)

    def add(self, index: int, call_id: Optional[str] = None, name: Optional[str] = None, arguments: Any = None) -> None:
        entry = self._calls.setdefault(index, {"id": None, "name": "", "arguments": ""})
        if call_id:
            entry["id"] = call_id
        if name and not entry["name"]:
            entry["name"] = name
        if isinstance(arguments, dict):
            entry["arguments"] = json.dumps(arguments)
        elif arguments:
            entry["arguments"] += arguments

    def finish(self) -> List[ToolCall]:
        calls = []
        for index in sorted(self._calls):
            entry = self._calls[index]
            arguments: Dict[str, Any] = {}
            parse_error = None
            text = entry["arguments"].strip() or "{}"
            try:
                parsed = json.loads(text)
                if isinstance(parsed, dict):
                    arguments = parsed
                else:
                    parse_error = f"expected an object, got {type(parsed).__name__}"
            except json.JSONDecodeError as e:
                parse_error = str(e)
            calls.append(ToolCall(
                id=entry["id"] or f"call_{index}",
                name=entry["name"],
                arguments=arguments,
                parse_error=parse_error,
            ))
        self._calls.clear()
        return calls
