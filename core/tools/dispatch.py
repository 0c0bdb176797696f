from typing import Any, Mapping, Union

from pydantic import BaseModel, ValidationError
from pydantic_core import to_jsonable_python

from core.contracts.models import ToolCall, ToolOutcome, ToolRejection
from core.contracts.tool import ToolSpec
from utils.logger import logger


def _describe_error(error: Mapping[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "(arguments)"
    return f"{location}: {error.get('msg', 'invalid value')}"


def validate_tool_input(spec: ToolSpec, arguments: Mapping[str, Any]) -> Union[BaseModel, ToolRejection]:
    """
    Checks raw model-supplied arguments against the tool's input model.

    Returns:
        The parsed input model, or a ToolRejection listing every problem found.
    """
    try:
        return spec.input_model.model_validate(arguments)
    except ValidationError as e:
        return ToolRejection(tool=spec.name, errors=[_describe_error(err) for err in e.errors()])


def dispatch(call: ToolCall, tools: Mapping[str, ToolSpec]) -> ToolOutcome:
    """
    Validates and runs a single tool call.

    Unknown tools, unparseable arguments and schema violations come back as
    failed outcomes without running anything. Exceptions raised by the tool
    itself propagate.
    """
    spec = tools.get(call.name)
    if spec is None:
        error = f"Unknown tool '{call.name}'. Available tools: {sorted(tools)}"
        logger.warning(error)
        return ToolOutcome(call_id=call.id, name=call.name, success=False, error=error)

    if call.parse_error is not None:
        logger.warning(f"Tool '{call.name}' called with unparseable arguments: {call.parse_error}")
        return ToolOutcome(
            call_id=call.id,
            name=call.name,
            success=False,
            error=f"Arguments for tool '{call.name}' are not a valid JSON object: {call.parse_error}",
        )

    parsed = validate_tool_input(spec, call.arguments)
    if isinstance(parsed, ToolRejection):
        logger.warning(parsed.describe())
        return ToolOutcome(call_id=call.id, name=call.name, success=False, error=parsed.describe())

    logger.debug(f"Executing tool '{call.name}' with {parsed!r}")
    result = spec.execute(parsed)
    return ToolOutcome(
        call_id=call.id,
        name=call.name,
        success=bool(getattr(result, "success", True)),
        output=to_jsonable_python(result, by_alias=True, exclude_none=True),
    )
