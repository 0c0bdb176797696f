from typing import Any, Callable, ClassVar, Dict, Protocol, Type

from pydantic import BaseModel, ConfigDict


class Tool(Protocol):
    """A protocol for classes the model can call as tools."""

    description: ClassVar[str]
    input_model: ClassVar[Type[BaseModel]]

    def execute(self, request: Any) -> Any:
        """Runs the tool with arguments that already passed validation."""
        ...


class ToolSpec(BaseModel):
    """What the orchestration loop and the providers know about a tool."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    description: str
    input_schema: Dict[str, Any]
    input_model: Type[BaseModel]
    execute: Callable[[Any], Any]
