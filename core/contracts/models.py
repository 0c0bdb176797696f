from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional, Union

CommitType = Literal["feat", "fix", "docs", "style", "refactor", "test", "chore"]
MetadataValue = Union[str, bool, int, float, None]


class ToolInput(BaseModel):
    """Base for tool argument models. Models send camelCase keys; snake_case is accepted too."""
    model_config = ConfigDict(populate_by_name=True)


class DiffRequest(ToolInput):
    root_dir: str = Field(..., alias="rootDir", min_length=1, description="The root directory")


class FileDiff(BaseModel):
    file: str
    diff: str


class CommitRequest(ToolInput):
    root_dir: str = Field(..., alias="rootDir", min_length=1, description="The root directory")
    type: CommitType = Field(..., description="Type of commit")
    scope: Optional[str] = Field(None, description="Scope of the commit (optional)")
    description: str = Field(..., min_length=1, description="Brief description of the changes")
    body: Optional[str] = Field(None, description="Detailed description of the changes (optional)")
    breaking_change: bool = Field(False, alias="breakingChange", description="Whether this is a breaking change")
    breaking_change_description: Optional[str] = Field(
        None,
        alias="breakingChangeDescription",
        description="Specific description of the breaking change (optional, used when breakingChange is true)",
    )


class CommitResult(BaseModel):
    message: str
    success: bool
    hash: Optional[str] = None
    error: Optional[str] = None


class MarkdownRequest(ToolInput):
    file_path: str = Field(..., alias="filePath", min_length=1, description="Path where the markdown file should be created")
    title: str = Field(..., min_length=1, description="Title of the markdown document")
    content: str = Field(..., min_length=1, description="Content of the markdown document")
    include_metadata: bool = Field(False, alias="includeMetadata", description="Whether to include frontmatter metadata")
    metadata: Optional[Dict[str, MetadataValue]] = Field(
        None, description="Metadata to include in frontmatter (if includeMetadata is true)"
    )


class MarkdownResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_path: str = Field(..., alias="filePath")
    success: bool
    size: Optional[int] = None
    error: Optional[str] = None


class ToolCall(BaseModel):
    id: str
    name: str
    arguments: Dict[str, Any] = {}
    # Set when the model sent arguments that are not a JSON object
    parse_error: Optional[str] = None


class ToolRejection(BaseModel):
    """Returned instead of a parsed input model when arguments do not match the tool schema."""
    tool: str
    errors: List[str]

    def describe(self) -> str:
        return f"Invalid arguments for tool '{self.tool}': " + "; ".join(self.errors)


class ToolOutcome(BaseModel):
    call_id: str
    name: str
    success: bool
    output: Any = None
    error: Optional[str] = None

    def as_content(self) -> Any:
        """What the model sees for this call."""
        if self.error is not None:
            return {"success": False, "error": self.error}
        return self.output


# Provider-neutral conversation

class UserMessage(BaseModel):
    role: Literal["user"] = "user"
    content: str


class AssistantMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    text: str = ""
    tool_calls: List[ToolCall] = []


class ToolResultMessage(BaseModel):
    role: Literal["tool"] = "tool"
    outcomes: List[ToolOutcome]


Message = Union[UserMessage, AssistantMessage, ToolResultMessage]


# Stream events

class TextDelta(BaseModel):
    type: Literal["text-delta"] = "text-delta"
    text: str


class ToolCallEvent(BaseModel):
    type: Literal["tool-call"] = "tool-call"
    call: ToolCall


class ModelFinish(BaseModel):
    """Emitted by a provider once the model response for a step is complete."""
    type: Literal["model-finish"] = "model-finish"
    finish_reason: str = "stop"


class ToolResultEvent(BaseModel):
    type: Literal["tool-result"] = "tool-result"
    outcome: ToolOutcome


class StepFinish(BaseModel):
    type: Literal["step-finish"] = "step-finish"
    step: int
    finish_reason: str
    tool_calls: int


ProviderEvent = Union[TextDelta, ToolCallEvent, ModelFinish]
AgentEvent = Union[TextDelta, ToolCallEvent, ToolResultEvent, StepFinish]
