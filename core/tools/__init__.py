"""The tools exposed to the model. Importing this package registers them."""
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.contracts.tool import ToolSpec
from core.registry import tool_registry
from core.tools import commit_composer, diff_reader, report_writer  # noqa: F401
from core.tools.dispatch import dispatch, validate_tool_input  # noqa: F401
from utils.errors import ToolError


def build_toolset(
    options: Optional[Mapping[str, Mapping[str, Any]]] = None,
    names: Optional[Iterable[str]] = None,
) -> List[ToolSpec]:
    """
    Instantiates registered tools and wraps each in an immutable ToolSpec.

    Args:
        options: Constructor keyword arguments per tool name.
        names: Restrict the toolset to these tools. Defaults to every registered tool.

    Raises:
        ToolError: If a requested tool is not registered or cannot be created.
    """
    options = options or {}
    selected = list(names) if names is not None else list(tool_registry.keys())
    specs = []
    for name in selected:
        try:
            tool = tool_registry.create(name, **options.get(name, {}))
        except KeyError:
            raise ToolError(f"Unknown tool '{name}'. Available tools: {list(tool_registry.keys())}")
        except Exception as e:
            raise ToolError(f"Failed to create tool '{name}': {e}") from e
        specs.append(ToolSpec(
            name=name,
            description=tool.description,
            input_schema=tool.input_model.model_json_schema(by_alias=True),
            input_model=tool.input_model,
            execute=tool.execute,
        ))
    return specs


def tool_options_from_config(review_config: Any) -> Dict[str, Dict[str, Any]]:
    """Maps the review section of the config onto tool constructor options."""
    return {
        "get_file_changes_in_directory": {
            "exclude_files": list(review_config.exclude_files),
            "staged": review_config.staged,
        },
    }
