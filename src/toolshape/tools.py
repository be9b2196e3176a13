"""Tool definitions, the registry, and the function-to-tool decorator."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar, get_type_hints

from pydantic import BaseModel

from .models import describe
from .schema import ToolSchema, generate_schema
from .types import TypeNode, annotate, object_from

T = TypeVar("T")


@dataclass(frozen=True)
class Tool:
    """A tool the model is asked to call.

    ``parameters`` describes the arguments the caller wants back. When
    ``model`` is set, decoded arguments are validated into that Pydantic
    model before being returned.
    """

    name: str
    description: str
    parameters: TypeNode
    model: Optional[Type[BaseModel]] = None

    def schema(self) -> ToolSchema:
        return generate_schema(self.parameters, self.name, self.description)

    def to_schema(self) -> Dict[str, Any]:
        """Return the provider-agnostic schema dict."""
        return self.schema().to_schema()


@dataclass
class ToolCall(Generic[T]):
    """A decoded tool call: which tool the model picked and its arguments."""

    tool: Tool
    parameters: T
    tool_index: int = 0


def _build_parameters(func: Callable[..., Any]) -> TypeNode:
    """Build an object descriptor from a function's type hints."""
    hints = get_type_hints(func, include_extras=True)
    sig = inspect.signature(func)

    props = []
    for name, param in sig.parameters.items():
        if name == "self":
            continue
        node = describe(hints.get(name, str))
        if param.default is not inspect.Parameter.empty:
            node = annotate(node, default=param.default)
        props.append((name, node))
    return object_from(props)


def tool_from_function(func: Callable[..., Any]) -> Tool:
    description = (func.__doc__ or "").strip()
    return Tool(name=func.__name__, description=description, parameters=_build_parameters(func))


class ToolRegistry:
    """Stores tool definitions by name."""

    def __init__(self) -> None:
        self._tools: Dict[str, Tool] = {}

    def register(self, item: Any) -> Tool:
        """Register a Tool, a @tool-decorated function, or a plain function."""
        if isinstance(item, Tool):
            defn = item
        else:
            defn = getattr(item, "_tool_definition", None) or tool_from_function(item)
        self._tools[defn.name] = defn
        return defn

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def list_tools(self) -> List[Tool]:
        return list(self._tools.values())

    def schemas(self) -> List[Dict[str, Any]]:
        """Return all tool schemas as a list of dicts."""
        return [t.to_schema() for t in self._tools.values()]


def tool(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator that describes a function's arguments as a tool.

    The function's name, docstring, and type hints become the tool
    declaration; decoded arguments can be passed straight back to the
    function with ``func(**call.parameters)``.

    Usage:
        @tool
        def set_mood(emotion: str, intensity: float = 0.5) -> None:
            \"\"\"Record the detected mood.\"\"\"
    """
    func._tool_definition = tool_from_function(func)  # type: ignore[attr-defined]
    return func
