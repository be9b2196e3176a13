"""toolshape: typed schemas for LLM tool calls, and tolerant decoding of the answers."""

from .config import Settings, get_settings
from .decoder import DecodeResult, ValidationIssue, decode
from .defaults import apply_defaults
from .errors import (
    AINotFollowingInstructionsError,
    DepthLimitError,
    ParameterValidationError,
    ReparseError,
    ToolshapeError,
    UnexpectedResponseError,
    UnsupportedTypeError,
    format_issues,
)
from .log import setup_logging
from .models import describe, structured_output
from .parser import normalize
from .pipeline import ToolCallDecoder, decode_tool_call
from .provider import get_provider
from .query import dispatch_query_formatted, handle_tool_call, query_formatted
from .schema import ToolSchema, generate_json_schema, generate_schema
from .tools import Tool, ToolCall, tool
from .tracing import setup_tracing
from .types import (
    annotate,
    array,
    boolean,
    enum_,
    ignore,
    integer,
    literal,
    null,
    number,
    object_,
    optional,
    string,
    union,
)

__all__ = [
    "AINotFollowingInstructionsError",
    "DecodeResult",
    "DepthLimitError",
    "ParameterValidationError",
    "ReparseError",
    "Settings",
    "Tool",
    "ToolCall",
    "ToolCallDecoder",
    "ToolSchema",
    "ToolshapeError",
    "UnexpectedResponseError",
    "UnsupportedTypeError",
    "ValidationIssue",
    "annotate",
    "apply_defaults",
    "array",
    "boolean",
    "decode",
    "decode_tool_call",
    "describe",
    "dispatch_query_formatted",
    "enum_",
    "format_issues",
    "generate_json_schema",
    "generate_schema",
    "get_provider",
    "get_settings",
    "handle_tool_call",
    "ignore",
    "integer",
    "literal",
    "normalize",
    "null",
    "number",
    "object_",
    "optional",
    "query_formatted",
    "setup_logging",
    "setup_tracing",
    "string",
    "structured_output",
    "tool",
    "union",
]
