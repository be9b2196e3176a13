"""Exception taxonomy and the plain-text diagnostic formatter."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Iterable, List, Sequence, Union

if TYPE_CHECKING:
    from .decoder import ValidationIssue


class ToolshapeError(Exception):
    """Base class for every error raised by toolshape."""


class ReparseError(ToolshapeError):
    """The response, or a string-encoded fragment of it, is not parseable at all."""

    def __init__(self, path: Sequence[Union[str, int]], raw_text: str, reason: str = "") -> None:
        self.path = tuple(path)
        self.raw_text = raw_text
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Failed to parse JSON at {format_path(self.path)}{detail}")


class DepthLimitError(ToolshapeError):
    """Recursion went deeper than the configured ceiling."""

    def __init__(self, path: Sequence[Union[str, int]], max_depth: int) -> None:
        self.path = tuple(path)
        self.max_depth = max_depth
        super().__init__(f"Maximum nesting depth {max_depth} exceeded at {format_path(self.path)}")


class UnsupportedTypeError(ToolshapeError):
    """A descriptor (or Python type hint) has no lowering rule."""

    def __init__(self, node: Any) -> None:
        self.node = node
        super().__init__(f"Unsupported type: {node!r}")


class UnexpectedResponseError(ToolshapeError):
    """The provider answered with something other than a usable tool call."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Unexpected response: {reason}")


class AINotFollowingInstructionsError(UnexpectedResponseError):
    """The model did not call the tool it was told to call."""

    def __init__(self, ai_response: str) -> None:
        self.ai_response = ai_response
        super().__init__(f"AI did not follow instructions to use a tool ({ai_response})")


class ParameterValidationError(UnexpectedResponseError):
    """The arguments parsed but do not match the declared shape."""

    def __init__(self, issues: Iterable["ValidationIssue"]) -> None:
        self.issues: List["ValidationIssue"] = list(issues)
        super().__init__(f"Parameter validation failed\n{format_issues(self.issues)}")


def format_path(path: Sequence[Union[str, int]]) -> str:
    """Render a path as ``$.details.hobbies[1]``."""
    out = "$"
    for step in path:
        if isinstance(step, int):
            out += f"[{step}]"
        else:
            out += f".{step}"
    return out


def _snapshot(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(value)


def format_issues(issues: Iterable["ValidationIssue"]) -> str:
    """Render validation issues one per line, for logs and exception messages."""
    lines = []
    for issue in issues:
        lines.append(
            f"  {format_path(issue.path)}: expected {issue.expected}, got {_snapshot(issue.received)}"
        )
    return "\n".join(lines)
