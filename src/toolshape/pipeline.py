"""Sequences the decode stages for one tool call's arguments text."""

from __future__ import annotations

from typing import Any, Optional

from .config import get_settings
from .decoder import DecodeResult, decode
from .defaults import apply_defaults as _apply_defaults
from .errors import DepthLimitError, ReparseError
from .log import get_logger
from .parser import normalize, parse_arguments
from .schema import ToolSchema, unwrap_root
from .tools import Tool
from .tracing import decode_span, record_reparse_error, record_validation_issues

logger = get_logger(__name__)


class ToolCallDecoder:
    """Decodes raw arguments text for one tool.

    Stages run in a fixed order: parse the text, unwrap a wrapped root,
    normalize against the descriptor, backfill defaults (only when enabled),
    and decode. The schema is generated once and reused, so one decoder can
    serve any number of calls.

    Args:
        tool: The tool whose arguments are being decoded.
        apply_defaults: Run the defaults stage. Defaults to the
            ``apply_defaults`` setting.
        max_depth: Recursion ceiling for parsing. Defaults to the
            ``max_depth`` setting.
    """

    def __init__(
        self,
        tool: Tool,
        apply_defaults: Optional[bool] = None,
        max_depth: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self.tool = tool
        self.schema: ToolSchema = tool.schema()
        self.apply_defaults = settings.apply_defaults if apply_defaults is None else apply_defaults
        self.max_depth = settings.max_depth if max_depth is None else max_depth

    def decode_arguments(self, arguments: str) -> DecodeResult:
        """Run the pipeline on the arguments text the provider returned.

        Raises:
            ReparseError: the text, or a nested string fragment, is not JSON.
            DepthLimitError: nesting exceeded ``max_depth``.
        """
        root = self.tool.parameters
        with decode_span(self.tool.name, wrapped=self.schema.wrapped) as span:
            try:
                value: Any = parse_arguments(arguments, self.max_depth)
                value = unwrap_root(value, self.schema)
                value = normalize(value, root, max_depth=self.max_depth)
            except ReparseError as exc:
                record_reparse_error(span, exc.path, exc.raw_text)
                logger.warning("arguments_unparseable", tool=self.tool.name, path=list(exc.path))
                raise
            except DepthLimitError as exc:
                logger.warning("arguments_too_deep", tool=self.tool.name, path=list(exc.path))
                raise

            if self.apply_defaults:
                value = _apply_defaults(value, root)

            result = decode(value, root)
            if not result.ok:
                record_validation_issues(span, result.issues)
                logger.info("decode_failed", tool=self.tool.name, issues=len(result.issues))
            return result


def decode_tool_call(
    tool: Tool,
    arguments: str,
    apply_defaults: Optional[bool] = None,
    max_depth: Optional[int] = None,
) -> DecodeResult:
    """Decode one tool call's raw arguments text against ``tool.parameters``."""
    return ToolCallDecoder(tool, apply_defaults=apply_defaults, max_depth=max_depth).decode_arguments(arguments)
