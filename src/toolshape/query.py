"""Ask a model for a typed tool call and decode what comes back."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import anthropic
import jinja2
import openai
from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from .decoder import ValidationIssue
from .errors import (
    AINotFollowingInstructionsError,
    ParameterValidationError,
    ToolshapeError,
    UnexpectedResponseError,
)
from .log import get_logger
from .models import parse_structured_output
from .pipeline import ToolCallDecoder
from .provider import Provider, ProviderResponse
from .tools import Tool, ToolCall
from .tracing import llm_span, record_tool_call, record_usage, record_user_message

logger = get_logger(__name__)

Messages = List[Dict[str, Any]]

SINGLE_TOOL_INSTRUCTION = "At the end, call the provided tool."
DISPATCH_INSTRUCTION = "Choose and call one of the provided tools."


def _to_messages(prompt_or_messages: Union[str, Messages]) -> Messages:
    if isinstance(prompt_or_messages, str):
        return [{"role": "user", "content": prompt_or_messages}]
    return list(prompt_or_messages)


def render_system_prompt(system: Optional[str], instruction: str, deps: Optional[BaseModel] = None) -> str:
    """Render ``system`` as a Jinja2 template and append the tool instruction.

    Fields of ``deps`` are available in the template as ``{{ deps.field }}``.
    """
    if not system:
        return instruction
    deps_dict = deps.model_dump() if deps else {}
    template = jinja2.Template(system, undefined=jinja2.Undefined)
    rendered = template.render(deps=deps_dict)
    return f"{rendered}\n\n{instruction}"


def _last_user_content(messages: Messages) -> str:
    for msg in reversed(messages):
        if msg.get("role") == "user" and isinstance(msg.get("content"), str):
            return msg["content"]
    return ""


def _request(
    provider: Provider,
    messages: Messages,
    tools: Sequence[Tool],
    tool_choice: str,
    system: str,
    max_tokens: int,
    temperature: Optional[float],
) -> ProviderResponse:
    with llm_span(provider.provider_name, provider.model_name, [t.name for t in tools]) as span:
        record_user_message(span, _last_user_content(messages))
        try:
            response = provider.chat(
                messages=messages,
                tools=[t.to_schema() for t in tools],
                tool_choice=tool_choice,
                system=system,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except (openai.OpenAIError, anthropic.AnthropicError) as exc:
            logger.error("provider_error", provider=provider.provider_name, error=str(exc))
            raise UnexpectedResponseError(str(exc)) from exc
        record_usage(span, response.usage.input_tokens, response.usage.output_tokens)
        for tc in response.tool_calls:
            record_tool_call(span, tc.name, tc.arguments)
    return response


def _decode(tool: Tool, arguments: str, apply_defaults: Optional[bool], max_depth: Optional[int]) -> Any:
    result = ToolCallDecoder(tool, apply_defaults=apply_defaults, max_depth=max_depth).decode_arguments(arguments)
    if not result.ok:
        raise ParameterValidationError(result.issues)
    if tool.model is not None:
        try:
            return parse_structured_output(tool.model, result.value)
        except ModelValidationError as exc:
            raise ParameterValidationError(
                ValidationIssue(path=tuple(err["loc"]), expected=err["msg"], received=err.get("input"))
                for err in exc.errors()
            ) from exc
    return result.value


def query_formatted(
    provider: Provider,
    prompt_or_messages: Union[str, Messages],
    tool: Tool,
    *,
    system: Optional[str] = None,
    deps: Optional[BaseModel] = None,
    apply_defaults: Optional[bool] = None,
    max_depth: Optional[int] = None,
    max_tokens: int = 4096,
    temperature: Optional[float] = None,
) -> ToolCall:
    """Force the model to call ``tool`` and return its decoded arguments.

    Args:
        provider: A provider from :func:`toolshape.provider.get_provider`.
        prompt_or_messages: A user prompt, or a full message list.
        tool: The tool describing the expected result.
        system: Optional system prompt, rendered as a Jinja2 template.
        deps: Optional Pydantic model exposed to the template as ``deps``.
        apply_defaults: Run the defaults stage (see :class:`ToolCallDecoder`).

    Raises:
        UnexpectedResponseError: the provider call failed.
        AINotFollowingInstructionsError: no tool call, or a different tool.
        ReparseError: the arguments are not parseable JSON.
        ParameterValidationError: the arguments do not match ``tool.parameters``.
    """
    messages = _to_messages(prompt_or_messages)
    response = _request(
        provider,
        messages,
        [tool],
        tool.name,
        render_system_prompt(system, SINGLE_TOOL_INSTRUCTION, deps),
        max_tokens,
        temperature,
    )

    if not response.tool_calls:
        raise AINotFollowingInstructionsError("tool_calls is not found")

    call = response.tool_calls[0]
    if call.name != tool.name:
        raise AINotFollowingInstructionsError(f"tool name was not {tool.name}, but {call.name!r}")

    logger.debug("tool_call_received", tool=call.name, arguments_length=len(call.arguments))
    parameters = _decode(tool, call.arguments, apply_defaults, max_depth)
    return ToolCall(tool=tool, parameters=parameters, tool_index=0)


def dispatch_query_formatted(
    provider: Provider,
    prompt_or_messages: Union[str, Messages],
    *tools: Tool,
    system: Optional[str] = None,
    deps: Optional[BaseModel] = None,
    apply_defaults: Optional[bool] = None,
    max_depth: Optional[int] = None,
    max_tokens: int = 4096,
    temperature: Optional[float] = None,
) -> ToolCall:
    """Offer several tools, require the model to call one, and decode it.

    The returned call's ``tool_index`` is the position of the chosen tool in
    ``tools``; pair it with :func:`handle_tool_call`.
    """
    if not tools:
        raise ValueError("dispatch_query_formatted needs at least one tool")
    messages = _to_messages(prompt_or_messages)
    response = _request(
        provider,
        messages,
        tools,
        "required",
        render_system_prompt(system, DISPATCH_INSTRUCTION, deps),
        max_tokens,
        temperature,
    )

    if not response.tool_calls:
        raise AINotFollowingInstructionsError("tool_calls is not found")

    call = response.tool_calls[0]
    index = next((i for i, t in enumerate(tools) if t.name == call.name), -1)
    if index == -1:
        raise AINotFollowingInstructionsError(
            f"Tool call does not match any of the provided tools, but {call.name!r}"
        )

    selected = tools[index]
    logger.debug("tool_call_received", tool=call.name, tool_index=index)
    parameters = _decode(selected, call.arguments, apply_defaults, max_depth)
    return ToolCall(tool=selected, parameters=parameters, tool_index=index)


def handle_tool_call(call: ToolCall, *handlers: Callable[[Any], Any]) -> Any:
    """Invoke the handler matching ``call.tool_index`` with the parameters."""
    if call.tool_index >= len(handlers):
        raise ToolshapeError(f"Unhandled tool call: {call.tool.name!r}")
    return handlers[call.tool_index](call.parameters)
