"""Provider abstraction for Anthropic and OpenAI APIs."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

import anthropic
import openai

from .config import get_settings

DEFAULT_MODELS = {
    "anthropic": "claude-haiku-4-5-20251001",
    "openai": "gpt-4o",
}


@dataclass
class ToolCall:
    """A tool call as returned by the provider, arguments still raw text."""

    id: str
    name: str
    arguments: str


@dataclass
class Usage:
    """Token usage information."""

    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class ProviderResponse:
    """Normalized response from any provider."""

    text: Optional[str] = None
    tool_calls: List[ToolCall] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    finish_reason: Optional[str] = None
    raw: Any = None


class Provider(Protocol):
    """Protocol for LLM providers."""

    def chat(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[Any] = None,
        system: Optional[str] = None,
        max_tokens: int = 4096,
        temperature: Optional[float] = None,
    ) -> ProviderResponse: ...

    @property
    def provider_name(self) -> str: ...

    @property
    def model_name(self) -> str: ...


def _to_anthropic_tools(tools: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Convert provider-agnostic tool schemas to Anthropic format."""
    result = []
    for t in tools:
        result.append({
            "name": t["name"],
            "description": t["description"],
            "input_schema": t["parameters"],
        })
    return result


def _to_openai_tools(tools: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Convert provider-agnostic tool schemas to OpenAI format."""
    result = []
    for t in tools:
        result.append({
            "type": "function",
            "function": {
                "name": t["name"],
                "description": t["description"],
                "parameters": t["parameters"],
            },
        })
    return result


def _to_anthropic_tool_choice(tool_choice: Any) -> Any:
    """Convert tool_choice to Anthropic format."""
    if tool_choice is None:
        return {"type": "auto"}
    if isinstance(tool_choice, str):
        if tool_choice == "auto":
            return {"type": "auto"}
        if tool_choice in ("any", "required"):
            return {"type": "any"}
        # Specific tool name
        return {"type": "tool", "name": tool_choice}
    return tool_choice


def _to_openai_tool_choice(tool_choice: Any) -> Any:
    """Convert tool_choice to OpenAI format."""
    if tool_choice is None:
        return "auto"
    if isinstance(tool_choice, str):
        if tool_choice in ("auto", "none", "required"):
            return tool_choice
        if tool_choice == "any":
            return "required"
        # Specific tool name
        return {"type": "function", "function": {"name": tool_choice}}
    return tool_choice


class AnthropicProvider:
    """Provider implementation for the Anthropic API."""

    def __init__(self, model: str = DEFAULT_MODELS["anthropic"], client: Any = None) -> None:
        self._client = client if client is not None else anthropic.Anthropic()
        self._model = model

    @property
    def provider_name(self) -> str:
        return "anthropic"

    @property
    def model_name(self) -> str:
        return self._model

    def chat(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[Any] = None,
        system: Optional[str] = None,
        max_tokens: int = 4096,
        temperature: Optional[float] = None,
    ) -> ProviderResponse:
        kwargs: Dict[str, Any] = {
            "model": self._model,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        if system:
            kwargs["system"] = system
        if tools:
            kwargs["tools"] = _to_anthropic_tools(tools)
            kwargs["tool_choice"] = _to_anthropic_tool_choice(tool_choice)
        if temperature is not None:
            kwargs["temperature"] = temperature

        response = self._client.messages.create(**kwargs)

        text = None
        tool_calls: List[ToolCall] = []
        for block in response.content:
            if block.type == "text":
                text = block.text
            elif block.type == "tool_use":
                # Anthropic hands back parsed input; serialize it so nested
                # stringified fields still go through the tolerant parser.
                arguments = block.input if isinstance(block.input, str) else json.dumps(block.input)
                tool_calls.append(ToolCall(id=block.id, name=block.name, arguments=arguments))

        usage = Usage(
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )

        return ProviderResponse(
            text=text,
            tool_calls=tool_calls,
            usage=usage,
            finish_reason=getattr(response, "stop_reason", None),
            raw=response,
        )


class OpenAIProvider:
    """Provider implementation for the OpenAI API (and compatible endpoints)."""

    def __init__(self, model: str = DEFAULT_MODELS["openai"], client: Any = None) -> None:
        self._client = client if client is not None else openai.OpenAI()
        self._model = model

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model

    def chat(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[Any] = None,
        system: Optional[str] = None,
        max_tokens: int = 4096,
        temperature: Optional[float] = None,
    ) -> ProviderResponse:
        # OpenAI uses system message in the messages list
        oai_messages: List[Dict[str, Any]] = []
        if system:
            oai_messages.append({"role": "system", "content": system})
        oai_messages.extend(messages)

        kwargs: Dict[str, Any] = {
            "model": self._model,
            "messages": oai_messages,
            "max_tokens": max_tokens,
        }
        if tools:
            kwargs["tools"] = _to_openai_tools(tools)
            kwargs["tool_choice"] = _to_openai_tool_choice(tool_choice)
        if temperature is not None:
            kwargs["temperature"] = temperature

        response = self._client.chat.completions.create(**kwargs)

        choice = response.choices[0]
        message = choice.message
        tool_calls: List[ToolCall] = []

        if message.tool_calls:
            for tc in message.tool_calls:
                tool_calls.append(
                    ToolCall(id=tc.id, name=tc.function.name, arguments=tc.function.arguments)
                )

        usage = Usage()
        if getattr(response, "usage", None):
            usage = Usage(
                input_tokens=response.usage.prompt_tokens or 0,
                output_tokens=response.usage.completion_tokens or 0,
            )

        return ProviderResponse(
            text=message.content,
            tool_calls=tool_calls,
            usage=usage,
            finish_reason=getattr(choice, "finish_reason", None),
            raw=response,
        )


def get_provider(provider: Optional[str] = None, model: Optional[str] = None, client: Any = None) -> Provider:
    """Factory function to create a provider instance.

    Args:
        provider: "anthropic" or "openai". Defaults to the ``provider`` setting.
        model: Model name override. Defaults to the ``model`` setting, then to
            a provider-specific default.
        client: Pre-built SDK client (e.g. pointed at a compatible endpoint).
    """
    settings = get_settings()
    provider = provider or settings.provider
    model = model or settings.model
    if provider == "anthropic":
        return AnthropicProvider(model=model or DEFAULT_MODELS["anthropic"], client=client)
    elif provider == "openai":
        return OpenAIProvider(model=model or DEFAULT_MODELS["openai"], client=client)
    else:
        raise ValueError(f"Unknown provider: {provider!r}. Use 'anthropic' or 'openai'.")
