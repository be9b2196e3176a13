"""Descriptor → JSON Schema lowering, including root-shape wrapping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from .errors import UnsupportedTypeError
from .types import NodeKind, TypeNode, strip_wrappers

WRAPPER_KEY = "items"


def generate_json_schema(node: TypeNode) -> Dict[str, Any]:
    """Lower a descriptor to a JSON-Schema-shaped dict."""
    kind = getattr(node, "kind", None)
    if kind is NodeKind.PRIMITIVE:
        return {"type": node.type.value}  # type: ignore[union-attr]
    if kind is NodeKind.OBJECT:
        properties = {name: generate_json_schema(prop) for name, prop in node.properties}  # type: ignore[union-attr]
        return {
            "type": "object",
            "properties": properties,
            "required": node.required(),  # type: ignore[union-attr]
        }
    if kind is NodeKind.ARRAY:
        return {"type": "array", "items": generate_json_schema(node.element)}  # type: ignore[union-attr]
    if kind is NodeKind.UNION:
        return {"oneOf": [generate_json_schema(v) for v in node.variants]}  # type: ignore[union-attr]
    if kind is NodeKind.LITERAL:
        return {"const": node.value}  # type: ignore[union-attr]
    if kind is NodeKind.ENUM:
        return {"type": "string", "enum": list(node.values)}  # type: ignore[union-attr]
    if kind is NodeKind.ANNOTATED:
        schema = generate_json_schema(node.base)  # type: ignore[union-attr]
        schema.update(node.annotations)  # type: ignore[union-attr]
        return schema
    if kind is NodeKind.IGNORABLE:
        return generate_json_schema(node.base)  # type: ignore[union-attr]
    raise UnsupportedTypeError(node)


def needs_wrapping(node: TypeNode) -> bool:
    """Tool parameters must be an object; anything else gets wrapped."""
    return strip_wrappers(node).kind is not NodeKind.OBJECT


@dataclass(frozen=True)
class ToolSchema:
    """A generated tool declaration.

    ``wrapped`` is True when the descriptor's root was not an object and the
    parameters describe ``{"items": <root>}`` instead; decoded arguments must
    then be unwrapped with :func:`unwrap_root`.
    """

    name: str
    description: str
    parameters: Dict[str, Any]
    wrapped: bool = False

    def to_schema(self) -> Dict[str, Any]:
        """Return the provider-agnostic schema dict."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }


def generate_schema(root: TypeNode, name: str, description: str) -> ToolSchema:
    """Compile ``root`` into a tool declaration the provider can accept.

    From the caller's point of view the descriptor is the *output* type; for
    the model it is the input (parameters) of the function it has to call.
    """
    parameters = generate_json_schema(root)
    wrapped = needs_wrapping(root)
    if wrapped:
        parameters = {
            "type": "object",
            "properties": {WRAPPER_KEY: parameters},
            "required": [WRAPPER_KEY],
        }
    return ToolSchema(name=name, description=description, parameters=parameters, wrapped=wrapped)


def unwrap_root(data: Any, schema: ToolSchema) -> Any:
    """Undo root wrapping on parsed arguments."""
    if schema.wrapped and isinstance(data, dict) and WRAPPER_KEY in data:
        return data[WRAPPER_KEY]
    return data
