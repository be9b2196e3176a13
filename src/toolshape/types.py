"""Type descriptors: the tree that drives schema generation and decoding."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import UnsupportedTypeError

PathElement = Union[str, int]
Path = Tuple[PathElement, ...]

RESERVED_ANNOTATIONS = ("default", "transform")


class NodeKind(str, enum.Enum):
    """Tag carried by every descriptor node."""

    PRIMITIVE = "primitive"
    OBJECT = "object"
    ARRAY = "array"
    UNION = "union"
    LITERAL = "literal"
    ENUM = "enum"
    ANNOTATED = "annotated"
    IGNORABLE = "ignorable"


class PrimitiveKind(str, enum.Enum):
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    NULL = "null"


class _NoDefault:
    def __repr__(self) -> str:
        return "NO_DEFAULT"

    def __bool__(self) -> bool:
        return False


NO_DEFAULT: Any = _NoDefault()


class _Absent:
    def __repr__(self) -> str:
        return "<absent>"

    def __bool__(self) -> bool:
        return False


# Marks a key that is intentionally left out, as opposed to present with None.
ABSENT: Any = _Absent()


@dataclass(frozen=True)
class Primitive:
    type: PrimitiveKind
    kind: NodeKind = field(default=NodeKind.PRIMITIVE, init=False)


@dataclass(frozen=True)
class ObjectType:
    """An object whose declared properties are all required unless ignorable."""

    properties: Tuple[Tuple[str, "TypeNode"], ...]
    kind: NodeKind = field(default=NodeKind.OBJECT, init=False)

    def property_map(self) -> Dict[str, "TypeNode"]:
        return dict(self.properties)

    def required(self) -> List[str]:
        return [name for name, node in self.properties if node.kind is not NodeKind.IGNORABLE]


@dataclass(frozen=True)
class ArrayType:
    element: "TypeNode"
    kind: NodeKind = field(default=NodeKind.ARRAY, init=False)


@dataclass(frozen=True)
class UnionType:
    """Ordered alternatives; the first variant that accepts a value wins."""

    variants: Tuple["TypeNode", ...]
    kind: NodeKind = field(default=NodeKind.UNION, init=False)


@dataclass(frozen=True)
class LiteralType:
    value: Union[str, int, float, bool, None]
    kind: NodeKind = field(default=NodeKind.LITERAL, init=False)


@dataclass(frozen=True)
class EnumType:
    values: Tuple[str, ...]
    kind: NodeKind = field(default=NodeKind.ENUM, init=False)


@dataclass(frozen=True)
class Annotated:
    """Wraps a node with schema metadata plus the reserved default/transform hooks.

    ``annotations`` never contains the reserved keys; they live in ``default``
    and ``transform``.
    """

    base: "TypeNode"
    annotations: Mapping[str, Any] = field(default_factory=dict)
    default: Any = NO_DEFAULT
    transform: Optional[Callable[[Any], Any]] = None
    kind: NodeKind = field(default=NodeKind.ANNOTATED, init=False)

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    def __hash__(self) -> int:
        # Hash only the hashable parts: equal nodes share their base and annotation keys.
        return hash((self.base, frozenset(self.annotations)))


@dataclass(frozen=True)
class Ignorable:
    """A property that may be left out entirely."""

    base: "TypeNode"
    kind: NodeKind = field(default=NodeKind.IGNORABLE, init=False)


TypeNode = Union[Primitive, ObjectType, ArrayType, UnionType, LiteralType, EnumType, Annotated, Ignorable]


string = Primitive(PrimitiveKind.STRING)
number = Primitive(PrimitiveKind.NUMBER)
integer = Primitive(PrimitiveKind.INTEGER)
boolean = Primitive(PrimitiveKind.BOOLEAN)
null = Primitive(PrimitiveKind.NULL)


def object_(**properties: TypeNode) -> ObjectType:
    """Build an object descriptor from keyword arguments (kept in call order)."""
    return object_from(properties)


def object_from(properties: Union[Mapping[str, TypeNode], Iterable[Tuple[str, TypeNode]]]) -> ObjectType:
    items = properties.items() if isinstance(properties, Mapping) else properties
    return ObjectType(properties=tuple((str(name), node) for name, node in items))


def array(element: TypeNode) -> ArrayType:
    return ArrayType(element=element)


def union(*variants: TypeNode) -> UnionType:
    if not variants:
        raise ValueError("union() needs at least one variant")
    return UnionType(variants=tuple(variants))


def optional(node: TypeNode) -> UnionType:
    """Shorthand for ``union(node, null)``."""
    return union(node, null)


def literal(value: Union[str, int, float, bool, None]) -> LiteralType:
    return LiteralType(value=value)


def enum_(*values: str) -> EnumType:
    if not values:
        raise ValueError("enum_() needs at least one value")
    return EnumType(values=tuple(dict.fromkeys(str(v) for v in values)))


def annotate(node: TypeNode, annotations: Optional[Mapping[str, Any]] = None, **extra: Any) -> Annotated:
    """Wrap ``node`` with schema annotations.

    ``default`` and ``transform`` are pulled out of the bag and stored on the
    node; everything else is merged verbatim into the generated schema.

    Usage:
        annotate(string, description="The user's mood", default="neutral")
    """
    bag: Dict[str, Any] = dict(annotations or {})
    bag.update(extra)
    default = bag.pop("default", NO_DEFAULT)
    transform = bag.pop("transform", None)
    if transform is not None and not callable(transform):
        raise TypeError("transform annotation must be callable")
    return Annotated(base=node, annotations=bag, default=default, transform=transform)


def ignore(node: TypeNode) -> Ignorable:
    return Ignorable(base=node)


def strip_wrappers(node: TypeNode) -> TypeNode:
    """Return the first node below any Annotated/Ignorable wrappers."""
    while node.kind in (NodeKind.ANNOTATED, NodeKind.IGNORABLE):
        node = node.base  # type: ignore[union-attr]
    return node


def type_name(node: TypeNode) -> str:
    """Human-readable label for a descriptor, used in diagnostics."""
    kind = node.kind
    if kind is NodeKind.PRIMITIVE:
        return node.type.value  # type: ignore[union-attr]
    if kind is NodeKind.OBJECT:
        fields = ", ".join(f"{name}: {type_name(prop)}" for name, prop in node.properties)  # type: ignore[union-attr]
        return "{ " + fields + " }" if fields else "{}"
    if kind is NodeKind.ARRAY:
        return f"Array<{type_name(node.element)}>"  # type: ignore[union-attr]
    if kind is NodeKind.UNION:
        return "(" + " | ".join(type_name(v) for v in node.variants) + ")"  # type: ignore[union-attr]
    if kind is NodeKind.LITERAL:
        return json.dumps(node.value)  # type: ignore[union-attr]
    if kind is NodeKind.ENUM:
        return " | ".join(json.dumps(v) for v in node.values)  # type: ignore[union-attr]
    if kind is NodeKind.ANNOTATED:
        return type_name(node.base)  # type: ignore[union-attr]
    if kind is NodeKind.IGNORABLE:
        return f"{type_name(node.base)}?"  # type: ignore[union-attr]
    raise UnsupportedTypeError(node)


def resolve_path(root: TypeNode, path: Sequence[PathElement]) -> Optional[TypeNode]:
    """Walk ``root`` along object keys and array indices.

    Returns the node found at ``path`` or None when the descriptor has no
    such location. Union variants are tried in order.
    """
    node = root
    for depth, step in enumerate(path):
        node = strip_wrappers(node)
        if node.kind is NodeKind.UNION:
            for variant in node.variants:  # type: ignore[union-attr]
                found = resolve_path(variant, path[depth:])
                if found is not None:
                    return found
            return None
        if node.kind is NodeKind.OBJECT and isinstance(step, str):
            props = node.property_map()  # type: ignore[union-attr]
            if step not in props:
                return None
            node = props[step]
        elif node.kind is NodeKind.ARRAY and isinstance(step, int):
            node = node.element  # type: ignore[union-attr]
        else:
            return None
    return node
