"""Descriptors from Python type hints and Pydantic models."""

from __future__ import annotations

import enum
import inspect
import types as _pytypes
from typing import Annotated as _TypingAnnotated
from typing import Any, Dict, List, Literal, Optional, Tuple, Type, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic_core import PydanticUndefined

from . import types as t
from .errors import UnsupportedTypeError

M = TypeVar("M", bound=BaseModel)

_PYTHON_TYPE_TO_NODE: Dict[Any, t.TypeNode] = {
    str: t.string,
    int: t.integer,
    float: t.number,
    bool: t.boolean,
    type(None): t.null,
    None: t.null,
}


def describe(tp: Any) -> t.TypeNode:
    """Convert a Python type annotation into a descriptor.

    Supports the builtin scalars, ``List[X]``, ``Tuple[X, ...]``,
    ``Optional``/``Union``, ``Literal``, ``enum.Enum`` subclasses, Pydantic
    models, and ``Annotated[X, Field(description=...)]``.
    """
    if isinstance(tp, (t.Primitive, t.ObjectType, t.ArrayType, t.UnionType,
                       t.LiteralType, t.EnumType, t.Annotated, t.Ignorable)):
        return tp

    node = _PYTHON_TYPE_TO_NODE.get(tp) if _hashable(tp) else None
    if node is not None:
        return node

    origin = get_origin(tp)
    args = get_args(tp)

    if origin is _TypingAnnotated:
        base = describe(args[0])
        annotations = _field_annotations(args[1:])
        return t.annotate(base, annotations) if annotations else base

    if origin is Literal:
        if all(isinstance(a, str) for a in args):
            return t.enum_(*args)
        return t.union(*(t.literal(a) for a in args))

    if origin is Union or (hasattr(_pytypes, "UnionType") and origin is getattr(_pytypes, "UnionType")):
        return t.union(*(describe(a) for a in args))

    if origin in (list, List) or tp is list:
        return t.array(describe(args[0]) if args else t.string)

    if origin in (tuple, Tuple):
        if len(args) == 2 and args[1] is Ellipsis:
            return t.array(describe(args[0]))
        raise UnsupportedTypeError(tp)

    if inspect.isclass(tp) and issubclass(tp, enum.Enum):
        return t.enum_(*(str(member.value) for member in tp))

    if inspect.isclass(tp) and issubclass(tp, BaseModel):
        return describe_model(tp)

    raise UnsupportedTypeError(tp)


def _hashable(tp: Any) -> bool:
    try:
        hash(tp)
    except TypeError:
        return False
    return True


def _field_annotations(metadata: Tuple[Any, ...]) -> Dict[str, Any]:
    annotations: Dict[str, Any] = {}
    for item in metadata:
        description = getattr(item, "description", None)
        if description:
            annotations["description"] = description
        elif isinstance(item, str):
            annotations["description"] = item
    return annotations


def describe_model(model: Type[BaseModel]) -> t.ObjectType:
    """Convert a Pydantic model class into an object descriptor.

    Field descriptions become schema annotations; field defaults become
    ``default`` annotations, used when the defaults pass is enabled.
    """
    props: List[Tuple[str, t.TypeNode]] = []
    for name, info in model.model_fields.items():
        key = info.alias or name
        node = describe(info.annotation)
        annotations: Dict[str, Any] = {}
        if info.description:
            annotations["description"] = info.description
        if info.default is not PydanticUndefined:
            annotations["default"] = info.default
        elif info.default_factory is not None:
            annotations["default"] = info.default_factory()  # type: ignore[call-arg]
        if annotations:
            node = t.annotate(node, annotations)
        props.append((key, node))
    return t.object_from(props)


def structured_output(model: Type[M], name: Optional[str] = None):
    """Build a Tool whose parameters are the fields of a Pydantic model.

    The tool name defaults to the class name and the description to its
    docstring.
    """
    from .tools import Tool

    doc = inspect.cleandoc(model.__doc__) if model.__doc__ else None
    return Tool(
        name=name or model.__name__,
        description=doc or f"Structured output: {model.__name__}",
        parameters=describe_model(model),
        model=model,
    )


def parse_structured_output(model: Type[M], data: Dict[str, Any]) -> M:
    """Validate decoded tool arguments into a model instance.

    Raises:
        pydantic.ValidationError: if the data does not satisfy the model's own
            validators (constraints the descriptor does not express).
    """
    return model.model_validate(data)
