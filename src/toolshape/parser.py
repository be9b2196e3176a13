"""Tolerant, descriptor-guided re-parsing of tool call arguments.

Models stringify nested structures inconsistently: a whole array may arrive as
one JSON string, or a number may be quoted twice. ``normalize`` peels those
string layers, but only where the descriptor expects structure, so genuine
string fields are left alone.
"""

from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional, Sequence

import json5

from .config import get_settings
from .errors import DepthLimitError, ReparseError
from .log import get_logger
from .types import ABSENT, NodeKind, Path, PathElement, PrimitiveKind, TypeNode

logger = get_logger(__name__)

_NOT_PARSED = object()


def _nesting_depth(text: str) -> int:
    """Deepest ``[``/``{`` nesting in ``text``, ignoring brackets inside quoted strings."""
    depth = deepest = 0
    quote = None
    escaped = False
    for ch in text:
        if quote is not None:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch in "[{":
            depth += 1
            deepest = max(deepest, depth)
        elif ch in "]}":
            depth -= 1
    return deepest


def _loads(text: str, path: Sequence[PathElement], max_depth: Optional[int]) -> Any:
    # json5 recurses once per nesting level; refuse anything deeper than the ceiling up front.
    if max_depth is not None and _nesting_depth(text) > max_depth:
        raise DepthLimitError(path, max_depth)
    try:
        return json5.loads(text)
    except RecursionError as exc:
        raise DepthLimitError(path, max_depth if max_depth is not None else sys.getrecursionlimit()) from exc


def tolerant_loads(text: str, path: Sequence[PathElement] = (), max_depth: Optional[int] = None) -> Any:
    """Parse JSON5 text (trailing commas, single quotes, bare keys, comments).

    Raises:
        ReparseError: ``text`` is not JSON5.
        DepthLimitError: ``text`` nests deeper than ``max_depth``.
    """
    try:
        return _loads(text, path, max_depth)
    except ValueError as exc:
        raise ReparseError(path, text, str(exc)) from exc


def _try_loads(text: str, path: Sequence[PathElement], max_depth: Optional[int]) -> Any:
    try:
        return _loads(text, path, max_depth)
    except ValueError:
        return _NOT_PARSED


def parse_arguments(text: str, max_depth: Optional[int] = None) -> Any:
    """Parse a whole arguments string, peeling any extra layers of stringification."""
    limit = max_depth if max_depth is not None else get_settings().max_depth
    value: Any = text
    layers = 0
    while isinstance(value, str):
        if layers >= limit:
            raise DepthLimitError((), limit)
        value = tolerant_loads(value, (), limit)
        layers += 1
    if layers > 1:
        logger.debug("arguments_reparsed", layers=layers)
    return value


def matches(value: Any, node: TypeNode) -> bool:
    """Structural predicate: does ``value`` already have the shape of ``node``?"""
    kind = node.kind
    if kind is NodeKind.ANNOTATED:
        return matches(value, node.base)  # type: ignore[union-attr]
    if kind is NodeKind.IGNORABLE:
        return value is None or value is ABSENT or matches(value, node.base)  # type: ignore[union-attr]
    if kind is NodeKind.PRIMITIVE:
        return _matches_primitive(value, node.type)  # type: ignore[union-attr]
    if kind is NodeKind.OBJECT:
        if not isinstance(value, dict):
            return False
        for name, prop in node.properties:  # type: ignore[union-attr]
            if name not in value:
                if prop.kind is NodeKind.IGNORABLE:
                    continue
                return False
            if not matches(value[name], prop):
                return False
        return True
    if kind is NodeKind.ARRAY:
        return isinstance(value, list) and all(matches(item, node.element) for item in value)  # type: ignore[union-attr]
    if kind is NodeKind.UNION:
        return any(matches(value, variant) for variant in node.variants)  # type: ignore[union-attr]
    if kind is NodeKind.LITERAL:
        return same_scalar(value, node.value)  # type: ignore[union-attr]
    if kind is NodeKind.ENUM:
        return isinstance(value, str) and value in node.values  # type: ignore[union-attr]
    return False


def _matches_primitive(value: Any, kind: PrimitiveKind) -> bool:
    if kind is PrimitiveKind.STRING:
        return isinstance(value, str)
    if kind is PrimitiveKind.NUMBER:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if kind is PrimitiveKind.INTEGER:
        return isinstance(value, int) and not isinstance(value, bool)
    if kind is PrimitiveKind.BOOLEAN:
        return isinstance(value, bool)
    return value is None


def same_scalar(value: Any, expected: Any) -> bool:
    # True == 1 in Python; keep booleans and numbers apart.
    if isinstance(value, bool) != isinstance(expected, bool):
        return False
    if expected is None:
        return value is None
    return type(value) in (int, float, str, bool) and value == expected


class _Normalizer:
    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth

    def walk(self, raw: Any, node: TypeNode, path: Path, depth: int) -> Any:
        if depth > self.max_depth:
            raise DepthLimitError(path, self.max_depth)
        kind = node.kind

        if kind is NodeKind.ANNOTATED:
            if node.transform is not None:  # type: ignore[union-attr]
                raw = node.transform(raw)  # type: ignore[union-attr]
            return self.walk(raw, node.base, path, depth + 1)  # type: ignore[union-attr]

        if kind is NodeKind.IGNORABLE:
            return ABSENT

        if kind is NodeKind.PRIMITIVE and node.type is PrimitiveKind.STRING:  # type: ignore[union-attr]
            return raw

        if kind is NodeKind.UNION:
            return self._union(raw, node, path, depth)

        if kind is NodeKind.OBJECT:
            if isinstance(raw, str):
                return self.walk(tolerant_loads(raw, path, self.max_depth), node, path, depth + 1)
            if isinstance(raw, dict):
                return self._object(raw, node, path, depth)
            return raw

        if kind is NodeKind.ARRAY:
            if isinstance(raw, str):
                return self.walk(tolerant_loads(raw, path, self.max_depth), node, path, depth + 1)
            if isinstance(raw, list):
                return [
                    self.walk(item, node.element, path + (index,), depth + 1)  # type: ignore[union-attr]
                    for index, item in enumerate(raw)
                ]
            return raw

        # Scalar leaves: peel string layers, but leave unparseable text for the decoder to report.
        if isinstance(raw, str) and not matches(raw, node):
            parsed = _try_loads(raw, path, self.max_depth)
            if parsed is _NOT_PARSED:
                return raw
            return self.walk(parsed, node, path, depth + 1)
        return raw

    def _object(self, raw: Dict[str, Any], node: TypeNode, path: Path, depth: int) -> Dict[str, Any]:
        props = node.property_map()  # type: ignore[union-attr]
        result: Dict[str, Any] = {}
        for key, value in raw.items():
            prop = props.get(key)
            if prop is None:
                result[key] = value
                continue
            normalized = self.walk(value, prop, path + (key,), depth + 1)
            if normalized is ABSENT:
                continue
            result[key] = normalized
        return result

    def _union(self, raw: Any, node: TypeNode, path: Path, depth: int) -> Any:
        variants: List[TypeNode] = list(node.variants)  # type: ignore[union-attr]
        parse_error: Optional[ReparseError] = None
        if isinstance(raw, str):
            try:
                parsed = tolerant_loads(raw, path, self.max_depth)
            except ReparseError as exc:
                parse_error = exc
            else:
                for variant in variants:
                    try:
                        candidate = self.walk(parsed, variant, path, depth + 1)
                    except ReparseError:
                        continue
                    if matches(candidate, variant):
                        return candidate
        for variant in variants:
            if matches(raw, variant):
                return raw
        if parse_error is not None:
            raise parse_error
        return raw


def normalize(
    raw: Any,
    node: TypeNode,
    path: Sequence[PathElement] = (),
    max_depth: Optional[int] = None,
) -> Any:
    """Normalize a raw response value against ``node``.

    Raises:
        ReparseError: a string had to be parsed as JSON and was not valid.
        DepthLimitError: nesting (including string layers) exceeded ``max_depth``.
    """
    limit = max_depth if max_depth is not None else get_settings().max_depth
    return _Normalizer(limit).walk(raw, node, tuple(path), 0)
