"""Default backfilling for absent or null values."""

from __future__ import annotations

import copy
from typing import Any, Dict

from .types import ABSENT, NodeKind, TypeNode


def _is_empty(value: Any) -> bool:
    return value is None or value is ABSENT


def apply_defaults(value: Any, node: TypeNode) -> Any:
    """Fill ``None``/absent values from the nearest ``default`` annotation.

    Defaults are deep-copied and have their own nested defaults filled, but
    are not validated. The pass is idempotent and never mutates ``value``.
    """
    kind = node.kind
    if kind is NodeKind.ANNOTATED:
        if _is_empty(value) and node.has_default:  # type: ignore[union-attr]
            # Fill the default's own nested defaults so one pass is a fixed point; the default is not validated.
            return apply_defaults(copy.deepcopy(node.default), node.base)  # type: ignore[union-attr]
        return apply_defaults(value, node.base)  # type: ignore[union-attr]
    if kind is NodeKind.IGNORABLE:
        return apply_defaults(value, node.base)  # type: ignore[union-attr]

    if _is_empty(value):
        return value

    if kind is NodeKind.OBJECT:
        if not isinstance(value, dict):
            return value
        result: Dict[str, Any] = dict(value)
        for key, prop in node.properties:  # type: ignore[union-attr]
            if key not in value:
                if prop.kind is NodeKind.IGNORABLE:
                    continue
                filled = apply_defaults(ABSENT, prop)
                if filled is not ABSENT:
                    result[key] = filled
                continue
            result[key] = apply_defaults(value[key], prop)
        return result

    if kind is NodeKind.ARRAY:
        if isinstance(value, list):
            return [apply_defaults(item, node.element) for item in value]  # type: ignore[union-attr]
        return value

    # Unions and leaves: a present value passes through untouched.
    return value
