"""Structural decoding: descriptor + normalized value → typed value or issue list."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import ParameterValidationError, UnsupportedTypeError, format_issues
from .parser import matches, same_scalar
from .types import ABSENT, NodeKind, Path, TypeNode, resolve_path, type_name


@dataclass(frozen=True)
class ValidationIssue:
    """One mismatch between the value and the descriptor."""

    path: Path
    expected: str
    received: Any

    @property
    def message(self) -> str:
        return format_issues([self]).strip()


@dataclass
class DecodeResult:
    """Either a decoded value (``ok``) or the list of issues found."""

    value: Any = None
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def unwrap(self) -> Any:
        """Return the decoded value or raise ParameterValidationError."""
        if self.issues:
            raise ParameterValidationError(self.issues)
        return self.value


class _Decoder:
    """Walks one value against one descriptor, collecting every mismatch."""

    def __init__(self, root: TypeNode) -> None:
        self.root = root

    def issue(self, issues: List[ValidationIssue], path: Path, received: Any) -> None:
        node: Optional[TypeNode] = resolve_path(self.root, path)
        expected = type_name(node if node is not None else self.root)
        issues.append(ValidationIssue(path=path, expected=expected, received=received))

    def walk(self, value: Any, node: TypeNode, path: Path, issues: List[ValidationIssue]) -> Any:
        kind = node.kind
        if kind is NodeKind.ANNOTATED:
            return self.walk(value, node.base, path, issues)  # type: ignore[union-attr]
        if kind is NodeKind.IGNORABLE:
            if value is None or value is ABSENT:
                return value
            return self.walk(value, node.base, path, issues)  # type: ignore[union-attr]
        if kind in (NodeKind.PRIMITIVE, NodeKind.ENUM):
            if not matches(value, node):
                self.issue(issues, path, value)
            return value
        if kind is NodeKind.LITERAL:
            if not same_scalar(value, node.value):  # type: ignore[union-attr]
                self.issue(issues, path, value)
            return value
        if kind is NodeKind.OBJECT:
            return self._object(value, node, path, issues)
        if kind is NodeKind.ARRAY:
            if not isinstance(value, list):
                self.issue(issues, path, value)
                return value
            return [
                self.walk(item, node.element, path + (index,), issues)  # type: ignore[union-attr]
                for index, item in enumerate(value)
            ]
        if kind is NodeKind.UNION:
            first: Optional[List[ValidationIssue]] = None
            for variant in node.variants:  # type: ignore[union-attr]
                attempt: List[ValidationIssue] = []
                decoded = self.walk(value, variant, path, attempt)
                if not attempt:
                    return decoded
                if first is None:
                    first = attempt
            issues.extend(first or [])
            return value
        raise UnsupportedTypeError(node)

    def _object(self, value: Any, node: TypeNode, path: Path, issues: List[ValidationIssue]) -> Any:
        if not isinstance(value, dict):
            self.issue(issues, path, value)
            return value
        result: Dict[str, Any] = {}
        for name, prop in node.properties:  # type: ignore[union-attr]
            child_path = path + (name,)
            if name not in value:
                if prop.kind is not NodeKind.IGNORABLE:
                    self.issue(issues, child_path, ABSENT)
                continue
            result[name] = self.walk(value[name], prop, child_path, issues)
        return result


def decode(value: Any, node: TypeNode) -> DecodeResult:
    """Validate ``value`` against ``node``.

    Every mismatch is collected; nothing is raised for shape errors. On
    success ``result.value`` holds the narrowed value (objects keep only
    their declared properties).
    """
    issues: List[ValidationIssue] = []
    decoded = _Decoder(node).walk(value, node, (), issues)
    if issues:
        return DecodeResult(value=None, issues=issues)
    return DecodeResult(value=decoded)


def is_valid(value: Any, node: TypeNode) -> bool:
    return decode(value, node).ok

