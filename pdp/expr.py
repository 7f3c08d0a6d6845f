"""Parsed expression values and a read-only view for querying them.

An expression is one of:

* ``None`` (null),
* ``int`` (integer; ``bool`` counts as an integer),
* ``str`` (string),
* ``list`` (list of expressions),
* ``ExprTuple`` (ordered ``key=value`` results with string keys),
* ``ExprMap`` (ordered pairs whose keys are strings or integers).
"""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from pdp import log
from pdp.text import is_equal_digits10

__all__ = [
    "ExprKind",
    "ExprTuple",
    "ExprMap",
    "ExprView",
    "expr_kind_of",
    "expr_kind_name",
]


class ExprKind(enum.IntEnum):
    """The kind of an expression value."""

    NULL = 0
    INT = 1
    STRING = 2
    LIST = 3
    TUPLE = 4
    MAP = 5


_KIND_NAMES = {
    ExprKind.NULL: "Null",
    ExprKind.INT: "Integer",
    ExprKind.STRING: "String",
    ExprKind.LIST: "List",
    ExprKind.TUPLE: "Tuple",
    ExprKind.MAP: "Map",
}


@dataclass
class ExprTuple:
    """Ordered ``key=value`` results; keys are strings and may repeat."""

    results: list[tuple[str, Any]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return iter(self.results)


@dataclass
class ExprMap:
    """Ordered key/value pairs; keys are strings or integers."""

    pairs: list[tuple[Any, Any]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.pairs)

    def __iter__(self) -> Iterator[tuple[Any, Any]]:
        return iter(self.pairs)


def expr_kind_of(value: Any) -> ExprKind:
    """Return the kind of an expression value."""
    if value is None:
        return ExprKind.NULL
    if isinstance(value, int):
        return ExprKind.INT
    if isinstance(value, str):
        return ExprKind.STRING
    if isinstance(value, list):
        return ExprKind.LIST
    if isinstance(value, ExprTuple):
        return ExprKind.TUPLE
    if isinstance(value, ExprMap):
        return ExprKind.MAP
    raise TypeError(f"not an expression: {type(value).__name__}")


def expr_kind_name(kind: ExprKind) -> str:
    """Return the printable name of an expression kind."""
    try:
        return _KIND_NAMES[ExprKind(kind)]
    except (KeyError, ValueError):
        raise ValueError(f"unknown expression kind {kind!r}") from None


_ABSENT = object()


class ExprView:
    """Read-only access to an expression; lookups that miss give an empty view."""

    __slots__ = ("_expr",)

    def __init__(self, expr: Any = _ABSENT) -> None:
        if expr is not _ABSENT:
            expr_kind_of(expr)
        self._expr = expr

    def __repr__(self) -> str:
        if self._expr is _ABSENT:
            return "ExprView()"
        return f"ExprView({self._expr!r})"

    def count(self) -> int:
        """Return the number of members of a list, tuple or map; 0 otherwise."""
        if self._expr is _ABSENT:
            return 0
        if expr_kind_of(self._expr) in (ExprKind.LIST, ExprKind.TUPLE, ExprKind.MAP):
            return len(self._expr)
        return 0

    def __bool__(self) -> bool:
        return self._expr is not _ABSENT

    def __getitem__(self, key: int | str) -> ExprView:
        if isinstance(key, bool) or not isinstance(key, (int, str)):
            raise TypeError(f"expression key must be int or str, not {type(key).__name__}")
        if self._expr is _ABSENT:
            return ExprView()
        if isinstance(key, int):
            return self._lookup_index(key)
        return self._lookup_key(key)

    def _lookup_index(self, index: int) -> ExprView:
        if index < 0:
            return ExprView()
        kind = expr_kind_of(self._expr)
        if kind is ExprKind.LIST:
            if index < len(self._expr):
                return ExprView(self._expr[index])
            log.warning("List access out of range")
            return ExprView()
        if kind is ExprKind.MAP:
            for map_key, value in self._expr.pairs:
                if expr_kind_of(map_key) is ExprKind.INT and map_key == index:
                    return ExprView(value)
            return ExprView()
        log.warning("List access on non-list expression")
        return ExprView()

    def _lookup_key(self, key: str) -> ExprView:
        kind = expr_kind_of(self._expr)
        if kind is ExprKind.TUPLE:
            for result_key, value in self._expr.results:
                if result_key == key:
                    return ExprView(value)
            return ExprView()
        if kind is ExprKind.MAP:
            for map_key, value in self._expr.pairs:
                if expr_kind_of(map_key) is ExprKind.STRING and map_key == key:
                    return ExprView(value)
            return ExprView()
        log.warning("Tuple access on non-tuple expression")
        return ExprView()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, str):
            return NotImplemented
        if self._expr is _ABSENT:
            return False
        kind = expr_kind_of(self._expr)
        if kind is ExprKind.STRING:
            return self._expr == other
        if kind is ExprKind.INT:
            return is_equal_digits10(int(self._expr), other)
        return False

    def __ne__(self, other: object) -> bool:
        equal = self.__eq__(other)
        if equal is NotImplemented:
            return NotImplemented
        return not equal

    __hash__ = None  # type: ignore[assignment]

    def string_or(self, alternative: str) -> str:
        """Return the string value, or ``alternative`` if this is not a string."""
        if self._expr is _ABSENT:
            return alternative
        if expr_kind_of(self._expr) is not ExprKind.STRING:
            log.warning("String access on non-string expression")
            return alternative
        return self._expr

    def number_or(self, alternative: int) -> int:
        """Return the integer value, parsing decimal strings; else ``alternative``."""
        if self._expr is _ABSENT:
            return alternative
        kind = expr_kind_of(self._expr)
        if kind is ExprKind.INT:
            return int(self._expr)
        if kind is ExprKind.STRING:
            text = self._expr
            negative = text.startswith("-")
            digits = text[1:] if negative else text
            if any(ch not in "0123456789" for ch in digits):
                return alternative
            magnitude = int(digits) if digits else 0
            return -magnitude if negative else magnitude
        log.warning("String access on non-string expression")
        return alternative

    def to_json(self) -> str:
        """Render the expression as JSON-like text."""
        if self._expr is _ABSENT:
            raise ValueError("cannot render an empty expression view")
        parts: list[str] = []
        _render_json(self._expr, parts)
        return "".join(parts)


def _render_json(value: Any, out: list[str]) -> None:
    kind = expr_kind_of(value)
    if kind is ExprKind.STRING:
        out.append(f'"{value}"')
    elif kind is ExprKind.LIST:
        out.append("[")
        for position, element in enumerate(value):
            if position:
                out.append(", ")
            _render_json(element, out)
        out.append("]")
    elif kind is ExprKind.TUPLE:
        out.append("{")
        for position, (key, element) in enumerate(value.results):
            out.append(f'{"," if position else ""}"{key}":')
            _render_json(element, out)
        out.append("}")
    elif kind is ExprKind.MAP:
        out.append("{")
        for position, (key, element) in enumerate(value.pairs):
            name = ExprView(key).string_or("??")
            out.append(f'{"," if position else ""}"{name}":')
            _render_json(element, out)
        out.append("}")
    elif kind is ExprKind.INT:
        out.append(str(int(value)))
    else:
        out.append("null")