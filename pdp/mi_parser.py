"""Parser for the records of the GDB machine interface (MI) output syntax.

A record is the text after ``<class>,`` on an MI output line, for example
``bkpt={number="1",type="breakpoint"}``. It is parsed into expression values
(see ``pdp.expr``):

* an empty record gives an empty ``ExprTuple``;
* a container holding at least one ``key=value`` result gives an
  ``ExprTuple``; one holding only bare values gives a ``list``;
* c-strings give ``str`` with their escapes resolved.

The record itself is an implicit container without brackets. ``[`` and
``{`` are interchangeable, as are ``]`` and ``}``: whether a container is a
list or a tuple depends only on what it holds. Commas between members are
optional.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pdp.expr import ExprTuple

__all__ = ["MiParseError", "is_mi_identifier", "reverse_escape_character", "parse_mi"]

_CONTEXT_LENGTH = 50
_OPENERS = "[{"
_CLOSERS = "]}"


class MiParseError(ValueError):
    """The record does not follow the MI output syntax."""


def is_mi_identifier(c: str) -> bool:
    """Tell whether ``c`` may appear in the name of an MI result."""
    return ("a" <= c <= "z") or ("A" <= c <= "Z") or c in "_-"


def reverse_escape_character(c: str) -> str:
    """Return the character that the escape ``\\<c>`` stands for."""
    if c in ("n", "r"):
        return "\n"
    if c == "t":
        return " "
    return c


@dataclass
class _Frame:
    """An open container: its members as (key or None, value) pairs."""

    items: list[tuple[str | None, Any]] = field(default_factory=list)


class _MiParser:
    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0
        self._stack: list[_Frame] = []

    def _error(self, message: str) -> MiParseError:
        context = self._text[self._pos : self._pos + _CONTEXT_LENGTH]
        return MiParseError(f"{message} at {context}")

    def _at_end(self) -> bool:
        return self._pos >= len(self._text)

    def parse(self) -> Any:
        self._stack.append(_Frame())
        self._parse_result_or_value()
        while not self._at_end():
            if not self._stack:
                raise self._error("No open list/tuple in scope")
            c = self._text[self._pos]
            if c in _CLOSERS:
                self._pos += 1
                self._close()
                continue
            if c == ",":
                self._pos += 1
            self._parse_result_or_value()
        if len(self._stack) > 1:
            raise self._error("Unexpected end of input: unclosed list or tuple")
        if not self._stack:
            raise self._error("Syntax error, extra closing bracket")
        return self._build(self._stack.pop())

    def _close(self) -> None:
        frame = self._stack.pop()
        container = self._build(frame)
        if self._stack:
            # An open child is always its parent's most recent member.
            parent_items = self._stack[-1].items
            key, _ = parent_items[-1]
            parent_items[-1] = (key, container)
        else:
            self._root_closed = container

    def _build(self, frame: _Frame) -> Any:
        keyed = [key is not None for key, _ in frame.items]
        if any(keyed):
            if not all(keyed):
                raise self._error("Mixed values and results in one tuple")
            return ExprTuple([(key, value) for key, value in frame.items])
        return [value for _, value in frame.items]

    def _parse_result_or_value(self) -> None:
        if self._at_end():
            raise self._error("Expecting result or value but got nothing")
        c = self._text[self._pos]
        if c == '"':
            self._stack[-1].items.append((None, self._parse_string()))
        elif c in _OPENERS:
            self._open(None)
        else:
            self._parse_result()

    def _parse_result(self) -> None:
        start = self._pos
        end = start
        text = self._text
        while end < len(text) and is_mi_identifier(text[end]):
            end += 1
        if end >= len(text) or text[end] != "=":
            raise self._error("Expecting variable=...")
        key = text[start:end]
        self._pos = end + 1
        self._parse_value(key)

    def _parse_value(self, key: str) -> None:
        if self._at_end():
            raise self._error("Expecting value but got empty string")
        c = self._text[self._pos]
        if c == '"':
            self._stack[-1].items.append((key, self._parse_string()))
        elif c in _OPENERS:
            self._open(key)
        else:
            raise self._error("Expecting value but got invalid first char")

    def _open(self, key: str | None) -> None:
        self._pos += 1
        self._stack[-1].items.append((key, None))
        self._stack.append(_Frame())

    def _parse_string(self) -> str:
        text = self._text
        i = self._pos + 1
        out: list[str] = []
        while i < len(text) and text[i] != '"':
            if text[i] == "\\":
                if i + 1 >= len(text):
                    i = len(text)
                    break
                out.append(reverse_escape_character(text[i + 1]))
                i += 2
            else:
                out.append(text[i])
                i += 1
        if i >= len(text):
            raise self._error("Unterminated c-string!")
        self._pos = i + 1
        return "".join(out)


def parse_mi(text: str) -> Any:
    """Parse an MI record into an ``ExprTuple`` or ``list``.

    Raises MiParseError when the record is malformed.
    """
    if not text:
        return ExprTuple()
    return _MiParser(text).parse()