"""Decoder for msgpack-encoded RPC records into expression values."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, BinaryIO

from pdp.byte_stream import ByteStream
from pdp.expr import ExprKind, ExprMap, expr_kind_name, expr_kind_of

__all__ = ["RpcError", "RpcParser"]


class RpcError(ValueError):
    """The RPC stream holds something that cannot be decoded."""


_INTEGER_READERS: dict[int, Callable[[ByteStream], int]] = {
    0xD0: ByteStream.pop_int8,
    0xD1: ByteStream.pop_int16,
    0xD2: ByteStream.pop_int32,
    0xD3: ByteStream.pop_int64,
    0xCC: ByteStream.pop_uint8,
    0xCD: ByteStream.pop_uint16,
    0xCE: ByteStream.pop_uint32,
    0xCF: ByteStream.pop_uint64,
}

_STRING_LENGTHS: dict[int, Callable[[ByteStream], int]] = {
    0xD9: ByteStream.pop_uint8,
    0xDA: ByteStream.pop_uint16,
    0xDB: ByteStream.pop_uint32,
}

_ARRAY_LENGTHS: dict[int, Callable[[ByteStream], int]] = {
    0xDC: ByteStream.pop_uint16,
    0xDD: ByteStream.pop_uint32,
}

_MAP_LENGTHS: dict[int, Callable[[ByteStream], int]] = {
    0xDE: ByteStream.pop_uint16,
    0xDF: ByteStream.pop_uint32,
}


def _to_int64(value: int) -> int:
    # Integers are held as signed 64-bit values; large uint64 wrap around.
    return value - (1 << 64) if value >= (1 << 63) else value


@dataclass
class _Frame:
    items: list
    remaining: int
    is_map: bool
    key: Any = None


class RpcParser:
    """Reads one msgpack record at a time; the top level must be an array or map.

    Arrays become lists, maps become ExprMap, strings str, nil None, and
    integers and booleans int.
    """

    def __init__(self, source: ByteStream | int | BinaryIO = 0) -> None:
        self._stream = source if isinstance(source, ByteStream) else ByteStream(source)

    def parse(self) -> Any:
        """Decode and return the next record."""
        root, frame = self._next()
        if frame is None:
            raise RpcError("Top level RPC record is not an array or map!")
        stack = [frame]
        while stack:
            value, child = self._next()
            self._attach(stack, value)
            if child is not None:
                stack.append(child)
        return root

    @staticmethod
    def _attach(stack: list[_Frame], value: Any) -> None:
        top = stack[-1]
        if top.is_map:
            if top.remaining % 2 == 0:
                kind = expr_kind_of(value)
                if kind not in (ExprKind.STRING, ExprKind.INT):
                    raise RpcError(f"RPC map has unsupported key type: {expr_kind_name(kind)}!")
                top.key = value
            else:
                top.items.append((top.key, value))
        else:
            top.items.append(value)
        top.remaining -= 1
        if top.remaining == 0:
            stack.pop()

    def _next(self) -> tuple[Any, _Frame | None]:
        stream = self._stream
        byte = stream.pop_byte()
        if byte in _INTEGER_READERS:
            return _to_int64(_INTEGER_READERS[byte](stream)), None
        if byte == 0xC0:
            return None, None
        if byte in (0xC2, 0xC3):
            return byte & 0x1, None
        if byte in _STRING_LENGTHS:
            return self._string(_STRING_LENGTHS[byte](stream)), None
        if byte in _ARRAY_LENGTHS:
            return self._array(_ARRAY_LENGTHS[byte](stream))
        if byte in _MAP_LENGTHS:
            return self._map(_MAP_LENGTHS[byte](stream))
        if byte <= 0x7F:
            return byte, None
        if byte >= 0xE0:
            return byte - 0x100, None
        if 0xA0 <= byte <= 0xBF:
            return self._string(byte & 0x1F), None
        if 0x90 <= byte <= 0x9F:
            return self._array(byte & 0xF)
        if 0x80 <= byte <= 0x8F:
            return self._map(byte & 0xF)
        raise RpcError(f"Unsupported RPC byte: {byte}")

    def _string(self, length: int) -> str:
        return self._stream.read(length).decode("utf-8", errors="surrogateescape")

    @staticmethod
    def _array(length: int) -> tuple[list, _Frame | None]:
        items: list = []
        return items, (_Frame(items, length, False) if length > 0 else None)

    @staticmethod
    def _map(length: int) -> tuple[ExprMap, _Frame | None]:
        result = ExprMap()
        return result, (_Frame(result.pairs, 2 * length, True) if length > 0 else None)