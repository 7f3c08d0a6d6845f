"""Buffered big-endian reads from a file descriptor or binary stream."""

from __future__ import annotations

import os
import select
import time
from typing import Any, BinaryIO

__all__ = ["StreamTimeout", "ByteStream"]


class StreamTimeout(TimeoutError):
    """Not enough bytes arrived within the allowed time."""


class ByteStream:
    """Pops fixed-width integers and byte runs off an input stream.

    ``source`` is a file descriptor, waited on with a timeout, or a binary
    file object. A read that cannot be satisfied raises StreamTimeout.
    """

    default_buffer_size = 1 << 20
    max_wait = 1.0

    def __init__(self, source: int | BinaryIO = 0, max_wait: float | None = None) -> None:
        if isinstance(source, bool):
            raise TypeError("source must be a file descriptor or a binary stream")
        if isinstance(source, int):
            self._fd: int | None = source
            self._reader: Any = None
        else:
            self._fd = None
            self._reader = getattr(source, "read1", None) or source.read
        if max_wait is not None:
            self.max_wait = max_wait
        self._buffer = bytearray()
        self._pos = 0

    def pop_byte(self) -> int:
        """Return the next byte as an unsigned value."""
        return self._take(1)[0]

    def pop_uint8(self) -> int:
        return self.pop_byte()

    def pop_int8(self) -> int:
        return int.from_bytes(self._take(1), "big", signed=True)

    def pop_uint16(self) -> int:
        return int.from_bytes(self._take(2), "big")

    def pop_int16(self) -> int:
        return int.from_bytes(self._take(2), "big", signed=True)

    def pop_uint32(self) -> int:
        return int.from_bytes(self._take(4), "big")

    def pop_int32(self) -> int:
        return int.from_bytes(self._take(4), "big", signed=True)

    def pop_uint64(self) -> int:
        return int.from_bytes(self._take(8), "big")

    def pop_int64(self) -> int:
        return int.from_bytes(self._take(8), "big", signed=True)

    def read(self, n: int) -> bytes:
        """Return exactly ``n`` bytes."""
        if n < 0:
            raise ValueError("cannot read a negative number of bytes")
        if n == 0:
            return b""
        return self._take(n)

    def _take(self, n: int) -> bytes:
        self._require(n)
        data = bytes(self._buffer[self._pos : self._pos + n])
        self._pos += n
        return data

    def _require(self, n: int) -> None:
        if len(self._buffer) - self._pos >= n:
            return
        del self._buffer[: self._pos]
        self._pos = 0
        deadline = time.monotonic() + self.max_wait
        while len(self._buffer) < n:
            wanted = max(n - len(self._buffer), self.default_buffer_size - len(self._buffer))
            chunk = self._read_some(wanted, deadline)
            if not chunk:
                raise StreamTimeout(
                    f"Failed to read {n} bytes within {int(self.max_wait * 1000)}ms"
                )
            self._buffer += chunk

    def _read_some(self, size: int, deadline: float) -> bytes:
        if self._reader is not None:
            return self._reader(size) or b""
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return b""
            ready, _, _ = select.select([self._fd], [], [], remaining)
            if not ready:
                return b""
            try:
                return os.read(self._fd, size)
            except (BlockingIOError, InterruptedError):
                continue