"""Line reader over a file descriptor with a growing, reusable buffer."""

from __future__ import annotations

import os
import select
import time

from pdp.check import check

__all__ = ["RollingBuffer"]


class RollingBuffer:
    """Reads newline-terminated lines from a file descriptor.

    Bytes read past the end of a line are kept for the next call.
    """

    min_read_size = 4 * 1024
    default_buffer_size = 1 << 20
    max_capacity = 1 << 30

    def __init__(self, fd: int | None = None) -> None:
        self._fd = fd
        self._buffer = bytearray()
        self._pos = 0

    def set_descriptor(self, fd: int) -> None:
        """Set the file descriptor lines are read from."""
        self._fd = fd

    def _take_line(self, start: int) -> bytes | None:
        newline = self._buffer.find(b"\n", start)
        if newline < 0:
            return None
        line = bytes(self._buffer[self._pos : newline + 1])
        self._pos = newline + 1
        if self._pos == len(self._buffer):
            self._buffer.clear()
            self._pos = 0
        return line

    def _reserve_for_read(self) -> None:
        if self._pos == len(self._buffer):
            self._buffer.clear()
            self._pos = 0
        elif self._pos >= len(self._buffer) - self._pos:
            del self._buffer[: self._pos]
            self._pos = 0
        if len(self._buffer) - self._pos + self.min_read_size > self.max_capacity:
            raise OverflowError("line exceeds the maximum buffer capacity")

    def read_line(self, timeout: float) -> bytes | None:
        """Return the next line, newline included, waiting up to ``timeout`` seconds.

        Returns None when no whole line arrived in time or the input ended.
        """
        line = self._take_line(self._pos)
        if line is not None:
            return line
        if self._fd is None:
            raise RuntimeError("no file descriptor set")

        deadline = time.monotonic() + timeout
        remaining = timeout
        while remaining > 0:
            ready, _, _ = select.select([self._fd], [], [], remaining)
            if not ready:
                return None
            self._reserve_for_read()
            try:
                chunk = os.read(self._fd, max(self.min_read_size, self.default_buffer_size))
            except (BlockingIOError, InterruptedError):
                chunk = None
            except OSError as exc:
                check(exc, "read")
                return None
            if chunk == b"":
                return None
            if chunk:
                start = len(self._buffer)
                self._buffer += chunk
                line = self._take_line(start)
                if line is not None:
                    return line
            remaining = deadline - time.monotonic()
        return None