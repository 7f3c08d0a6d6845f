"""Drives a GDB process over its machine interface (MI) and dispatches its output."""

from __future__ import annotations

import argparse
import enum
import os
import re
import select
import subprocess
import threading
import time
from typing import Any

from pdp import log
from pdp.callbacks import CallbackTable
from pdp.check import check_and_terminate
from pdp.expr import ExprView
from pdp.mi_parser import MiParseError, parse_mi, reverse_escape_character
from pdp.rolling_buffer import RollingBuffer

__all__ = ["AsyncKind", "GdbDriver", "process_cstring", "classify_async", "main"]

_STREAM_MARKERS = "~@&"
_RESULT_MARKERS = "^"
_ASYNC_MARKERS = "*+="

_GDB_FLAGS = (
    "--quiet",
    "-iex",
    "set pagination off",
    "-iex",
    "set prompt",
    "-iex",
    "set startup-with-shell off",
    "--interpreter=mi2",
)

_STDERR_CHUNK = 1024
_WRITE_TIMEOUT = 1.0
_ESCAPE = re.compile(r"\\(.)", re.DOTALL)


class AsyncKind(enum.Enum):
    """The class of an asynchronous MI record."""

    UNKNOWN = enum.auto()
    STOPPED = enum.auto()
    RUNNING = enum.auto()
    CMD_PARAM_CHANGED = enum.auto()
    BREAKPOINT_CREATED = enum.auto()
    BREAKPOINT_DELETED = enum.auto()
    BREAKPOINT_MODIFIED = enum.auto()
    THREAD_CREATED = enum.auto()
    THREAD_SELECTED = enum.auto()
    THREAD_EXITED = enum.auto()
    THREAD_GROUP_STARTED = enum.auto()
    LIBRARY_LOADED = enum.auto()
    LIBRARY_UNLOADED = enum.auto()


_ASYNC_NAMES = {
    "stopped": AsyncKind.STOPPED,
    "running": AsyncKind.RUNNING,
    "cmd-param-changed": AsyncKind.CMD_PARAM_CHANGED,
    "breakpoint-created": AsyncKind.BREAKPOINT_CREATED,
    "breakpoint-deleted": AsyncKind.BREAKPOINT_DELETED,
    "breakpoint-modified": AsyncKind.BREAKPOINT_MODIFIED,
    "thread-created": AsyncKind.THREAD_CREATED,
    "thread-selected": AsyncKind.THREAD_SELECTED,
    "thread-exited": AsyncKind.THREAD_EXITED,
    "thread-group-started": AsyncKind.THREAD_GROUP_STARTED,
    "library-loaded": AsyncKind.LIBRARY_LOADED,
    "library-unloaded": AsyncKind.LIBRARY_UNLOADED,
}


def process_cstring(text: str) -> str:
    """Strip the quotes of an MI c-string and resolve its escapes.

    Text that is not enclosed in double quotes is logged and returned as is.
    """
    if len(text) < 2 or text[0] != '"' or text[-1] != '"':
        log.error("Unexpected start/end of stream message")
        return text
    body = text[1:-1]
    if "\\" not in body:
        return body
    return _ESCAPE.sub(lambda m: reverse_escape_character(m.group(1)), body)


def classify_async(name: str) -> AsyncKind:
    """Return the kind of an asynchronous record from its class name."""
    return _ASYNC_NAMES.get(name, AsyncKind.UNKNOWN)


class GdbDriver:
    """Starts GDB, sends it tokenised commands and handles what it prints.

    Result records whose token has a callback bound in ``callbacks`` invoke
    it with an ExprView of the record.
    """

    def __init__(self, program: str = "Debug/pdp", gdb: str = "gdb") -> None:
        self.program = program
        self.gdb = gdb
        self.token_counter = 1
        self.callbacks = CallbackTable()
        self._process: subprocess.Popen | None = None
        self._stdout = RollingBuffer()
        self._monitor: threading.Thread | None = None
        self._stop_monitor = threading.Event()

    def __enter__(self) -> GdbDriver:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def start(self) -> None:
        """Launch GDB with its standard streams connected to this driver."""
        argv = [self.gdb, *_GDB_FLAGS, self.program]
        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            check_and_terminate(exc, "exec")
            return
        self._process = process
        self._stdout.set_descriptor(process.stdout.fileno())
        self._stop_monitor.clear()
        self._monitor = threading.Thread(
            target=self._monitor_stderr,
            args=(process.stderr.fileno(),),
            daemon=True,
        )
        self._monitor.start()

    def stop(self) -> None:
        """Stop the stderr monitor and shut GDB down."""
        self._stop_monitor.set()
        if self._monitor is not None:
            self._monitor.join(timeout=2.0)
            self._monitor = None
        process, self._process = self._process, None
        if process is None:
            return
        if process.stdin is not None:
            try:
                process.stdin.close()
            except OSError:
                pass
        try:
            process.wait(timeout=1.0)
        except subprocess.TimeoutExpired:
            process.terminate()
            try:
                process.wait(timeout=1.0)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()
        for stream in (process.stdout, process.stderr):
            if stream is not None:
                stream.close()

    def _process_alive(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def _monitor_stderr(self, fd: int) -> None:
        while not self._stop_monitor.is_set():
            try:
                ready, _, _ = select.select([fd], [], [], 1.0)
            except (OSError, ValueError):
                return
            if not ready:
                continue
            try:
                data = os.read(fd, _STDERR_CHUNK)
            except OSError:
                return
            if not data:
                return
            log.error("GDB error: {}", data.decode("utf-8", errors="replace"))

    def poll(self, timeout: float) -> None:
        """Wait up to ``timeout`` seconds for one line of output and handle it."""
        line = self._stdout.read_line(timeout)
        if line is None:
            return
        self.handle_line(line)

    def handle_line(self, line: bytes | str) -> None:
        """Dispatch one newline-terminated line of MI output."""
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        if len(line) <= 1:
            return
        if not line.endswith("\n"):
            raise ValueError("MI output line must end with a newline")

        if line[0] in _STREAM_MARKERS:
            self.on_stream_message(process_cstring(line[1:-1]))
            return

        match = re.match(r"[0-9]*", line)
        digits = match.group(0)
        token = int(digits) if digits else 0
        pos = len(digits)
        marker = line[pos]
        pos += 1
        name_end = pos
        while line[name_end] not in "\n,":
            name_end += 1
        name = line[pos:name_end]
        record = line[name_end + 1 : -1] if line[name_end] == "," else ""

        try:
            expr = parse_mi(record)
        except MiParseError as exc:
            log.error("{}", str(exc))
            log.error("Parsing {} failed!", record)
            return

        if not name:
            log.warning("Missing class name for message with token {}", token)
        elif marker in _RESULT_MARKERS:
            self.on_result_message(token, name, expr)
        elif marker in _ASYNC_MARKERS:
            self.on_async_message(name, expr)

    def request(self, command: str) -> bool:
        """Send ``command`` prefixed with the next token; tell whether it was written."""
        data = f"{self.token_counter}{command}\n".encode("utf-8")
        self.token_counter += 1
        success = self._write_exactly(data, _WRITE_TIMEOUT)
        if not success:
            log.warning("Failed to submit request {}", command)
        return success

    def _write_exactly(self, data: bytes, timeout: float) -> bool:
        process = self._process
        if process is None or process.stdin is None or process.stdin.closed:
            return False
        fd = process.stdin.fileno()
        deadline = time.monotonic() + timeout
        view = memoryview(data)
        while view:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            try:
                _, ready, _ = select.select([], [fd], [], remaining)
                if not ready:
                    return False
                written = os.write(fd, view)
            except (BlockingIOError, InterruptedError):
                continue
            except OSError:
                return False
            view = view[written:]
        return True

    def on_stream_message(self, message: str) -> None:
        """Print console, target and log stream output as is."""
        log.log_unformatted(message)

    def on_async_message(self, name: str, expr: Any) -> AsyncKind:
        """Classify an asynchronous record and return its kind."""
        return classify_async(name)

    def on_result_message(self, token: int, name: str, expr: Any) -> None:
        """Handle a result record: run the callback of ``token`` or report an error."""
        if name == "done":
            if token in self.callbacks:
                self.callbacks.invoke(token, ExprView(expr))
        elif name == "error":
            message = ExprView(expr)["msg"]
            text = message.string_or("") if message else ""
            log.error("Request {} failed: {}", token, text)


def main(argv: list[str] | None = None) -> int:
    """Run GDB on a program and print what it reports until it exits."""
    parser = argparse.ArgumentParser(prog="pdp", description="Drive GDB over its MI.")
    parser.add_argument("program", nargs="?", default="Debug/pdp", help="program to debug")
    parser.add_argument("--gdb", default="gdb", help="GDB executable")
    args = parser.parse_args(argv)

    log.set_console_log_level(log.Level.INFO)
    driver = GdbDriver(args.program, args.gdb)
    driver.start()
    try:
        driver.request("-exec-run --start")
        while driver._process_alive():
            driver.poll(1.0)
    except KeyboardInterrupt:
        pass
    finally:
        driver.stop()
    return 0