"""Checks on the outcome of system operations and fatal assertion reports."""

from __future__ import annotations

import sys

from pdp import log

__all__ = ["AssertionFailure", "CheckError", "on_assert_failed", "check", "check_and_terminate"]


class AssertionFailure(Exception):
    """An internal invariant that cannot hold was violated."""


class CheckError(OSError):
    """A checked operation failed."""


def on_assert_failed(what: str, context: str) -> None:
    """Report a fatal invariant violation on stderr and raise AssertionFailure.

    The report bypasses the logger so it is safe on failure paths.
    """
    message = f"{what} occured with: {context}"
    try:
        sys.stderr.write(f"[*** PDP ERROR ***] {message}\n")
        sys.stderr.flush()
    except (OSError, ValueError):
        pass
    raise AssertionFailure(message)


def _is_successful(result: object) -> bool:
    if isinstance(result, BaseException):
        return False
    if result is None:
        return False
    if isinstance(result, int) and not isinstance(result, bool):
        return result >= 0
    return True


def check(result: object, operation: str) -> bool:
    """Tell whether an operation succeeded, logging an error when it did not.

    ``result`` is a status (negative means failure), a resource (``None``
    means failure) or the OSError the operation raised.
    """
    if _is_successful(result):
        return True
    if isinstance(result, OSError):
        log.error(
            "'{}' returned '{}'. Error '{}': '{}'.",
            operation,
            type(result).__name__,
            result.errno if result.errno is not None else 0,
            result.strerror or str(result),
        )
    elif isinstance(result, int) and not isinstance(result, bool):
        log.error("'{}' returned '{}'.", operation, result)
    else:
        log.error("'{}' returned '{}'.", operation, str(result))
    return False


def check_and_terminate(result: object, operation: str) -> None:
    """Like ``check``, but raise CheckError when the operation failed."""
    if check(result, operation):
        return
    if isinstance(result, OSError):
        raise CheckError(result.errno, f"{operation} failed: {result.strerror or result}")
    raise CheckError(f"{operation} failed with {result!r}")