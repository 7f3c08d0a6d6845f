"""A table of one-shot callbacks keyed by request id."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pdp import log

__all__ = ["CallbackTable"]

_INVALID_ID = 0xFFFFFFFF


class CallbackTable:
    """Holds callbacks bound to ids; each is invoked at most once."""

    max_elements = 16_384

    def __init__(self) -> None:
        self._callbacks: dict[int, Callable[..., Any]] = {}

    def bind(self, callback_id: int, callback: Callable[..., Any]) -> None:
        """Register ``callback`` to run when ``callback_id`` is invoked."""
        if isinstance(callback_id, bool) or not isinstance(callback_id, int):
            raise TypeError("callback id must be an integer")
        if not 0 <= callback_id < _INVALID_ID:
            raise ValueError(f"invalid callback id {callback_id}")
        if not callable(callback):
            raise TypeError("callback must be callable")
        if callback_id in self._callbacks:
            raise ValueError(f"callback id {callback_id} is already bound")
        if len(self._callbacks) >= self.max_elements:
            raise OverflowError("too many pending callbacks")
        self._callbacks[callback_id] = callback

    def invoke(self, callback_id: int, *args: Any) -> bool:
        """Run and forget the callback bound to ``callback_id``.

        Returns False, with a warning, when no callback is bound to it.
        """
        callback = self._callbacks.pop(callback_id, None)
        if callback is None:
            log.warning("Could not invoke with id={}, not found!", callback_id)
            return False
        callback(*args)
        return True

    def pending(self) -> list[int]:
        """Return the ids still waiting, in the order they were bound."""
        return list(self._callbacks)

    def __len__(self) -> int:
        return len(self._callbacks)

    def __contains__(self, callback_id: object) -> bool:
        return callback_id in self._callbacks