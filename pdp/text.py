"""Text helpers: digit counting and the ``{}`` placeholder formatter."""

from __future__ import annotations

__all__ = [
    "FormatError",
    "count_digits10",
    "count_digits16",
    "is_equal_digits10",
    "estimate_size",
    "format_value",
    "format_pack",
]

_INT_MIN = -(1 << 63)
_UINT_MAX = (1 << 64) - 1

# Upper bound for any 64-bit integer: 19 digits plus a sign, or 20 digits.
_INT_ESTIMATE = 20
_BOOL_ESTIMATE = 5
_BYTE_ESTIMATE = 4

_HEX_DIGITS = "0123456789abcdef"


class FormatError(ValueError):
    """Raised when a format string and its arguments do not match."""


def _check_unsigned(n: int) -> None:
    if isinstance(n, bool) or not isinstance(n, int):
        raise TypeError(f"expected an integer, got {type(n).__name__}")
    if n < 0 or n > _UINT_MAX:
        raise ValueError(f"{n} is not an unsigned 64-bit integer")


def _check_integer(n: int) -> None:
    if n < _INT_MIN or n > _UINT_MAX:
        raise ValueError(f"{n} does not fit in 64 bits")


def count_digits10(n: int) -> int:
    """Return the number of decimal digits of an unsigned 64-bit integer."""
    _check_unsigned(n)
    digits = 1
    while n >= 10:
        n //= 10
        digits += 1
    return digits


def count_digits16(n: int) -> int:
    """Return the number of hexadecimal digits of an unsigned 64-bit integer."""
    _check_unsigned(n)
    bits = (n | 1).bit_length() - 1
    return (bits >> 2) + 1


def is_equal_digits10(value: int, text: str) -> bool:
    """Tell whether ``text`` is exactly the decimal spelling of ``value``."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an integer, got {type(value).__name__}")
    _check_integer(value)
    if value < 0:
        if not text.startswith("-"):
            return False
        text = text[1:]
        value = -value
    if len(text) != count_digits10(value):
        return False
    for ch in reversed(text):
        if ch != chr(ord("0") + value % 10):
            return False
        value //= 10
    return True


def estimate_size(value: object) -> int:
    """Return an upper bound on the length of ``format_value(value)``."""
    if isinstance(value, bool):
        return _BOOL_ESTIMATE
    if isinstance(value, str):
        return len(value)
    if isinstance(value, int):
        _check_integer(value)
        return _INT_ESTIMATE
    if isinstance(value, (bytes, bytearray)):
        return _BYTE_ESTIMATE * len(value)
    raise TypeError(f"unsupported type: {type(value).__name__}")


def _format_byte(byte: int) -> str:
    return "0x" + _HEX_DIGITS[byte >> 4] + _HEX_DIGITS[byte & 0xF]


def format_value(value: object) -> str:
    """Render one argument the way the ``{}`` placeholder does.

    Booleans become ``true``/``false``, integers are decimal, strings are
    copied, and bytes are written as ``0x``-prefixed two-digit hex each.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        _check_integer(value)
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return "".join(_format_byte(b) for b in value)
    raise TypeError(f"unsupported type: {type(value).__name__}")


def format_pack(fmt: str, *args: object) -> str:
    """Substitute ``args`` in order for each ``{}`` in ``fmt``.

    A ``{`` not followed by ``}`` is copied as is. Raises FormatError when
    there are more arguments than placeholders or fewer.
    """
    parts: list[str] = []
    rest = fmt
    for arg in args:
        while True:
            pos = rest.find("{")
            if pos < 0:
                raise FormatError(f"Extra arguments for format: {fmt!r}")
            parts.append(rest[:pos])
            rest = rest[pos + 1 :]
            if rest.startswith("}"):
                parts.append(format_value(arg))
                rest = rest[1:]
                break
            parts.append("{")
    if "{}" in rest:
        raise FormatError(f"Insufficient arguments for format: {fmt!r}")
    parts.append(rest)
    return "".join(parts)