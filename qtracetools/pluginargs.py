"""Parsing of ``key=value`` style plugin arguments."""

from __future__ import annotations

import re
import warnings
from typing import Optional, Sequence

__all__ = [
    "ArgumentError",
    "find_arg",
    "find_arg_in",
    "find_arg_or_else",
    "get_u64_or_else",
    "plugin_args_find_arg",
    "plugin_args_get",
    "parse_size",
    "plugin_args_get_u64_or_else",
    "plugin_args_get_bool_or_else",
]

_U64_MASK = (1 << 64) - 1
_LONG_MAX = (1 << 63) - 1
_LONG_MIN = -(1 << 63)

_SPACE = r"[ \t\n\v\f\r]*"
_DECIMAL = re.compile(_SPACE + r"([+-]?)([0-9]+)")
_INTEGER = re.compile(
    _SPACE + r"([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)"
)

_SHIFTS = {"k": 10, "K": 10, "m": 20, "M": 20, "g": 30, "G": 30}

_TRUE_WORDS = frozenset({"1", "on", "yes", "true"})
_FALSE_WORDS = frozenset({"0", "off", "no", "false"})


class ArgumentError(ValueError):
    """Raised when an argument value cannot be understood."""


def find_arg(arg: str, key: str) -> Optional[str]:
    """Return the value of ``arg`` if it has the form ``key=value``."""
    prefix = key + "="
    if arg.startswith(prefix):
        return arg[len(prefix):]
    return None


def find_arg_in(argv: Sequence[str], key: str) -> Optional[str]:
    """Return the value of the first ``key=value`` entry in ``argv``."""
    for arg in argv:
        value = find_arg(arg, key)
        if value is not None:
            return value
    return None


def find_arg_or_else(argv: Sequence[str], key: str, value: str) -> str:
    """Return the value for ``key`` in ``argv``, or ``value`` if absent."""
    found = find_arg_in(argv, key)
    return value if found is None else found


def _scan_u64(text: str, default: int) -> int:
    match = _DECIMAL.match(text)
    if match is None:
        return default
    sign, digits = match.groups()
    magnitude = int(digits)
    if magnitude > _U64_MASK:
        return _U64_MASK
    return (-magnitude) & _U64_MASK if sign == "-" else magnitude


def get_u64_or_else(argv: Sequence[str], key: str, default_value: int) -> int:
    """Return the leading decimal number of ``key``'s value.

    The default is returned when the key is absent or its value does not
    start with a number. Negative numbers wrap around to 64 bits.
    """
    found = find_arg_in(argv, key)
    if found is None:
        return default_value
    return _scan_u64(found, default_value)


def plugin_args_find_arg(arg: str, key: str) -> Optional[str]:
    """Return what follows the first ``=`` in ``arg`` if its name matches.

    The name before ``=`` matches when ``key`` starts with it.
    """
    name, sep, value = arg.partition("=")
    if sep and key.startswith(name):
        return value
    return None


def plugin_args_get(argv: Sequence[str], key: str) -> Optional[str]:
    """Return the value of the first entry of ``argv`` that matches ``key``."""
    for arg in argv:
        value = plugin_args_find_arg(arg, key)
        if value is not None:
            return value
    return None


def _parse_integer_prefix(text: str) -> tuple[int, str]:
    match = _INTEGER.match(text)
    if match is None:
        return 0, text
    sign, digits = match.groups()
    if digits[:2] in ("0x", "0X"):
        number = int(digits[2:], 16)
    elif digits.startswith("0"):
        number = int(digits, 8)
    else:
        number = int(digits, 10)
    if sign == "-":
        number = -number
    number = max(_LONG_MIN, min(_LONG_MAX, number))
    return number & _U64_MASK, text[match.end():]


def parse_size(text: str) -> int:
    """Parse an integer with an optional ``k``/``m``/``g`` size suffix.

    The number may be decimal, octal (leading ``0``) or hexadecimal
    (leading ``0x``). Anything after a ``:`` is ignored.
    """
    value, rest = _parse_integer_prefix(text)
    shift = _SHIFTS.get(rest[:1], 0)
    if shift:
        shifted = (value << shift) & _U64_MASK
        if shifted >> shift != value:
            raise ArgumentError(f"{text} too big")
        value = shifted
        rest = rest[1:]
    if rest and rest[0] != ":":
        raise ArgumentError(f"Unrecognised size suffix '{rest}'")
    return value


def plugin_args_get_u64_or_else(
    argv: Sequence[str], key: str, default_value: int
) -> int:
    """Return ``key``'s value parsed as a size, or ``default_value``."""
    found = plugin_args_get(argv, key)
    if found is None:
        return default_value
    return parse_size(found)


def plugin_args_get_bool_or_else(
    argv: Sequence[str], key: str, default_value: bool
) -> bool:
    """Return ``key``'s value as a boolean, or ``default_value``.

    Accepted words are 1/on/yes/true and 0/off/no/false. Any other word
    issues a warning and yields the default.
    """
    found = plugin_args_get(argv, key)
    if found is not None:
        if found in _TRUE_WORDS:
            return True
        if found in _FALSE_WORDS:
            return False
        warnings.warn(f"cannot parse {found} as bool", stacklevel=2)
    return bool(default_value)