"""Command-line argument parsing and validation for the simulation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

__all__ = [
    "ArgumentError",
    "Settings",
    "parse_int",
    "parse_long",
    "validate_args",
    "parse_settings",
]

INT_MAX = 2**31 - 1
_LONG_WHITESPACE = " \t\n\v\f\r"


class ArgumentError(ValueError):
    """Raised when the command-line arguments are not acceptable."""

    def __init__(self, message: str = "Invalid Argument") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class Settings:
    """Parameters of one simulation run; times are in milliseconds."""

    philosophers: int
    time_to_die: int
    time_to_eat: int
    time_to_sleep: int
    meals: Optional[int] = None


def _wrap(value: int, bits: int) -> int:
    """Reduce ``value`` to a two's-complement signed integer of ``bits`` width."""
    modulus = 1 << bits
    value %= modulus
    return value - modulus if value >= modulus >> 1 else value


def _leading_number(text: str, whitespace: str) -> tuple[int, int]:
    """Return (sign, magnitude) of the leading number after skipping ``whitespace``."""
    body = text.lstrip(whitespace)
    sign = 1
    if body[:1] in ("-", "+"):
        if body[0] == "-":
            sign = -1
        body = body[1:]
    digits = []
    for char in body:
        if not "0" <= char <= "9":
            break
        digits.append(char)
    magnitude = int("".join(digits)) if digits else 0
    return sign, magnitude


def parse_int(text: str) -> int:
    """Parse a leading decimal integer as a 32-bit signed value.

    Only spaces are skipped before the optional sign; parsing stops at the
    first non-digit. Values out of range wrap around.
    """
    sign, magnitude = _leading_number(text, " ")
    return _wrap(sign * _wrap(magnitude, 32), 32)


def parse_long(text: str) -> int:
    """Parse a leading decimal integer as a 64-bit signed value.

    Spaces and the control characters tab through carriage return are skipped
    before the optional sign. Values out of range wrap around.
    """
    sign, magnitude = _leading_number(text, _LONG_WHITESPACE)
    return _wrap(sign * _wrap(magnitude, 64), 64)


def validate_args(args: Sequence[str]) -> None:
    """Check the arguments that follow the program name.

    Four or five arguments are required, each a plain positive decimal number
    without a leading zero and no larger than the 32-bit signed maximum.
    Raises ArgumentError otherwise.
    """
    if not 4 <= len(args) <= 5:
        raise ArgumentError()
    for arg in args:
        if parse_long(arg) > INT_MAX:
            raise ArgumentError()
        if not arg or arg.startswith("0"):
            raise ArgumentError()
        if any(not "0" <= char <= "9" for char in arg):
            raise ArgumentError()


def parse_settings(args: Sequence[str]) -> Settings:
    """Validate the arguments after the program name and build Settings."""
    validate_args(args)
    philosophers, die, eat, sleep = (parse_int(arg) for arg in args[:4])
    meals = parse_int(args[4]) if len(args) == 5 else None
    return Settings(
        philosophers=philosophers,
        time_to_die=die,
        time_to_eat=eat,
        time_to_sleep=sleep,
        meals=meals,
    )