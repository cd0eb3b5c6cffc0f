"""Decoding of contract call data.

A transaction's ``data`` field carries base64 of a UTF-8 string shaped like
``functionName@arg1@arg2``. Each argument is a big-endian unsigned integer
written as hex, optionally prefixed with ``0x``. Empty segments are dropped.
"""

from __future__ import annotations

import base64
import binascii
import string
from dataclasses import dataclass
from enum import Enum

from challenge_indexer.core.errors import DecodeError

ARG_SEPARATOR = "@"
# Largest integer a JavaScript client can represent exactly (2**53 - 1).
MAX_SAFE_INTEGER = 9_007_199_254_740_991


class CallKind(str, Enum):
    """Contract functions the projector reacts to."""

    CREATE_CHALLENGE = "createChallenge"
    JOIN_CHALLENGE = "joinChallenge"
    SUBMIT_WORKOUT = "submitWorkout"
    CLOSE_CHALLENGE = "closeChallenge"

    @classmethod
    def from_function_name(cls, name: str) -> CallKind | None:
        """Return the kind for ``name`` or ``None`` for untracked functions."""
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass(frozen=True)
class DecodedCall:
    """Function name and hex arguments extracted from call data."""

    function_name: str
    args: tuple[str, ...] = ()

    @property
    def kind(self) -> CallKind | None:
        return CallKind.from_function_name(self.function_name)

    def arg(self, index: int) -> str | None:
        """Return the argument at ``index`` or ``None`` when absent."""
        if 0 <= index < len(self.args):
            return self.args[index]
        return None


def decode_call_data_strict(data: str | None) -> DecodedCall:
    """Decode base64 call data, raising :class:`DecodeError` on any failure."""
    if not data:
        raise DecodeError("Transaction carries no call data")

    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Call data is not valid base64: {exc}") from exc

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(f"Call data is not valid UTF-8: {exc}") from exc

    function_name, *rest = text.split(ARG_SEPARATOR)
    if not function_name:
        raise DecodeError("Call data has an empty function name")

    return DecodedCall(
        function_name=function_name,
        args=tuple(segment for segment in rest if segment),
    )


def decode_call_data(data: str | None) -> DecodedCall | None:
    """Decode call data, returning ``None`` when it is not a usable call."""
    try:
        return decode_call_data_strict(data)
    except DecodeError:
        return None


def parse_hex_int(value: str | None) -> int | None:
    """Parse an unsigned big-endian hex argument.

    Returns ``None`` for missing, empty or non-hex input.
    """
    if value is None:
        return None
    digits = value.strip()
    if digits[:2].lower() == "0x":
        digits = digits[2:]
    if not digits or not all(char in string.hexdigits for char in digits):
        return None
    return int(digits, 16)


def saturate_safe_int(value: int) -> int:
    """Clamp ``value`` into ``[0, MAX_SAFE_INTEGER]``."""
    return max(0, min(value, MAX_SAFE_INTEGER))
