"""Closed-set enumerations on the wire.

Members are written as their canonical string value. Reading is
case-insensitive, and a string outside the set is a hard failure rather
than a default.
"""

from __future__ import annotations

import enum
from functools import partial
from typing import Any, Callable, TypeVar

from apiops.codec.document import json_type
from apiops.exceptions import DecodeError

E = TypeVar("E", bound=enum.Enum)


def encode_enum(member: enum.Enum) -> str:
    """Return the canonical string of *member*."""
    return member.value


def decode_enum(enum_cls: type[E], value: Any) -> E:
    """Look up the member of *enum_cls* whose value matches *value*, ignoring case.

    Raises:
        DecodeError: If *value* is not a string or matches no member.
    """
    if not isinstance(value, str):
        raise DecodeError("", f"expected a string, got {json_type(value)}")
    folded = value.casefold()
    for member in enum_cls:
        if member.value.casefold() == folded:
            return member
    valid = ", ".join(member.value for member in enum_cls)
    raise DecodeError("", f"'{value}' is not one of {valid}")


def enum_decoder(enum_cls: type[E]) -> Callable[[Any], E]:
    """Return a single-argument decoder for *enum_cls*, for use with the ``get_*`` accessors."""
    return partial(decode_enum, enum_cls)
