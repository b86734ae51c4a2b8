"""Random join codes for groups."""

from __future__ import annotations

import secrets
import string

GROUP_CODE_LENGTH = 8

_CHARSETS = {
    "uppercase": string.ascii_uppercase,
    "lowercase": string.ascii_lowercase,
    "letters": string.ascii_letters,
    "numbers": string.digits,
    "alphanumeric": string.ascii_uppercase + string.digits,
}


def generate_code(length: int = 6, charset: str = "alphanumeric", prefix: str = "") -> str:
    try:
        alphabet = _CHARSETS[charset]
    except KeyError as exc:
        raise ValueError(f"Unknown charset '{charset}'") from exc
    if length < 1:
        raise ValueError("Code length must be positive")
    return prefix + "".join(secrets.choice(alphabet) for _ in range(length))


def generate_group_code() -> str:
    """Eight uppercase letters, e.g. ``QWHZKPRA``."""
    return generate_code(GROUP_CODE_LENGTH, "uppercase")


__all__ = ["GROUP_CODE_LENGTH", "generate_code", "generate_group_code"]
