# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_federation

"""
Coercion of boolean-like upstream values (e.g. `email_verified`).
"""

from typing import Annotated, Any

from pydantic import BeforeValidator

__all__ = ["ConvertibleBoolean", "coerce_bool"]

_TRUTHY = frozenset({"1", "t", "true", "y", "yes", "on"})
_FALSY = frozenset({"", "0", "f", "false", "n", "no", "off"})


def coerce_bool(value: Any) -> bool:
    """
    Normalizes the encodings identity providers use for booleans.

    Accepts native booleans, the integers 0/1, and strings such as "true",
    "False", "1" or "0" (trimmed, case-insensitive). `None` is treated as false.

    Args:
        value: The raw decoded JSON value.

    Returns:
        The normalized boolean.

    Raises:
        ValueError: If the value has no boolean meaning.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError(f"Integer {value} is not a boolean")
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUTHY:
            return True
        if normalized in _FALSY:
            return False
        raise ValueError(f"String {value!r} is not a boolean")
    raise ValueError(f"Value of type {type(value).__name__} is not a boolean")


ConvertibleBoolean = Annotated[bool, BeforeValidator(coerce_bool)]
