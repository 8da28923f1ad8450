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
Normalization of optional upstream string fields.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator

__all__ = ["OptionalString", "empty_if_none"]


def empty_if_none(value: Any) -> Any:
    """Maps JSON null to the empty string; other values are left to pydantic."""
    if value is None:
        return ""
    return value


# Providers send null and omit fields interchangeably; both mean "absent".
OptionalString = Annotated[str, BeforeValidator(empty_if_none)]
