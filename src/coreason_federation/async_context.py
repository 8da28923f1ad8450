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
Async Context Management for the request-scoped redirect URI base.

Multi-tenant deployments serve the self-service endpoints under different
public URLs; the orchestrator sets the base for the current request here and
providers compute their callback URLs from it.
"""

from contextvars import ContextVar

_redirect_uri_base: ContextVar[str | None] = ContextVar("redirect_uri_base", default=None)


def get_redirect_uri_base() -> str | None:
    """
    Retrieve the redirect URI base of the current request.

    Returns:
        str | None: The base URL, or None if not set.
    """
    return _redirect_uri_base.get()


def set_redirect_uri_base(base: str) -> None:
    """
    Set the redirect URI base for the current async task.

    Args:
        base: The public base URL, e.g. https://accounts.example.com.
    """
    _redirect_uri_base.set(base)


def clear_redirect_uri_base() -> None:
    """
    Clear the redirect URI base (reset to None).
    """
    _redirect_uri_base.set(None)
