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
Custom exceptions for the coreason-federation package.
"""

from typing import Any

GENERIC_INTERNAL_ERROR = "An internal server error occurred, please contact the system administrator"


class CoreasonFederationError(Exception):
    """Base exception for all coreason-federation errors."""

    classification = "internal_error"


class ConfigurationError(CoreasonFederationError):
    """Raised when provider settings cannot be built (e.g. no redirect URI base)."""

    classification = "configuration_error"


class ProviderNotFoundError(ConfigurationError):
    """Raised when no provider is configured under the requested ID."""


class UpstreamError(CoreasonFederationError):
    """
    Raised when the upstream identity provider rejected or failed a request.

    Attributes:
        provider (str): The configured provider ID.
        status_code (int | None): The HTTP status returned, or None for network failures.
    """

    classification = "upstream_error"

    def __init__(self, message: str, provider: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code

    @property
    def transient(self) -> bool:
        """Whether a retry could plausibly succeed."""
        return self.status_code is None or self.status_code == 429 or self.status_code >= 500


class MalformedResponseError(CoreasonFederationError):
    """Raised when a 2xx upstream response does not decode into the expected shape."""

    classification = "malformed_response"


class OversizedResponseError(MalformedResponseError):
    """Raised when an HTTP response is too large."""


class InvalidTokenError(CoreasonFederationError):
    """Raised when the exchanged token cannot be used (missing, expired without refresh)."""

    classification = "invalid_token"


class SecurityError(CoreasonFederationError):
    """Raised when a security violation is detected."""


class InternalServerError(CoreasonFederationError):
    """
    The only error surfaced to the orchestrator from `Provider.claims`.

    `str()` is always a generic message so upstream internals never reach the
    end user. Operators get the detail from `reason`, `classification`,
    `details` and the chained `__cause__`.
    """

    def __init__(
        self,
        reason: str,
        classification: str = "internal_error",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(GENERIC_INTERNAL_ERROR)
        self.reason = reason
        self.classification = classification
        self.details = details or {}
