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
The Provider contract shared by all upstream identity provider adapters.
"""

import abc
import hashlib
import hmac
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, ClassVar

import httpx
from authlib.oauth2.rfc6749.parameters import prepare_grant_uri
from opentelemetry import trace
from pydantic import BaseModel, ValidationError

from coreason_federation.async_context import get_redirect_uri_base
from coreason_federation.config import ProviderConfiguration
from coreason_federation.dependencies import Dependencies
from coreason_federation.exceptions import (
    ConfigurationError,
    CoreasonFederationError,
    InternalServerError,
    MalformedResponseError,
    UpstreamError,
)
from coreason_federation.fetcher import ResilientFetcher
from coreason_federation.models import Claims, LoginRequest, OAuth2Settings


class Provider(abc.ABC):
    """
    One upstream identity provider (LinkedIn, Google, ...).

    Instances are built once from configuration and hold no per-request state,
    so a single instance serves concurrent logins. The orchestrator only ever
    talks to this interface.

    Subclasses set the endpoint class attributes and implement `profile` and
    `to_claims`.
    """

    name: ClassVar[str]
    auth_url: ClassVar[str]
    token_url: ClassVar[str]
    issuer: ClassVar[str]
    profile_url: ClassVar[str]

    def __init__(self, config: ProviderConfiguration, deps: Dependencies) -> None:
        """
        Initialize the Provider.

        Args:
            config: This provider's static configuration.
            deps: Shared services (client factory, tracer, logger, global config).
        """
        self._config = config
        self.deps = deps
        self.logger = deps.logger.bind(provider=config.id)
        self.fetcher = ResilientFetcher(
            provider_id=config.id,
            span_name=self._span_name("fetch"),
            tracer=deps.tracer,
            logger=deps.logger,
            attempts=deps.config.retry_attempts,
            wait_initial=deps.config.retry_wait_initial,
            wait_max=deps.config.retry_wait_max,
            max_bytes=deps.config.max_response_bytes,
        )

    @property
    def config(self) -> ProviderConfiguration:
        """This provider's configuration (read-only)."""
        return self._config

    def _span_name(self, operation: str) -> str:
        return f"coreason_federation.providers.{type(self).__name__}.{operation}"

    def issuer_url(self) -> str:
        return self._config.issuer_url or self.issuer

    def scopes(self) -> list[str]:
        return list(self._config.scope)

    def redirect_url(self) -> str:
        """
        Computes the callback URL from the request-scoped base, falling back to the configured one.

        Raises:
            ConfigurationError: If no redirect URI base is available.
        """
        base = get_redirect_uri_base() or self.deps.config.redirect_uri_base
        if not base:
            raise ConfigurationError(
                f"Unable to compute the redirect URL for provider '{self._config.id}': no redirect URI base configured"
            )
        return self._config.redirect_url(base)

    def oauth2_config(self) -> OAuth2Settings:
        """
        Builds the authorization-flow settings.

        Returns:
            OAuth2Settings: Client credentials, endpoints, scopes and redirect URL.

        Raises:
            ConfigurationError: If the redirect URL cannot be computed.
        """
        return OAuth2Settings(
            client_id=self._config.client_id,
            client_secret=self._config.client_secret,
            auth_url=self._config.auth_url or self.auth_url,
            token_url=self._config.token_url or self.token_url,
            scopes=self.scopes(),
            redirect_url=self.redirect_url(),
        )

    def auth_code_url_options(self, request: LoginRequest | None = None) -> dict[str, str]:
        """Provider-specific query parameters for the authorization URL. Empty by default."""
        return {}

    def authorization_url(self, state: str, request: LoginRequest | None = None) -> str:
        """
        Builds the URL the user agent is redirected to in order to authenticate.

        Args:
            state: The opaque anti-CSRF state value.
            request: The login request, if any. Options that depend only on configuration
                (e.g. offline access) are applied without one.

        Returns:
            str: The authorization URL.
        """
        settings = self.oauth2_config()
        options = self.auth_code_url_options(request)
        return str(
            prepare_grant_uri(
                settings.auth_url,
                settings.client_id,
                "code",
                redirect_uri=settings.redirect_url,
                scope=settings.scopes or None,
                state=state,
                **options,
            )
        )

    @abc.abstractmethod
    async def profile(self, client: httpx.AsyncClient) -> BaseModel:
        """Fetches this provider's profile document with the authenticated client."""

    @abc.abstractmethod
    def to_claims(self, profile: Any, query: Mapping[str, str]) -> Claims:
        """Maps the provider's profile onto canonical claims."""

    async def claims(self, token: Mapping[str, Any], query: Mapping[str, str] | None = None) -> Claims:
        """
        Resolves canonical claims for a completed token exchange.

        Emits an OpenTelemetry span `coreason_federation.providers.<Provider>.claims`
        and sets `enduser.id` (anonymized) on success.

        Args:
            token: The exchanged OAuth2 token.
            query: Raw query parameters of the provider's callback, if any.

        Returns:
            Claims: The canonical identity record.

        Raises:
            InternalServerError: For every failure. The message is generic; the
                classified detail is kept on the exception and in logs/traces.
        """
        with self._error_boundary("claims"), self.deps.tracer.start_as_current_span(self._span_name("claims")) as span:
            span.set_attribute("federation.provider", self._config.id)

            settings = self.oauth2_config()
            async with self.deps.http_client_factory.oauth2_client(settings, token) as client:
                profile = await self.profile(client)

            claims = self.to_claims(profile, query or {})

            user_hash = self._anonymize(claims.subject)
            span.set_attribute("enduser.id", user_hash)
            self.logger.info(f"Claims resolved for user {user_hash}")
            return claims

    def _make_claims(self, **fields: Any) -> Claims:
        """
        Constructs Claims with this provider's issuer.

        Raises:
            MalformedResponseError: If the profile lacks a required field (e.g. an empty subject).
        """
        try:
            return Claims(issuer=self.issuer_url(), **fields)
        except ValidationError as e:
            fields_in_error = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
            raise MalformedResponseError(f"Profile cannot be mapped to claims, invalid fields: {fields_in_error}") from e

    def _anonymize(self, value: str) -> str:
        """
        Anonymizes a value using HMAC-SHA256 with the configured salt.
        """
        return hmac.new(
            self.deps.config.pii_salt.get_secret_value().encode("utf-8"),
            value.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    @contextmanager
    def _error_boundary(self, operation: str) -> Iterator[None]:
        """
        The single place where failures are turned into `InternalServerError`.

        Detail goes to the log and onto the raised error's structured fields.
        Cancellation is not an `Exception` and passes through untouched.
        """
        try:
            yield
        except InternalServerError:
            raise
        except CoreasonFederationError as e:
            details: dict[str, Any] = {"provider": self._config.id, "operation": operation}
            if isinstance(e, UpstreamError) and e.status_code is not None:
                details["status_code"] = e.status_code
            self.logger.bind(classification=e.classification, **details).error(f"{operation} failed: {e}")
            raise InternalServerError(reason=str(e), classification=e.classification, details=details) from e
        except Exception as e:
            details = {"provider": self._config.id, "operation": operation}
            self.logger.exception(f"Unexpected error during {operation}")
            raise InternalServerError(reason=f"{type(e).__name__}: {e}", details=details) from e
