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
Factory for OAuth2-authenticated upstream HTTP clients.
"""

from collections.abc import Callable, Mapping
from typing import Any

import httpx
from authlib.integrations.httpx_client import AsyncOAuth2Client
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

from coreason_federation.config import FederationConfig
from coreason_federation.models import OAuth2Settings
from coreason_federation.transport import SafeAsyncTransport

TransportFactory = Callable[[], httpx.AsyncBaseTransport]


class HTTPClientFactory:
    """
    Builds one transient, token-bound client per upstream call.

    Each client gets its own transport and must be closed by the caller
    (`async with factory.oauth2_client(...) as client:`), so no connection
    state outlives a single claims resolution.
    """

    def __init__(self, config: FederationConfig, transport_factory: TransportFactory | None = None) -> None:
        """
        Initialize the HTTPClientFactory.

        Args:
            config: The configuration object (timeout, instrumentation, local-dev switch).
            transport_factory: Creates the transport for each client. Defaults to
                `SafeAsyncTransport` (or a plain transport when `unsafe_local_dev` is set).
        """
        self.config = config
        self._transport_factory = transport_factory or self._default_transport

    def _default_transport(self) -> httpx.AsyncBaseTransport:
        if self.config.unsafe_local_dev:
            return httpx.AsyncHTTPTransport()
        # Use SafeAsyncTransport to prevent SSRF and DNS Rebinding
        return SafeAsyncTransport()

    def oauth2_client(self, settings: OAuth2Settings, token: Mapping[str, Any]) -> AsyncOAuth2Client:
        """
        Creates a client that attaches `token` as a bearer credential and refreshes it
        against the provider's token endpoint when it has expired.

        Args:
            settings: The provider's OAuth2 settings.
            token: The exchanged token (access_token, optional refresh_token/expires_at).

        Returns:
            AsyncOAuth2Client: An httpx-compatible async client.
        """
        client = AsyncOAuth2Client(
            client_id=settings.client_id,
            client_secret=settings.client_secret.get_secret_value(),
            scope=" ".join(settings.scopes),
            redirect_uri=settings.redirect_url,
            token=dict(token),
            token_endpoint=settings.token_url,
            transport=self._transport_factory(),
            timeout=self.config.http_timeout,
        )
        if self.config.instrument_http:
            # Instrument the client for distributed tracing
            HTTPXClientInstrumentor().instrument_client(client)
        return client
