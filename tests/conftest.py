# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_federation

import socket
from collections.abc import Callable, Generator
from unittest.mock import MagicMock, patch

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import Tracer

from coreason_federation.clients import HTTPClientFactory
from coreason_federation.config import FederationConfig
from coreason_federation.dependencies import Dependencies
from tests.upstream import REDIRECT_BASE, UpstreamStub


@pytest.fixture(autouse=True)
def mock_dns_resolution() -> Generator[MagicMock, None, None]:
    """
    Globally patches socket.getaddrinfo to return a safe public IP by default,
    so no test ever resolves a real hostname.
    """
    safe_response = [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("8.8.8.8", 443))]

    with patch("socket.getaddrinfo", return_value=safe_response) as mock:
        yield mock


@pytest.fixture
def federation_config() -> FederationConfig:
    return FederationConfig(
        redirect_uri_base=REDIRECT_BASE,
        instrument_http=False,
        retry_attempts=3,
        retry_wait_initial=0.0,
        retry_wait_max=0.0,
        providers=[
            {
                "id": "linkedin",
                "provider": "linkedin",
                "client_id": "li-client",
                "client_secret": "li-secret",
                "scope": "openid profile email",
            },
            {
                "id": "google",
                "provider": "google",
                "client_id": "g-client",
                "client_secret": "g-secret",
                "scope": ["openid", "email", "profile"],
            },
            {
                "id": "discord",
                "provider": "discord",
                "client_id": "d-client",
                "client_secret": "d-secret",
                "scope": ["identify", "email"],
            },
        ],
    )


@pytest.fixture
def telemetry_setup() -> tuple[InMemorySpanExporter, Tracer]:
    """Sets up an OpenTelemetry tracer with an in-memory exporter."""
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    return exporter, provider.get_tracer("test_tracer")


@pytest.fixture
def make_deps(
    federation_config: FederationConfig, telemetry_setup: tuple[InMemorySpanExporter, Tracer]
) -> Callable[[UpstreamStub], Dependencies]:
    """Builds Dependencies whose upstream clients talk to the given stub."""
    _, tracer = telemetry_setup

    def _make(stub: UpstreamStub, config: FederationConfig | None = None) -> Dependencies:
        cfg = config or federation_config
        factory = HTTPClientFactory(cfg, transport_factory=stub.transport)
        return Dependencies(cfg, http_client_factory=factory, tracer=tracer)

    return _make
