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
Shared services handed to every provider.
"""

from typing import Any

from opentelemetry import trace

from coreason_federation.clients import HTTPClientFactory
from coreason_federation.config import FederationConfig
from coreason_federation.utils.logger import logger as default_logger


class Dependencies:
    """
    Explicit dependency bag borrowed by providers. Providers never own these services.

    Attributes:
        config (FederationConfig): Global settings (timeouts, retries, redirect base).
        http_client_factory (HTTPClientFactory): Builds token-bound upstream clients.
        tracer (trace.Tracer): The OpenTelemetry tracer for provider spans.
        logger: The loguru logger.
    """

    def __init__(
        self,
        config: FederationConfig,
        http_client_factory: HTTPClientFactory | None = None,
        tracer: trace.Tracer | None = None,
        logger: Any = None,
    ) -> None:
        self.config = config
        self.http_client_factory = http_client_factory or HTTPClientFactory(config)
        self.tracer = tracer or trace.get_tracer("coreason_federation")
        self.logger = logger or default_logger
