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
ResilientFetcher component for reading provider profile endpoints.
"""

from typing import Any, TypeVar

import anyio
import httpx
from authlib.common.errors import AuthlibBaseError
from opentelemetry import trace
from pydantic import BaseModel, ValidationError

from coreason_federation.exceptions import InvalidTokenError, MalformedResponseError, UpstreamError
from coreason_federation.transport import DEFAULT_MAX_BYTES, safe_json_fetch

ShapeT = TypeVar("ShapeT", bound=BaseModel)


class ResilientFetcher:
    """
    GETs a JSON document with bounded retry, tracing and error classification.

    Profile and introspection endpoints are read-only, so retrying them is safe.
    Only transient failures are retried: network errors, 429 and 5xx answers.
    Malformed bodies, other 4xx answers and token errors fail immediately.
    Cancellation is never caught and stops pending retries.

    Attributes:
        provider_id (str): The configured provider ID, used in logs, spans and errors.
        span_name (str): The span name for `fetch`.
        attempts (int): Total attempts per fetch.
    """

    def __init__(
        self,
        provider_id: str,
        span_name: str,
        tracer: trace.Tracer,
        logger: Any,
        attempts: int = 3,
        wait_initial: float = 0.1,
        wait_max: float = 1.0,
        max_bytes: int = DEFAULT_MAX_BYTES,
    ) -> None:
        self.provider_id = provider_id
        self.span_name = span_name
        self.tracer = tracer
        self.logger = logger.bind(provider=provider_id)
        self.attempts = attempts
        self.wait_initial = wait_initial
        self.wait_max = wait_max
        self.max_bytes = max_bytes

    def _backoff(self, attempt: int) -> float:
        return float(min(self.wait_initial * (2**attempt), self.wait_max))

    async def _fetch_with_retry(self, client: httpx.AsyncClient, url: str, span: trace.Span) -> Any:
        for attempt in range(self.attempts):
            try:
                return await safe_json_fetch(client, url, provider=self.provider_id, max_bytes=self.max_bytes)
            except UpstreamError as e:
                span.set_attribute("http.status_code", e.status_code or 0)
                if not e.transient or attempt == self.attempts - 1:
                    raise
                reason = str(e)
            except httpx.TransportError as e:
                if attempt == self.attempts - 1:
                    raise UpstreamError(
                        f"Unable to reach OpenID Connect provider after {self.attempts} attempts: {e}",
                        provider=self.provider_id,
                    ) from e
                reason = f"{type(e).__name__}: {e}"
            except AuthlibBaseError as e:
                raise InvalidTokenError(f"Unable to authenticate the upstream request: {e}") from e

            sleep_time = self._backoff(attempt)
            span.add_event("retry", {"attempt": attempt + 1, "reason": reason, "backoff": sleep_time})
            self.logger.warning(f"Upstream fetch attempt {attempt + 1}/{self.attempts} failed, retrying: {reason}")
            await anyio.sleep(sleep_time)

        raise UpstreamError(f"Failed to fetch {url}", provider=self.provider_id)  # pragma: no cover

    async def fetch(self, client: httpx.AsyncClient, url: str, shape: type[ShapeT]) -> ShapeT:
        """
        Fetches `url` and decodes the JSON body into `shape`.

        Emits an OpenTelemetry span named after the owning provider; the span
        records the terminal error, if any, on every exit path.

        Args:
            client: The token-authenticated client.
            url: The upstream endpoint.
            shape: The pydantic model describing the provider's response.

        Returns:
            The decoded response.

        Raises:
            UpstreamError: Non-2xx answer or network failure after the retry budget.
            MalformedResponseError: The body is not JSON or does not fit `shape`.
            InvalidTokenError: The client could not attach a usable token.
        """
        with self.tracer.start_as_current_span(self.span_name) as span:
            span.set_attribute("federation.provider", self.provider_id)
            span.set_attribute("http.url", url)

            data = await self._fetch_with_retry(client, url, span)

            try:
                result = shape.model_validate(data)
            except ValidationError as e:
                raise MalformedResponseError(
                    f"Upstream response does not match {shape.__name__}: {e.error_count()} validation error(s)"
                ) from e

            return result
