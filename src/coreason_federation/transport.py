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
Secure HTTP transport and size-bounded JSON fetching for upstream provider calls.
"""

import ipaddress
import json
import socket
from typing import Any

import anyio
import httpx
from loguru import logger

from coreason_federation.exceptions import MalformedResponseError, OversizedResponseError, SecurityError, UpstreamError

DEFAULT_MAX_BYTES = 1_000_000
ERROR_BODY_LOG_BYTES = 1024


class SafeAsyncTransport(httpx.AsyncHTTPTransport):
    """
    An HTTP transport that enforces DNS pinning to prevent SSRF/DNS Rebinding attacks.

    It resolves the hostname, picks the first address outside the blocked ranges
    (private, loopback, link-local, reserved, multicast) and connects to that
    address while preserving the original Host header and SNI for TLS verification.
    """

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        """
        Sends `request` to a vetted address of its host.

        IP-literal hosts are checked directly. Hostnames are resolved once in a
        worker thread and the connection is pinned to the first public address,
        so a second lookup by the connection pool cannot be rebound.

        Raises:
            SecurityError: If the host is, or only resolves to, a blocked address.
            httpx.ConnectError: If the hostname cannot be resolved. Resolver
                failures are network failures and are retried by the caller.
        """
        hostname = request.url.host

        try:
            ip_obj = ipaddress.ip_address(hostname)
        except ValueError:
            ip_obj = None

        if ip_obj is not None:
            self._validate_ip(ip_obj, hostname)
            return await super().handle_async_request(request)

        try:
            addr_infos = await anyio.to_thread.run_sync(socket.getaddrinfo, hostname, None, 0, socket.SOCK_STREAM)
        except socket.gaierror as e:
            logger.warning(f"DNS resolution failed for {hostname}: {e}")
            raise httpx.ConnectError(f"DNS resolution failed for {hostname}: {e}", request=request) from e

        target_ip: str | None = None
        for _, _, _, _, sockaddr in addr_infos:
            try:
                self._validate_ip(ipaddress.ip_address(sockaddr[0]), hostname)
            except (SecurityError, ValueError):
                continue
            target_ip = str(sockaddr[0])
            break

        if not target_ip:
            logger.error(f"Security violation: No valid public IP found for {hostname}")
            raise SecurityError(f"SSRF Protection: Blocked {hostname}, no public address")

        # Keep the original name for the Host header and TLS verification.
        request.extensions["sni_hostname"] = hostname
        if "Host" not in request.headers:
            request.headers["Host"] = request.url.netloc.decode("ascii")
        request.url = request.url.copy_with(host=target_ip)

        logger.debug(f"DNS Pinned: {hostname} -> {target_ip}")
        return await super().handle_async_request(request)

    def _validate_ip(self, ip_obj: Any, hostname: str) -> None:
        """Rejects addresses an upstream identity provider can never legitimately use."""
        if ip_obj.is_private or ip_obj.is_loopback or ip_obj.is_link_local or ip_obj.is_reserved or ip_obj.is_multicast:
            logger.warning(f"Security violation: Blocked access to {hostname} ({ip_obj})")
            raise SecurityError(f"SSRF Protection: Blocked {hostname} ({ip_obj})")


async def safe_json_fetch(
    client: httpx.AsyncClient,
    url: str,
    provider: str,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> Any:
    """
    Issues a GET request and decodes the JSON body, reading at most `max_bytes`.

    Args:
        client: The (authenticated) client to send the request with.
        url: The upstream URL.
        provider: The provider ID, attached to errors for observability.
        max_bytes: The largest body accepted.

    Returns:
        Any: The decoded JSON document.

    Raises:
        UpstreamError: If the upstream answered with a non-2xx status. The body is not decoded.
        OversizedResponseError: If the body exceeds `max_bytes`.
        MalformedResponseError: If the body is not valid JSON.
        httpx.TransportError: For network failures (retry decisions are left to the caller).
    """
    async with client.stream("GET", url, headers={"Accept": "application/json"}) as response:
        if not response.is_success:
            snippet = bytearray()
            async for chunk in response.aiter_bytes():
                snippet.extend(chunk)
                if len(snippet) >= ERROR_BODY_LOG_BYTES:
                    break
            logger.bind(provider=provider, status_code=response.status_code).error(
                f"Upstream provider returned status {response.status_code}: "
                f"{bytes(snippet[:ERROR_BODY_LOG_BYTES]).decode('utf-8', errors='replace')}"
            )
            raise UpstreamError(
                f"OpenID Connect provider returned a {response.status_code} status code but 2xx is expected.",
                provider=provider,
                status_code=response.status_code,
            )

        content_length = response.headers.get("Content-Length")
        if content_length:
            try:
                declared = int(content_length)
            except ValueError:
                declared = 0
            if declared > max_bytes:
                raise OversizedResponseError(f"Content-Length {declared} exceeds limit of {max_bytes} bytes")

        content = bytearray()
        async for chunk in response.aiter_bytes():
            content.extend(chunk)
            if len(content) > max_bytes:
                raise OversizedResponseError(f"Response size exceeds limit of {max_bytes} bytes")

    try:
        return json.loads(bytes(content))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedResponseError(f"Upstream provider returned a body that is not valid JSON: {e}") from e
