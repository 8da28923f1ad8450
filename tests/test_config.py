# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_federation

import json
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from coreason_federation.config import FederationConfig, ProviderConfiguration


def test_defaults() -> None:
    config = FederationConfig()

    assert config.redirect_uri_base is None
    assert config.http_timeout == 10.0
    assert config.retry_attempts == 3
    assert config.retry_wait_initial == 0.1
    assert config.retry_wait_max == 1.0
    assert config.max_response_bytes == 1_000_000
    assert config.instrument_http is True
    assert config.providers == []


def test_env_loading() -> None:
    providers = [{"id": "li", "provider": "LinkedIn", "client_id": "c", "client_secret": "s", "scope": "openid email"}]
    env = {
        "COREASON_FEDERATION_REDIRECT_URI_BASE": "https://accounts.example.com",
        "COREASON_FEDERATION_RETRY_ATTEMPTS": "5",
        "COREASON_FEDERATION_HTTP_TIMEOUT": "2.5",
        "COREASON_FEDERATION_PROVIDERS": json.dumps(providers),
    }
    with patch.dict(os.environ, env):
        config = FederationConfig()

    assert config.redirect_uri_base == "https://accounts.example.com"
    assert config.retry_attempts == 5
    assert config.http_timeout == 2.5
    (provider,) = config.providers
    assert provider.provider == "linkedin"
    assert provider.scope == ["openid", "email"]
    assert provider.client_secret.get_secret_value() == "s"


def test_https_required_for_redirect_base() -> None:
    with pytest.raises(ValidationError, match="HTTPS is required"):
        FederationConfig(redirect_uri_base="http://accounts.example.com")


def test_http_redirect_base_allowed_for_local_dev() -> None:
    config = FederationConfig(redirect_uri_base="http://localhost:4433", unsafe_local_dev=True)

    assert config.redirect_uri_base == "http://localhost:4433"


def test_duplicate_provider_ids_rejected() -> None:
    entry = {"id": "dup", "provider": "google", "client_id": "c", "client_secret": "s"}

    with pytest.raises(ValidationError, match="Duplicate provider id 'dup'"):
        FederationConfig(providers=[entry, {**entry, "provider": "discord"}])


def test_wait_bounds_validated() -> None:
    with pytest.raises(ValidationError, match="retry_wait_max"):
        FederationConfig(retry_wait_initial=2.0, retry_wait_max=1.0)


@pytest.mark.parametrize("field", ["retry_attempts", "http_timeout", "max_response_bytes"])
def test_non_positive_values_rejected(field: str) -> None:
    with pytest.raises(ValidationError):
        FederationConfig(**{field: 0})


def test_provider_configuration_rejects_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        ProviderConfiguration(id="x", provider="google", client_id="c", client_secret="s", tenant="t")


def test_provider_configuration_requires_id() -> None:
    with pytest.raises(ValidationError):
        ProviderConfiguration(id="", provider="google", client_id="c", client_secret="s")


def test_provider_configuration_secret_not_in_repr() -> None:
    provider = ProviderConfiguration(id="x", provider="google", client_id="c", client_secret="super-secret")

    assert "super-secret" not in repr(provider)


@pytest.mark.parametrize(
    ("base", "expected"),
    [
        ("https://accounts.example.com", "https://accounts.example.com/self-service/methods/oidc/callback/li"),
        ("https://accounts.example.com/", "https://accounts.example.com/self-service/methods/oidc/callback/li"),
        ("https://example.com/auth/", "https://example.com/auth/self-service/methods/oidc/callback/li"),
    ],
)
def test_redirect_url(base: str, expected: str) -> None:
    provider = ProviderConfiguration(id="li", provider="linkedin", client_id="c", client_secret="s")

    assert provider.redirect_url(base) == expected
