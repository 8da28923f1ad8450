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
Configuration for the coreason-federation package.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CALLBACK_PATH = "/self-service/methods/oidc/callback/{provider_id}"


class ProviderConfiguration(BaseModel):
    """
    Static configuration of one upstream identity provider.

    Attributes:
        id (str): Unique ID of this provider within the deployment (used in the callback URL).
        provider (str): The adapter to use (e.g. "linkedin", "google", "discord").
        client_id (str): The OAuth2 client ID.
        client_secret (SecretStr): The OAuth2 client secret.
        scope (list[str]): The scopes to request.
        auth_url (str | None): Overrides the adapter's authorization endpoint.
        token_url (str | None): Overrides the adapter's token endpoint.
        issuer_url (str | None): Overrides the adapter's issuer.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1)
    provider: str = Field(..., min_length=1)
    client_id: str
    client_secret: SecretStr
    scope: list[str] = Field(default_factory=list)
    auth_url: str | None = None
    token_url: str | None = None
    issuer_url: str | None = None

    @field_validator("provider")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("scope", mode="before")
    @classmethod
    def split_scope(cls, v: Any) -> Any:
        """Accepts a space-separated scope string as well as a list."""
        if v is None:
            return []
        if isinstance(v, str):
            return v.split()
        return v

    def redirect_url(self, base: str) -> str:
        """
        Computes the callback URL for this provider below the given public base URL.

        Args:
            base: The public base URL of the self-service endpoints.

        Returns:
            The absolute redirect URL.
        """
        return base.rstrip("/") + CALLBACK_PATH.format(provider_id=self.id)


class FederationConfig(BaseSettings):
    """
    Configuration settings for coreason-federation.

    Attributes:
        redirect_uri_base (str | None): Public base URL used to build callback URLs.
        http_timeout (float): Timeout in seconds for every upstream request.
        retry_attempts (int): Total attempts for a profile fetch.
        retry_wait_initial (float): First backoff delay in seconds.
        retry_wait_max (float): Upper bound for a single backoff delay.
        max_response_bytes (int): Largest profile body accepted.
        pii_salt (SecretStr): Salt for anonymizing subjects in logs/traces.
        unsafe_local_dev (bool): Allows plain HTTP and private addresses for local testing.
        instrument_http (bool): Instruments upstream clients with OpenTelemetry.
        providers (list[ProviderConfiguration]): The configured providers.
    """

    model_config = SettingsConfigDict(
        env_prefix="COREASON_FEDERATION_",
        case_sensitive=False,
    )

    unsafe_local_dev: bool = False
    redirect_uri_base: str | None = None
    http_timeout: float = Field(default=10.0, gt=0, description="Timeout in seconds for all upstream calls.")
    retry_attempts: int = Field(default=3, ge=1)
    retry_wait_initial: float = Field(default=0.1, ge=0)
    retry_wait_max: float = Field(default=1.0, ge=0)
    max_response_bytes: int = Field(default=1_000_000, gt=0)
    pii_salt: SecretStr = SecretStr("coreason-unsafe-default-salt")
    instrument_http: bool = True
    providers: list[ProviderConfiguration] = Field(default_factory=list)

    @field_validator("redirect_uri_base", mode="after")
    @classmethod
    def validate_https(cls, v: str | None, info: ValidationInfo) -> str | None:
        """
        Ensures that the redirect base uses HTTPS, unless strictly opted out for local dev.
        """
        if v and v.startswith("http://") and not info.data.get("unsafe_local_dev", False):
            raise ValueError("HTTPS is required for production. Set 'unsafe_local_dev=True' only for local testing.")
        return v

    @model_validator(mode="after")
    def validate_providers(self) -> "FederationConfig":
        """
        Rejects duplicate provider IDs, they must be unique to build distinct callback URLs.
        """
        seen: set[str] = set()
        for provider in self.providers:
            if provider.id in seen:
                raise ValueError(f"Duplicate provider id '{provider.id}'")
            seen.add(provider.id)
        if self.retry_wait_max < self.retry_wait_initial:
            raise ValueError("retry_wait_max must not be smaller than retry_wait_initial")
        return self
