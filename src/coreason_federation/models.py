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
Data models for the coreason-federation package.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from coreason_federation.utils.booleans import ConvertibleBoolean


class Claims(BaseModel):
    """
    Canonical, provider-agnostic identity record produced by every provider.

    Optional fields use the empty string for "absent"; nothing is synthesized
    from other providers. This model is frozen (immutable).
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        json_schema_extra={
            "example": {
                "subject": "abc123",
                "issuer": "https://login.linkedin.com/",
                "email": "ann@example.com",
                "email_verified": True,
                "given_name": "Ann",
                "last_name": "Lee",
                "locale": "en-US",
            }
        },
    )

    subject: str = Field(..., min_length=1, description="Stable provider-scoped user ID.")
    issuer: str = Field(..., min_length=1, description="The provider's issuer URL.")
    email: str = Field(default="", description="Email as returned by the provider, if any.")
    email_verified: ConvertibleBoolean = Field(default=False, description="Whether the provider verified the email.")
    given_name: str = ""
    last_name: str = ""
    picture: str = ""
    locale: str = ""
    name: str = ""
    nickname: str = ""
    preferred_username: str = ""
    website: str = ""
    raw_claims: dict[str, Any] = Field(
        default_factory=dict,
        description="Every field of the upstream profile (known ones normalized), for mappers that need extra fields.",
    )

    def __repr__(self) -> str:
        # PII fields MUST be redacted in __repr__
        return (
            f"Claims(subject='<REDACTED>', "
            f"issuer={self.issuer!r}, "
            f"email='<REDACTED>', "
            f"email_verified={self.email_verified!r}, "
            f"locale={self.locale!r})"
        )

    def __str__(self) -> str:
        return self.__repr__()


class OAuth2Settings(BaseModel):
    """
    Authorization-flow settings for one provider.

    Attributes:
        client_id (str): The OAuth2 client ID.
        client_secret (SecretStr): The OAuth2 client secret.
        auth_url (str): The provider's authorization endpoint.
        token_url (str): The provider's token endpoint.
        scopes (list[str]): The scopes to request.
        redirect_url (str): The computed callback URL.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: SecretStr
    auth_url: str
    token_url: str
    scopes: list[str] = Field(default_factory=list)
    redirect_url: str


class LoginRequest(BaseModel):
    """
    The orchestrator's view of the login/registration request that started the flow.

    Attributes:
        id (str): The flow ID.
        refresh (bool): Whether the user must re-authenticate at the provider.
        return_to (str | None): Where to send the user afterwards.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    refresh: bool = False
    return_to: str | None = None
