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
LinkedIn ("Sign In with LinkedIn using OpenID Connect") provider.
"""

from collections.abc import Mapping

import httpx
from pydantic import BaseModel, ConfigDict

from coreason_federation.models import Claims
from coreason_federation.providers.base import Provider
from coreason_federation.utils.booleans import ConvertibleBoolean
from coreason_federation.utils.strings import OptionalString

PROFILE_URL = "https://api.linkedin.com/v2/userinfo"


class LinkedInLocale(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    language: OptionalString = ""
    country: OptionalString = ""


class LinkedInProfile(BaseModel):
    """
    The userinfo document returned by LinkedIn.

    `locale` is an object and may be missing entirely.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    sub: OptionalString = ""
    email: OptionalString = ""
    email_verified: ConvertibleBoolean = False
    given_name: OptionalString = ""
    family_name: OptionalString = ""
    name: OptionalString = ""
    picture: OptionalString = ""
    locale: LinkedInLocale | None = None


class LinkedInProvider(Provider):
    """
    Resolves claims from LinkedIn's OpenID Connect userinfo endpoint.
    """

    name = "linkedin"
    auth_url = "https://www.linkedin.com/oauth/v2/authorization"
    token_url = "https://www.linkedin.com/oauth/v2/accessToken"
    issuer = "https://login.linkedin.com/"
    profile_url = PROFILE_URL

    async def profile(self, client: httpx.AsyncClient) -> LinkedInProfile:
        """
        Fetches the member's userinfo document.

        Args:
            client: The token-authenticated client.

        Returns:
            LinkedInProfile: The decoded profile.
        """
        return await self.fetcher.fetch(client, self.profile_url, LinkedInProfile)

    def profile_locale(self, profile: LinkedInProfile) -> str:
        """Returns the profile's language, or "" when LinkedIn sent no locale."""
        if profile.locale is None:
            return ""
        return profile.locale.language

    def to_claims(self, profile: LinkedInProfile, query: Mapping[str, str]) -> Claims:
        return self._make_claims(
            subject=profile.sub,
            email=profile.email,
            email_verified=profile.email_verified,
            given_name=profile.given_name,
            last_name=profile.family_name,
            name=profile.name,
            picture=profile.picture,
            locale=self.profile_locale(profile),
            raw_claims=profile.model_dump(),
        )
