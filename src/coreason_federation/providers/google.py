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
Google provider.
"""

from collections.abc import Mapping

import httpx
from pydantic import BaseModel, ConfigDict

from coreason_federation.models import Claims, LoginRequest
from coreason_federation.providers.base import Provider
from coreason_federation.utils.booleans import ConvertibleBoolean
from coreason_federation.utils.strings import OptionalString

OFFLINE_ACCESS = "offline_access"


class GoogleProfile(BaseModel):
    """
    Google's OpenID Connect userinfo document.

    `email_verified` has been observed both as a JSON boolean and as the
    strings "true"/"false"; `hd` is only present for Workspace accounts.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    sub: OptionalString = ""
    email: OptionalString = ""
    email_verified: ConvertibleBoolean = False
    name: OptionalString = ""
    given_name: OptionalString = ""
    family_name: OptionalString = ""
    picture: OptionalString = ""
    locale: OptionalString = ""
    hd: OptionalString = ""


class GoogleProvider(Provider):
    name = "google"
    auth_url = "https://accounts.google.com/o/oauth2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    issuer = "https://accounts.google.com"
    profile_url = "https://openidconnect.googleapis.com/v1/userinfo"

    def _wants_offline_access(self) -> bool:
        return OFFLINE_ACCESS in self._config.scope

    def scopes(self) -> list[str]:
        # Google has no offline_access scope, it is expressed through access_type instead.
        return [s for s in self._config.scope if s != OFFLINE_ACCESS]

    def auth_code_url_options(self, request: LoginRequest | None = None) -> dict[str, str]:
        if self._wants_offline_access():
            return {"access_type": "offline", "prompt": "consent"}
        if request is not None and request.refresh:
            return {"prompt": "login"}
        return {}

    async def profile(self, client: httpx.AsyncClient) -> GoogleProfile:
        return await self.fetcher.fetch(client, self.profile_url, GoogleProfile)

    def to_claims(self, profile: GoogleProfile, query: Mapping[str, str]) -> Claims:
        return self._make_claims(
            subject=profile.sub,
            email=profile.email,
            email_verified=profile.email_verified,
            given_name=profile.given_name,
            last_name=profile.family_name,
            name=profile.name,
            picture=profile.picture,
            locale=profile.locale,
            raw_claims=profile.model_dump(),
        )
