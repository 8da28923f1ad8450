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
Discord provider.
"""

from collections.abc import Mapping

import httpx
from pydantic import BaseModel, ConfigDict

from coreason_federation.models import Claims, LoginRequest
from coreason_federation.providers.base import Provider
from coreason_federation.utils.booleans import ConvertibleBoolean
from coreason_federation.utils.strings import OptionalString

AVATAR_URL = "https://cdn.discordapp.com/avatars/{user_id}/{avatar}.png"


class DiscordUser(BaseModel):
    """
    The `/users/@me` object. `avatar` is a hash (or null), not a URL.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    id: OptionalString = ""
    username: OptionalString = ""
    global_name: OptionalString = ""
    email: OptionalString = ""
    verified: ConvertibleBoolean = False
    avatar: OptionalString = ""
    locale: OptionalString = ""


class DiscordProvider(Provider):
    name = "discord"
    auth_url = "https://discord.com/oauth2/authorize"
    token_url = "https://discord.com/api/oauth2/token"
    issuer = "https://discord.com/api/v10/oauth2/"
    profile_url = "https://discord.com/api/users/@me"

    def auth_code_url_options(self, request: LoginRequest | None = None) -> dict[str, str]:
        if request is not None and request.refresh:
            return {"prompt": "consent"}
        return {}

    async def profile(self, client: httpx.AsyncClient) -> DiscordUser:
        return await self.fetcher.fetch(client, self.profile_url, DiscordUser)

    def avatar_url(self, user: DiscordUser) -> str:
        if not user.avatar or not user.id:
            return ""
        return AVATAR_URL.format(user_id=user.id, avatar=user.avatar)

    def to_claims(self, profile: DiscordUser, query: Mapping[str, str]) -> Claims:
        return self._make_claims(
            subject=profile.id,
            email=profile.email,
            email_verified=profile.verified,
            name=profile.global_name,
            nickname=profile.username,
            preferred_username=profile.username,
            picture=self.avatar_url(profile),
            locale=profile.locale,
            raw_claims=profile.model_dump(),
        )
