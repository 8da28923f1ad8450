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
Federated login against third-party OAuth2/OIDC providers, normalized into one canonical Claims record.
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .config import FederationConfig, ProviderConfiguration
from .dependencies import Dependencies
from .exceptions import CoreasonFederationError, InternalServerError
from .models import Claims, LoginRequest, OAuth2Settings
from .providers import DiscordProvider, GoogleProvider, LinkedInProvider, Provider
from .registry import ProviderRegistry

__all__ = [
    "Claims",
    "CoreasonFederationError",
    "Dependencies",
    "DiscordProvider",
    "FederationConfig",
    "GoogleProvider",
    "InternalServerError",
    "LinkedInProvider",
    "LoginRequest",
    "OAuth2Settings",
    "Provider",
    "ProviderConfiguration",
    "ProviderRegistry",
]
