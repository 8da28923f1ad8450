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
ProviderRegistry component for looking up configured providers by ID.
"""

from coreason_federation.config import FederationConfig, ProviderConfiguration
from coreason_federation.dependencies import Dependencies
from coreason_federation.exceptions import ConfigurationError, ProviderNotFoundError
from coreason_federation.providers import DiscordProvider, GoogleProvider, LinkedInProvider, Provider
from coreason_federation.utils.logger import logger

SUPPORTED_PROVIDERS: dict[str, type[Provider]] = {
    cls.name: cls for cls in (LinkedInProvider, GoogleProvider, DiscordProvider)
}


class ProviderRegistry:
    """
    Builds every configured provider once at startup and hands them out by ID.

    Attributes:
        config (FederationConfig): The configuration the providers were built from.
        deps (Dependencies): The services shared by all providers.
    """

    def __init__(
        self,
        config: FederationConfig,
        deps: Dependencies | None = None,
        adapters: dict[str, type[Provider]] | None = None,
    ) -> None:
        """
        Initialize the ProviderRegistry.

        Args:
            config: The configuration object listing the providers.
            deps: Shared services. Built from `config` if not provided.
            adapters: Adapter classes by key. Defaults to `SUPPORTED_PROVIDERS`.

        Raises:
            ConfigurationError: If a provider names an unknown adapter.
        """
        self.config = config
        self.deps = deps or Dependencies(config)
        self._adapters = dict(adapters if adapters is not None else SUPPORTED_PROVIDERS)
        self._providers: dict[str, Provider] = {}
        for provider_config in config.providers:
            self._providers[provider_config.id] = self._build(provider_config)

    def _build(self, provider_config: ProviderConfiguration) -> Provider:
        adapter = self._adapters.get(provider_config.provider)
        if adapter is None:
            raise ConfigurationError(
                f"Provider '{provider_config.id}' uses unsupported adapter '{provider_config.provider}'. "
                f"Supported: {', '.join(sorted(self._adapters))}"
            )
        logger.debug(f"Registered provider {provider_config.id} ({provider_config.provider})")
        return adapter(provider_config, self.deps)

    def register(self, key: str, adapter: type[Provider]) -> None:
        """
        Makes an additional adapter class available to `add`.

        Args:
            key: The value of `ProviderConfiguration.provider` selecting this adapter.
            adapter: The Provider subclass.
        """
        self._adapters[key.strip().lower()] = adapter

    def add(self, provider_config: ProviderConfiguration) -> Provider:
        """
        Builds and registers a provider that was not part of the initial configuration.

        Raises:
            ConfigurationError: If the ID is taken or the adapter is unknown.
        """
        if provider_config.id in self._providers:
            raise ConfigurationError(f"Duplicate provider id '{provider_config.id}'")
        provider = self._build(provider_config)
        self._providers[provider_config.id] = provider
        return provider

    def provider(self, provider_id: str) -> Provider:
        """
        Returns the provider configured under `provider_id`.

        Raises:
            ProviderNotFoundError: If no such provider is configured.
        """
        try:
            return self._providers[provider_id]
        except KeyError:
            raise ProviderNotFoundError(f"No OpenID Connect provider configured with id '{provider_id}'") from None

    def ids(self) -> list[str]:
        return list(self._providers)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._providers

    def __len__(self) -> int:
        return len(self._providers)
