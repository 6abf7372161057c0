"""Static provider registry."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from news_aggregator.clients.base import SourceClient
from news_aggregator.clients.guardian import GuardianClient
from news_aggregator.clients.newsapi import BbcNewsClient, NewsApiClient, OpenNewsClient
from news_aggregator.clients.nytimes import NyTimesClient
from news_aggregator.config import ProvidersSettings
from news_aggregator.logging import get_logger


@dataclass(frozen=True, slots=True)
class ProviderSpec:
    settings_key: str
    client_cls: type[SourceClient]

    @property
    def identifier(self) -> str:
        return self.client_cls.identifier


PROVIDERS: tuple[ProviderSpec, ...] = (
    ProviderSpec("newsapi", NewsApiClient),
    ProviderSpec("guardian", GuardianClient),
    ProviderSpec("nytimes", NyTimesClient),
    ProviderSpec("bbc_news", BbcNewsClient),
    ProviderSpec("opennews", OpenNewsClient),
)


class ClientRegistry:
    def __init__(
        self,
        settings: ProvidersSettings,
        *,
        providers: tuple[ProviderSpec, ...] = PROVIDERS,
    ) -> None:
        self._settings = settings
        self._providers = providers
        self._log = get_logger(__name__)

    def active_clients(self, http: httpx.AsyncClient) -> list[SourceClient]:
        clients: list[SourceClient] = []
        for spec in self._providers:
            provider = getattr(self._settings, spec.settings_key)
            if not provider.enabled:
                self._log.debug("registry.provider_disabled", provider=spec.identifier)
                continue
            api_key = self._settings.api_key_for(spec.settings_key)
            if not api_key:
                self._log.debug("registry.provider_unconfigured", provider=spec.identifier)
                continue
            clients.append(
                spec.client_cls(
                    http,
                    api_key,
                    base_url=provider.base_url,
                    page_size=provider.page_size,
                )
            )
        return clients
