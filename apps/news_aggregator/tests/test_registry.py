from __future__ import annotations

from types import SimpleNamespace

from news_aggregator.clients.registry import PROVIDERS, ClientRegistry
from news_aggregator.config import ProviderSettings, ProvidersSettings


def test_provider_order_is_fixed() -> None:
    assert [spec.identifier for spec in PROVIDERS] == [
        "newsapi",
        "the-guardian",
        "nytimes",
        "bbc-news",
        "opennews",
    ]


def test_active_clients_skip_disabled_and_unconfigured() -> None:
    settings = ProvidersSettings(
        newsapi=ProviderSettings(api_key="news-key"),
        guardian=ProviderSettings(api_key="guardian-key", enabled=False),
        opennews=ProviderSettings(enabled=False),
    )

    clients = ClientRegistry(settings).active_clients(SimpleNamespace())

    # nytimes has no key; bbc-news borrows the newsapi key
    assert [client.identifier for client in clients] == ["newsapi", "bbc-news"]


def test_no_keys_means_no_clients() -> None:
    clients = ClientRegistry(ProvidersSettings()).active_clients(SimpleNamespace())

    assert clients == []


def test_provider_overrides_reach_client() -> None:
    settings = ProvidersSettings(
        guardian=ProviderSettings(
            api_key="g",
            base_url="https://proxy.example/guardian",
            page_size=10,
        ),
    )

    (client,) = ClientRegistry(settings).active_clients(SimpleNamespace())

    assert client.identifier == "the-guardian"
    assert client._base_url == "https://proxy.example/guardian/"
    assert client._page_size == 10
    assert client._api_key == "g"
