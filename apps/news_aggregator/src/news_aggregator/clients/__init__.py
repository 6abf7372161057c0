"""News provider clients."""

from news_aggregator.clients.base import FetchResult, NormalizedArticle, SourceClient
from news_aggregator.clients.registry import PROVIDERS, ClientRegistry, ProviderSpec

__all__ = [
    "ClientRegistry",
    "FetchResult",
    "NormalizedArticle",
    "PROVIDERS",
    "ProviderSpec",
    "SourceClient",
]
