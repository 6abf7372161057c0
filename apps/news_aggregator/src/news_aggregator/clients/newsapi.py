"""newsapi.org backed providers: NewsAPI, BBC News and OpenNews."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, ClassVar

from news_aggregator.clients.base import (
    DEFAULT_CATEGORY,
    NormalizedArticle,
    SourceClient,
    nested,
    optional_text,
    text_field,
)
from news_aggregator.errors import FetchError
from news_aggregator.utils.dates import parse_timestamp


class NewsApiOrgClient(SourceClient):
    default_base_url = "https://newsapi.org/v2/"
    default_page_size = 100
    endpoint: ClassVar[str] = "top-headlines"
    default_params: ClassVar[dict[str, Any]] = {}
    # newsapi.org reports the upstream outlet per article; these providers keep it
    use_reported_source: ClassVar[bool] = True

    def _build_request(self, params: Mapping[str, Any]) -> tuple[str, dict[str, Any], dict[str, str]]:
        query: dict[str, Any] = {"language": "en", **self.default_params}
        if self._page_size:
            query["pageSize"] = self._page_size
        query.update(params)
        return self._base_url + self.endpoint, query, {"X-Api-Key": self._api_key}

    def _extract_items(self, payload: Mapping[str, Any]) -> Sequence[Any]:
        status = payload.get("status")
        if status != "ok":
            message = text_field(payload.get("message"), default=f"status {status!r}")
            raise FetchError(self.identifier, message)
        return self._item_list(payload, "articles")

    def _normalize(self, item: Mapping[str, Any]) -> NormalizedArticle:
        source_name = self.display_name
        if self.use_reported_source:
            source_name = text_field(nested(item, "source", "name"), default=self.display_name)
        return NormalizedArticle(
            title=text_field(item.get("title")),
            description=text_field(item.get("description")),
            content=text_field(item.get("content")),
            url=text_field(item.get("url")),
            image_url=optional_text(item.get("urlToImage")),
            published_at=parse_timestamp(item.get("publishedAt")),
            author_name=text_field(item.get("author"), default=self.display_name),
            category_label=DEFAULT_CATEGORY,
            source_name=source_name,
        )


class NewsApiClient(NewsApiOrgClient):
    identifier = "newsapi"
    display_name = "NewsAPI"
    default_params = {"country": "us"}


class BbcNewsClient(NewsApiOrgClient):
    identifier = "bbc-news"
    display_name = "BBC News"
    endpoint = "everything"
    default_params = {"sources": "bbc-news", "sortBy": "publishedAt"}
    use_reported_source = False


class OpenNewsClient(NewsApiOrgClient):
    identifier = "opennews"
    display_name = "OpenNews"
    default_params = {"country": "us"}
