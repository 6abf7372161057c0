"""New York Times article search API."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from news_aggregator.clients.base import (
    DEFAULT_CATEGORY,
    NormalizedArticle,
    SourceClient,
    nested,
    text_field,
)
from news_aggregator.errors import FetchError
from news_aggregator.utils.dates import parse_timestamp

NYT_WEB_ROOT = "https://www.nytimes.com/"


class NyTimesClient(SourceClient):
    identifier = "nytimes"
    display_name = "New York Times"
    default_base_url = "https://api.nytimes.com/svc/search/v2/"

    def _build_request(self, params: Mapping[str, Any]) -> tuple[str, dict[str, Any], dict[str, str]]:
        query: dict[str, Any] = {"api-key": self._api_key, "sort": "newest"}
        query.update(params)
        return self._base_url + "articlesearch.json", query, {}

    def _extract_items(self, payload: Mapping[str, Any]) -> Sequence[Any]:
        status = payload.get("status")
        if status != "OK":
            message = text_field(
                nested(payload, "fault", "faultstring"),
                default=f"status {status!r}",
            )
            raise FetchError(self.identifier, message)
        response = payload.get("response")
        if response is None:
            return []
        if not isinstance(response, Mapping):
            raise FetchError(self.identifier, "'response' is not an object")
        return self._item_list(response, "docs")

    def _normalize(self, item: Mapping[str, Any]) -> NormalizedArticle:
        return NormalizedArticle(
            title=text_field(nested(item, "headline", "main")),
            description=text_field(item.get("abstract")),
            content=text_field(item.get("lead_paragraph")),
            url=text_field(item.get("web_url")),
            image_url=self._image_url(item.get("multimedia")),
            published_at=parse_timestamp(item.get("pub_date")),
            author_name=text_field(nested(item, "byline", "original"), default=self.display_name),
            category_label=text_field(item.get("section_name"), default=DEFAULT_CATEGORY),
            source_name=self.display_name,
        )

    @staticmethod
    def _image_url(multimedia: object) -> str | None:
        # older payloads carry a list of relative paths, newer ones a
        # {"default": {"url": ...}} object with absolute urls
        if isinstance(multimedia, list):
            first = multimedia[0] if multimedia else None
            path = text_field(nested(first, "url"))
        else:
            path = text_field(nested(multimedia, "default", "url"))
        if not path:
            return None
        if path.startswith(("http://", "https://")):
            return path
        return NYT_WEB_ROOT + path.lstrip("/")
