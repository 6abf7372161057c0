"""The Guardian content API."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

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


class GuardianClient(SourceClient):
    identifier = "the-guardian"
    display_name = "The Guardian"
    default_base_url = "https://content.guardianapis.com/"
    default_page_size = 50

    def _build_request(self, params: Mapping[str, Any]) -> tuple[str, dict[str, Any], dict[str, str]]:
        query: dict[str, Any] = {
            "api-key": self._api_key,
            "show-fields": "thumbnail,trailText,body,byline",
            "order-by": "newest",
        }
        if self._page_size:
            query["page-size"] = self._page_size
        query.update(params)
        return self._base_url + "search", query, {}

    def _extract_items(self, payload: Mapping[str, Any]) -> Sequence[Any]:
        response = payload.get("response")
        if not isinstance(response, Mapping):
            raise FetchError(self.identifier, "missing 'response' envelope")
        status = response.get("status")
        if status != "ok":
            message = text_field(response.get("message"), default=f"status {status!r}")
            raise FetchError(self.identifier, message)
        return self._item_list(response, "results")

    def _normalize(self, item: Mapping[str, Any]) -> NormalizedArticle:
        return NormalizedArticle(
            title=text_field(item.get("webTitle")),
            description=text_field(nested(item, "fields", "trailText")),
            content=text_field(nested(item, "fields", "body")),
            url=text_field(item.get("webUrl")),
            image_url=optional_text(nested(item, "fields", "thumbnail")),
            published_at=parse_timestamp(item.get("webPublicationDate")),
            author_name=text_field(nested(item, "fields", "byline"), default=self.display_name),
            category_label=text_field(item.get("sectionName"), default=DEFAULT_CATEGORY),
            source_name=self.display_name,
        )
