"""Provider client contract and shared normalization helpers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar

import httpx

from news_aggregator.errors import FetchError
from news_aggregator.logging import get_logger

DEFAULT_CATEGORY = "General"


@dataclass(frozen=True, slots=True)
class NormalizedArticle:
    title: str
    description: str
    content: str
    url: str
    image_url: str | None
    published_at: datetime | None
    author_name: str
    category_label: str
    source_name: str
    author_email: str | None = None


@dataclass(frozen=True, slots=True)
class FetchResult:
    identifier: str
    articles: tuple[NormalizedArticle, ...] = field(default_factory=tuple)
    error: FetchError | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class SourceClient(ABC):
    """One external news API.

    ``fetch`` never raises for provider-side problems: transport errors,
    non-success statuses and malformed envelopes come back as a
    ``FetchResult`` carrying a ``FetchError``. A healthy provider with no
    articles returns an empty result with ``error=None``.
    """

    identifier: ClassVar[str]
    display_name: ClassVar[str]
    default_base_url: ClassVar[str]
    default_page_size: ClassVar[int | None] = None

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str,
        *,
        base_url: str | None = None,
        page_size: int | None = None,
    ) -> None:
        self._http = http
        self._api_key = api_key
        self._base_url = (base_url or self.default_base_url).rstrip("/") + "/"
        self._page_size = page_size or self.default_page_size
        self._log = get_logger(__name__).bind(provider=self.identifier)

    async def fetch(self, params: Mapping[str, Any] | None = None) -> FetchResult:
        try:
            payload = await self._get_json(params or {})
            items = self._extract_items(payload)
        except FetchError as exc:
            self._log.warning(
                "provider.fetch_failed",
                error=str(exc),
                status=exc.status_code,
            )
            return FetchResult(identifier=self.identifier, error=exc)

        articles = tuple(
            self._normalize(item) for item in items if isinstance(item, Mapping)
        )
        self._log.info("provider.fetched", articles=len(articles))
        return FetchResult(identifier=self.identifier, articles=articles)

    @abstractmethod
    def _build_request(self, params: Mapping[str, Any]) -> tuple[str, dict[str, Any], dict[str, str]]:
        """Return (url, query params, headers) for one fetch."""

    @abstractmethod
    def _extract_items(self, payload: Mapping[str, Any]) -> Sequence[Any]:
        """Unwrap the provider envelope or raise ``FetchError``."""

    @abstractmethod
    def _normalize(self, item: Mapping[str, Any]) -> NormalizedArticle:
        """Map one raw provider item to the canonical shape."""

    async def _get_json(self, params: Mapping[str, Any]) -> Mapping[str, Any]:
        url, query, headers = self._build_request(params)
        try:
            response = await self._http.get(url, params=query, headers=headers)
        except httpx.HTTPError as exc:
            raise FetchError(self.identifier, f"{type(exc).__name__}: {exc}") from exc

        if response.status_code >= 400:
            raise FetchError(
                self.identifier,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(
                self.identifier,
                "response body is not JSON",
                status_code=response.status_code,
            ) from exc
        if not isinstance(payload, Mapping):
            raise FetchError(
                self.identifier,
                "response body is not a JSON object",
                status_code=response.status_code,
            )
        return payload

    def _item_list(self, container: Mapping[str, Any], key: str) -> Sequence[Any]:
        items = container.get(key)
        if items is None:
            return []
        if not isinstance(items, list):
            raise FetchError(self.identifier, f"'{key}' is not a list")
        return items


def text_field(value: object, default: str = "") -> str:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or default
    return default


def optional_text(value: object) -> str | None:
    text = text_field(value)
    return text or None


def nested(mapping: object, *keys: str) -> object:
    current = mapping
    for key in keys:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current
