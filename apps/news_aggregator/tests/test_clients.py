from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from news_aggregator.clients.guardian import GuardianClient
from news_aggregator.clients.newsapi import BbcNewsClient, NewsApiClient, OpenNewsClient
from news_aggregator.clients.nytimes import NyTimesClient


def _json_handler(payload, *, status_code: int = 200, seen: list | None = None):  # noqa: ANN001
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload)

    return handler


async def _fetch(client_cls, handler, **kwargs):  # noqa: ANN001
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = client_cls(http, "key-123", **kwargs)
        return await client.fetch()


@pytest.mark.asyncio
async def test_newsapi_normalizes_articles_and_sends_key_header() -> None:
    seen: list[httpx.Request] = []
    payload = {
        "status": "ok",
        "articles": [
            {
                "source": {"name": "Reuters"},
                "author": None,
                "title": "  Markets rally  ",
                "description": "Stocks up",
                "url": "https://example.com/markets",
                "urlToImage": "",
                "publishedAt": "2024-05-01T10:00:00Z",
                "content": "Full text",
            }
        ],
    }

    result = await _fetch(NewsApiClient, _json_handler(payload, seen=seen))

    assert result.failed is False
    assert len(result.articles) == 1
    article = result.articles[0]
    assert article.title == "Markets rally"
    assert article.url == "https://example.com/markets"
    assert article.image_url is None
    assert article.author_name == "NewsAPI"
    assert article.category_label == "General"
    assert article.source_name == "Reuters"
    assert article.published_at == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    request = seen[0]
    assert request.url.path == "/v2/top-headlines"
    assert request.headers["X-Api-Key"] == "key-123"
    assert request.url.params["country"] == "us"
    assert request.url.params["language"] == "en"
    assert request.url.params["pageSize"] == "100"


@pytest.mark.asyncio
async def test_bbc_news_uses_everything_endpoint_and_own_source_name() -> None:
    seen: list[httpx.Request] = []
    payload = {
        "status": "ok",
        "articles": [
            {
                "source": {"id": "bbc-news", "name": "BBC"},
                "author": "BBC Reporter",
                "title": "Weather warning",
                "url": "https://bbc.example/weather",
                "publishedAt": "2024-05-01T08:30:00Z",
            }
        ],
    }

    result = await _fetch(BbcNewsClient, _json_handler(payload, seen=seen))

    article = result.articles[0]
    assert article.source_name == "BBC News"
    assert article.author_name == "BBC Reporter"
    assert article.description == ""
    request = seen[0]
    assert request.url.path == "/v2/everything"
    assert request.url.params["sources"] == "bbc-news"
    assert request.url.params["sortBy"] == "publishedAt"
    assert "country" not in request.url.params


@pytest.mark.asyncio
async def test_opennews_falls_back_to_display_name_author() -> None:
    payload = {"status": "ok", "articles": [{"title": "x", "url": "https://o.example/1"}]}

    result = await _fetch(OpenNewsClient, _json_handler(payload))

    assert result.articles[0].author_name == "OpenNews"
    assert result.articles[0].source_name == "OpenNews"
    assert result.articles[0].published_at is None


@pytest.mark.asyncio
async def test_newsapi_error_status_is_a_failed_fetch() -> None:
    payload = {"status": "error", "code": "apiKeyInvalid", "message": "Your API key is invalid."}

    result = await _fetch(NewsApiClient, _json_handler(payload))

    assert result.failed is True
    assert result.articles == ()
    assert "Your API key is invalid." in str(result.error)


@pytest.mark.asyncio
async def test_healthy_empty_response_is_not_a_failure() -> None:
    result = await _fetch(NewsApiClient, _json_handler({"status": "ok", "articles": []}))

    assert result.failed is False
    assert result.articles == ()


@pytest.mark.asyncio
async def test_http_error_status_is_reported_with_code() -> None:
    result = await _fetch(NyTimesClient, _json_handler({"fault": {"faultstring": "nope"}}, status_code=401))

    assert result.failed is True
    assert result.error.status_code == 401
    assert result.error.provider == "nytimes"


@pytest.mark.asyncio
async def test_transport_error_is_a_failed_fetch() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = await _fetch(GuardianClient, handler)

    assert result.failed is True
    assert "ConnectError" in str(result.error)


@pytest.mark.asyncio
async def test_non_json_body_is_a_failed_fetch() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    result = await _fetch(NewsApiClient, handler)

    assert result.failed is True
    assert "not JSON" in str(result.error)


@pytest.mark.asyncio
async def test_malformed_items_are_ignored() -> None:
    payload = {"status": "ok", "articles": ["junk", None, {"title": "kept", "url": "https://e.example/k"}]}

    result = await _fetch(NewsApiClient, _json_handler(payload))

    assert [article.title for article in result.articles] == ["kept"]


@pytest.mark.asyncio
async def test_articles_field_that_is_not_a_list_fails() -> None:
    result = await _fetch(NewsApiClient, _json_handler({"status": "ok", "articles": {"a": 1}}))

    assert result.failed is True


@pytest.mark.asyncio
async def test_guardian_reads_fields_and_section() -> None:
    seen: list[httpx.Request] = []
    payload = {
        "response": {
            "status": "ok",
            "results": [
                {
                    "webTitle": "Climate talks",
                    "webUrl": "https://guardian.example/climate",
                    "webPublicationDate": "2024-05-02T06:00:00Z",
                    "sectionName": "Environment",
                    "fields": {
                        "trailText": "Summary",
                        "body": "<p>Body</p>",
                        "thumbnail": "https://media.example/t.jpg",
                        "byline": "Jane Doe",
                    },
                },
                {
                    "webTitle": "No fields",
                    "webUrl": "https://guardian.example/plain",
                },
            ],
        }
    }

    result = await _fetch(GuardianClient, _json_handler(payload, seen=seen))

    first, second = result.articles
    assert first.description == "Summary"
    assert first.content == "<p>Body</p>"
    assert first.image_url == "https://media.example/t.jpg"
    assert first.author_name == "Jane Doe"
    assert first.category_label == "Environment"
    assert second.author_name == "The Guardian"
    assert second.category_label == "General"
    assert second.image_url is None

    request = seen[0]
    assert request.url.path == "/search"
    assert request.url.params["api-key"] == "key-123"
    assert request.url.params["page-size"] == "50"
    assert request.url.params["order-by"] == "newest"
    assert request.url.params["show-fields"] == "thumbnail,trailText,body,byline"


@pytest.mark.asyncio
async def test_guardian_error_status_fails() -> None:
    payload = {"response": {"status": "error", "message": "Invalid authentication credentials"}}

    result = await _fetch(GuardianClient, _json_handler(payload))

    assert result.failed is True
    assert "Invalid authentication credentials" in str(result.error)


@pytest.mark.asyncio
async def test_nytimes_normalizes_docs() -> None:
    seen: list[httpx.Request] = []
    payload = {
        "status": "OK",
        "response": {
            "docs": [
                {
                    "headline": {"main": "Election night"},
                    "abstract": "Results",
                    "lead_paragraph": "Votes are in.",
                    "web_url": "https://nyt.example/election",
                    "pub_date": "2024-05-03T01:00:00+0000",
                    "section_name": "U.S.",
                    "byline": {"original": "By John Roe"},
                    "multimedia": [{"url": "images/2024/05/03/election.jpg"}],
                },
                {
                    "headline": {"main": "Modern payload"},
                    "web_url": "https://nyt.example/modern",
                    "multimedia": {"default": {"url": "https://static.nyt.example/m.jpg"}},
                },
            ]
        },
    }

    result = await _fetch(NyTimesClient, _json_handler(payload, seen=seen))

    first, second = result.articles
    assert first.title == "Election night"
    assert first.description == "Results"
    assert first.content == "Votes are in."
    assert first.image_url == "https://www.nytimes.com/images/2024/05/03/election.jpg"
    assert first.author_name == "By John Roe"
    assert first.category_label == "U.S."
    assert first.published_at == datetime(2024, 5, 3, 1, 0, tzinfo=timezone.utc)
    assert second.image_url == "https://static.nyt.example/m.jpg"
    assert second.author_name == "New York Times"
    assert second.category_label == "General"

    request = seen[0]
    assert request.url.path == "/svc/search/v2/articlesearch.json"
    assert request.url.params["sort"] == "newest"
    assert request.url.params["api-key"] == "key-123"


@pytest.mark.asyncio
async def test_nytimes_missing_response_is_empty() -> None:
    result = await _fetch(NyTimesClient, _json_handler({"status": "OK"}))

    assert result.failed is False
    assert result.articles == ()


@pytest.mark.asyncio
async def test_base_url_and_page_size_overrides() -> None:
    seen: list[httpx.Request] = []

    await _fetch(
        NewsApiClient,
        _json_handler({"status": "ok", "articles": []}, seen=seen),
        base_url="https://proxy.example/newsapi",
        page_size=10,
    )

    assert str(seen[0].url).startswith("https://proxy.example/newsapi/top-headlines")
    assert seen[0].url.params["pageSize"] == "10"
