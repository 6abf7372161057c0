from __future__ import annotations

import re

from news_aggregator.utils.slug import random_suffix, slugify, unique_slug


def test_slugify_basic() -> None:
    assert slugify("Hello, World!") == "hello-world"
    assert slugify("  Breaking   News -- Today ") == "breaking-news-today"


def test_slugify_transliterates_accents() -> None:
    assert slugify("Café über") == "cafe-uber"


def test_slugify_handles_at_sign_and_symbols() -> None:
    assert slugify("AT&T @ home") == "att-at-home"


def test_slugify_empty_values() -> None:
    assert slugify(None) == ""
    assert slugify("   ") == ""
    assert slugify("!!!") == ""


def test_random_suffix_is_alphanumeric() -> None:
    suffix = random_suffix()

    assert len(suffix) == 8
    assert suffix.isalnum()


def test_unique_slug_appends_suffix() -> None:
    slug = unique_slug("Breaking News")

    assert re.fullmatch(r"breaking-news-[A-Za-z0-9]{8}", slug)


def test_unique_slug_without_usable_title_is_suffix_only() -> None:
    slug = unique_slug("???")

    assert re.fullmatch(r"[A-Za-z0-9]{8}", slug)


def test_unique_slug_differs_between_calls() -> None:
    assert unique_slug("Same title") != unique_slug("Same title")
