from __future__ import annotations

import pytest
from sqlalchemy.dialects import postgresql

from news_aggregator.repositories.articles import ArticleRepository
from news_aggregator.repositories.authors import AuthorRepository
from news_aggregator.repositories.categories import CategoryRepository
from news_aggregator.repositories.sources import SourceRepository
from news_aggregator.repositories.user_preferences import UserPreferenceRepository


class _Result:
    def __init__(self, value: object = None) -> None:
        self._value = value

    def scalar_one_or_none(self):
        return self._value

    def scalars(self):
        return self

    def all(self) -> list:
        return [] if self._value is None else [self._value]


class _RecordingSession:
    def __init__(self, value: object = None) -> None:
        self.value = value
        self.statements: list = []

    async def execute(self, stmt):  # noqa: ANN001
        self.statements.append(stmt)
        return _Result(self.value)

    def sql(self, index: int = 0) -> str:
        return str(self.statements[index].compile(dialect=postgresql.dialect()))


@pytest.mark.asyncio
async def test_source_lookup_by_api_identifier() -> None:
    session = _RecordingSession()

    assert await SourceRepository().get_by_api_identifier(session, "nytimes") is None
    assert "WHERE sources.api_identifier = " in session.sql()


@pytest.mark.asyncio
async def test_active_sources_and_categories_filter_on_flag() -> None:
    session = _RecordingSession()

    await SourceRepository().list_active(session)
    await CategoryRepository().list_active(session)

    assert "sources.is_active IS true" in session.sql(0)
    assert "categories.is_active IS true" in session.sql(1)


@pytest.mark.asyncio
async def test_category_lookup_ignores_empty_slug() -> None:
    session = _RecordingSession()

    assert await CategoryRepository().get_by_slug(session, "") is None
    assert session.statements == []

    await CategoryRepository().get_by_slug(session, "technology")

    assert "WHERE categories.slug = " in session.sql()


@pytest.mark.asyncio
async def test_author_lookup_maps_missing_email_to_empty_string() -> None:
    session = _RecordingSession()

    await AuthorRepository().get_by_name_and_email(session, name="Jane Doe")

    compiled = session.statements[0].compile(dialect=postgresql.dialect())
    assert "authors.email = " in str(compiled)
    assert "" in compiled.params.values()
    assert "Jane Doe" in compiled.params.values()


@pytest.mark.asyncio
async def test_user_preference_lookup() -> None:
    session = _RecordingSession()

    assert await UserPreferenceRepository().get_by_user_id(session, 5) is None
    assert "WHERE user_preferences.user_id = " in session.sql()


@pytest.mark.asyncio
async def test_article_lookup_by_id_and_url() -> None:
    session = _RecordingSession(value=17)

    assert await ArticleRepository().exists_by_url(session, "https://e.example/1") is True
    await ArticleRepository().get_by_id(session, 17)

    assert "WHERE articles.url = " in session.sql(0)
    assert "WHERE articles.id = " in session.sql(1)
