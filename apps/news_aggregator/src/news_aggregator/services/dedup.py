"""URL based duplicate detection."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from news_aggregator.repositories.articles import ArticleRepository


class Deduplicator:
    """Pre-write existence check on ``Article.url``.

    Best effort only: two writers can both pass the check before either
    commits, so the unique constraint on ``articles.url`` stays the authority
    and the writer turns its violation into ``DuplicateArticleError``.
    """

    def __init__(self, repository: ArticleRepository | None = None) -> None:
        self._repo = repository or ArticleRepository()

    async def exists(self, session: AsyncSession, url: str) -> bool:
        if not url:
            return False
        return await self._repo.exists_by_url(session, url)
