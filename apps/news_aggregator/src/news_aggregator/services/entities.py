"""Author and category resolution."""

from __future__ import annotations

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from news_aggregator.db.models import Author, Category
from news_aggregator.repositories.authors import AuthorRepository
from news_aggregator.repositories.categories import CategoryRepository
from news_aggregator.utils.slug import slugify

AUTHOR_LOCK_STRIPES = 64


class EntityResolver:
    def __init__(
        self,
        *,
        author_repo: AuthorRepository | None = None,
        category_repo: CategoryRepository | None = None,
    ) -> None:
        self._authors = author_repo or AuthorRepository()
        self._categories = category_repo or CategoryRepository()
        self._author_locks = [asyncio.Lock() for _ in range(AUTHOR_LOCK_STRIPES)]

    async def resolve_author(
        self,
        session: AsyncSession,
        name: str,
        email: str | None = None,
    ) -> Author | None:
        name = (name or "").strip()
        if not name:
            return None
        email = (email or "").strip() or None
        # same (name, email) never runs find-or-create twice at once in this
        # process; across processes the unique constraint decides
        lock = self._author_locks[hash((name, email or "")) % AUTHOR_LOCK_STRIPES]
        async with lock:
            return await self._authors.get_or_create(session, name=name, email=email)

    async def resolve_category(self, session: AsyncSession, label: str | None) -> Category | None:
        slug = slugify(label)
        if not slug:
            return None
        return await self._categories.get_by_slug(session, slug)
