"""Atomic article persistence."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import NoReturn

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from news_aggregator.clients.base import NormalizedArticle
from news_aggregator.db.models import (
    ARTICLE_SLUG_CONSTRAINT,
    ARTICLE_URL_CONSTRAINT,
    Article,
    Author,
    Category,
)
from news_aggregator.errors import DuplicateArticleError, PersistenceError, SlugCollisionError
from news_aggregator.logging import get_logger
from news_aggregator.repositories.articles import ArticleRepository
from news_aggregator.utils.slug import unique_slug

# fallbacks for drivers that do not expose the constraint name (sqlite)
_CONSTRAINT_MARKERS = {
    ARTICLE_URL_CONSTRAINT: ("articles.url",),
    ARTICLE_SLUG_CONSTRAINT: ("articles.slug",),
}


def violated_constraint(exc: IntegrityError) -> str | None:
    orig = exc.orig
    candidates = (
        getattr(getattr(orig, "diag", None), "constraint_name", None),
        getattr(orig, "constraint_name", None),
        getattr(getattr(orig, "__cause__", None), "constraint_name", None),
    )
    for name in candidates:
        if name:
            return str(name)
    message = str(orig)
    for name, markers in _CONSTRAINT_MARKERS.items():
        if name in message or any(marker in message for marker in markers):
            return name
    return None


class ArticleWriter:
    def __init__(
        self,
        *,
        repository: ArticleRepository | None = None,
        max_slug_attempts: int = 3,
    ) -> None:
        self._repo = repository or ArticleRepository()
        self._max_slug_attempts = max_slug_attempts
        self._log = get_logger(__name__)

    async def write(
        self,
        session: AsyncSession,
        article: NormalizedArticle,
        *,
        source_id: int,
        author: Author | None = None,
        category: Category | None = None,
    ) -> Article:
        """Insert the article and its category link inside the caller's transaction.

        Each attempt runs in a savepoint so a slug clash only rolls back that
        attempt. Raises ``DuplicateArticleError`` when the URL is already
        stored and ``PersistenceError`` for any other constraint failure.
        """
        published_at = article.published_at or datetime.now(timezone.utc)
        for attempt in range(1, self._max_slug_attempts + 1):
            row = Article(
                title=article.title,
                slug=unique_slug(article.title),
                description=article.description,
                content=article.content,
                # empty url must trip NOT NULL rather than be stored
                url=article.url or None,
                image_url=article.image_url,
                source_id=source_id,
                author_id=author.id if author is not None else None,
                published_at=published_at,
            )
            try:
                await self._insert(session, row, category)
            except SlugCollisionError:
                self._log.info(
                    "writer.slug_collision",
                    slug=row.slug,
                    attempt=attempt,
                )
                continue
            except IntegrityError as exc:
                await self._raise_for_integrity_error(session, article, exc)
            return row
        raise PersistenceError(
            f"no unique slug for {article.url!r} after {self._max_slug_attempts} attempts"
        )

    async def _insert(self, session: AsyncSession, row: Article, category: Category | None) -> None:
        try:
            async with session.begin_nested():
                await self._repo.create(session, row)
                if category is not None:
                    await self._repo.attach_category(
                        session,
                        article_id=row.id,
                        category_id=category.id,
                    )
        except IntegrityError as exc:
            if violated_constraint(exc) == ARTICLE_SLUG_CONSTRAINT:
                raise SlugCollisionError(str(exc.orig)) from exc
            raise

    async def _raise_for_integrity_error(
        self,
        session: AsyncSession,
        article: NormalizedArticle,
        exc: IntegrityError,
    ) -> NoReturn:
        constraint = violated_constraint(exc)
        if constraint == ARTICLE_URL_CONSTRAINT:
            raise DuplicateArticleError(article.url) from exc
        if constraint is None and article.url and await self._repo.exists_by_url(session, article.url):
            raise DuplicateArticleError(article.url) from exc
        raise PersistenceError(f"failed to store {article.url!r}: {exc.orig}") from exc
