"""Article repository."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator
from sqlalchemy import Select, func, insert, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from news_aggregator.db.models import Article, Category, UserPreference, article_category

SORTABLE_COLUMNS = {
    "published_at": Article.published_at,
    "created_at": Article.created_at,
    "title": Article.title,
}


class ArticleSearchFilters(BaseModel):
    keyword: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    source_ids: list[int] = Field(default_factory=list)
    category_ids: list[int] = Field(default_factory=list)
    author_ids: list[int] = Field(default_factory=list)
    sort_by: Literal["published_at", "created_at", "title"] = "published_at"
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = Field(1, ge=1)
    per_page: int = Field(15, ge=1, le=100)

    @model_validator(mode="after")
    def check_date_range(self) -> ArticleSearchFilters:
        if self.date_from and self.date_to and self.date_to < self.date_from:
            raise ValueError("date_to must not be earlier than date_from")
        return self


@dataclass(slots=True)
class ArticlePage:
    items: list[Article]
    total: int
    page: int
    per_page: int

    @property
    def last_page(self) -> int:
        if self.total == 0:
            return 1
        return (self.total + self.per_page - 1) // self.per_page


def _with_relations(stmt: Select) -> Select:
    return stmt.options(
        selectinload(Article.source),
        selectinload(Article.author),
        selectinload(Article.categories),
    )


class ArticleRepository:
    async def exists_by_url(self, session: AsyncSession, url: str) -> bool:
        if not url:
            return False
        result = await session.execute(select(Article.id).where(Article.url == url).limit(1))
        return result.scalar_one_or_none() is not None

    async def create(self, session: AsyncSession, article: Article) -> Article:
        session.add(article)
        await session.flush()
        return article

    async def attach_category(
        self,
        session: AsyncSession,
        *,
        article_id: int,
        category_id: int,
    ) -> None:
        await session.execute(
            insert(article_category).values(article_id=article_id, category_id=category_id)
        )

    async def get_by_id(self, session: AsyncSession, article_id: int) -> Article | None:
        result = await session.execute(
            _with_relations(select(Article).where(Article.id == article_id))
        )
        return result.scalar_one_or_none()

    async def search(self, session: AsyncSession, filters: ArticleSearchFilters) -> ArticlePage:
        stmt = select(Article)
        if filters.keyword:
            pattern = f"%{filters.keyword}%"
            stmt = stmt.where(
                or_(
                    Article.title.ilike(pattern),
                    Article.description.ilike(pattern),
                    Article.content.ilike(pattern),
                )
            )
        if filters.date_from:
            stmt = stmt.where(Article.published_at >= filters.date_from)
        if filters.date_to:
            stmt = stmt.where(Article.published_at <= filters.date_to)
        if filters.source_ids:
            stmt = stmt.where(Article.source_id.in_(filters.source_ids))
        if filters.category_ids:
            stmt = stmt.where(Article.categories.any(Category.id.in_(filters.category_ids)))
        if filters.author_ids:
            stmt = stmt.where(Article.author_id.in_(filters.author_ids))

        column = SORTABLE_COLUMNS[filters.sort_by]
        ordering = column.asc() if filters.sort_order == "asc" else column.desc()
        stmt = stmt.order_by(ordering, Article.id.desc())
        return await self._paginate(session, stmt, page=filters.page, per_page=filters.per_page)

    async def personalized_feed(
        self,
        session: AsyncSession,
        preference: UserPreference | None,
        *,
        page: int = 1,
        per_page: int = 15,
    ) -> ArticlePage:
        stmt = select(Article)
        if preference is not None:
            if preference.preferred_sources:
                stmt = stmt.where(Article.source_id.in_(preference.preferred_sources))
            if preference.preferred_categories:
                stmt = stmt.where(
                    Article.categories.any(Category.id.in_(preference.preferred_categories))
                )
            if preference.preferred_authors:
                stmt = stmt.where(Article.author_id.in_(preference.preferred_authors))
        stmt = stmt.order_by(Article.published_at.desc(), Article.id.desc())
        return await self._paginate(session, stmt, page=page, per_page=per_page)

    async def _paginate(
        self,
        session: AsyncSession,
        stmt: Select,
        *,
        page: int,
        per_page: int,
    ) -> ArticlePage:
        page = max(page, 1)
        per_page = min(max(per_page, 1), 100)
        total_result = await session.execute(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        )
        total = int(total_result.scalar_one() or 0)
        result = await session.execute(
            _with_relations(stmt).limit(per_page).offset((page - 1) * per_page)
        )
        return ArticlePage(
            items=list(result.scalars().all()),
            total=total,
            page=page,
            per_page=per_page,
        )
