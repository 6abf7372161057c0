"""Category repository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from news_aggregator.db.models import Category


class CategoryRepository:
    async def get_by_slug(self, session: AsyncSession, slug: str) -> Category | None:
        if not slug:
            return None
        result = await session.execute(select(Category).where(Category.slug == slug))
        return result.scalar_one_or_none()

    async def list_active(self, session: AsyncSession) -> list[Category]:
        result = await session.execute(
            select(Category).where(Category.is_active.is_(True)).order_by(Category.name.asc())
        )
        return list(result.scalars().all())
