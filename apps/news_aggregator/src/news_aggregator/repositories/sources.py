"""Source repository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from news_aggregator.db.models import Source


class SourceRepository:
    async def list_active(self, session: AsyncSession) -> list[Source]:
        result = await session.execute(
            select(Source).where(Source.is_active.is_(True)).order_by(Source.id.asc())
        )
        return list(result.scalars().all())

    async def get_by_id(self, session: AsyncSession, source_id: int) -> Source | None:
        result = await session.execute(select(Source).where(Source.id == source_id))
        return result.scalar_one_or_none()

    async def get_by_api_identifier(
        self,
        session: AsyncSession,
        api_identifier: str,
    ) -> Source | None:
        result = await session.execute(
            select(Source).where(Source.api_identifier == api_identifier)
        )
        return result.scalar_one_or_none()
