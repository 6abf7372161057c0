"""Author repository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from news_aggregator.db.models import Author


class AuthorRepository:
    async def get_by_name_and_email(
        self,
        session: AsyncSession,
        *,
        name: str,
        email: str | None = None,
    ) -> Author | None:
        result = await session.execute(
            select(Author).where(Author.name == name).where(Author.email == (email or ""))
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        session: AsyncSession,
        *,
        name: str,
        email: str | None = None,
    ) -> Author:
        author = Author(name=name, email=email or "")
        session.add(author)
        await session.flush()
        return author

    async def get_or_create(
        self,
        session: AsyncSession,
        *,
        name: str,
        email: str | None = None,
    ) -> Author:
        author = await self.get_by_name_and_email(session, name=name, email=email)
        if author is not None:
            return author
        try:
            async with session.begin_nested():
                return await self.create(session, name=name, email=email)
        except IntegrityError:
            # another writer committed the same (name, email) first
            author = await self.get_by_name_and_email(session, name=name, email=email)
            if author is None:
                raise
            return author
