"""Repository for articles."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from narrator.db.models import Article
from narrator.db.repositories.base import BaseRepository


class ArticleRepository(BaseRepository[Article]):
    """Repository for article operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Article)

    async def get_by_url(self, url: str) -> Optional[Article]:
        """Get article by source URL."""
        stmt = select(Article).where(Article.url == url)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_with_episodes(self) -> List[Article]:
        """All articles, newest first, with their episode loaded."""
        stmt = (
            select(Article)
            .options(selectinload(Article.episode))
            .order_by(Article.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
