"""Repository for episodes."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from narrator.db.models import Episode
from narrator.db.repositories.base import BaseRepository


class EpisodeRepository(BaseRepository[Episode]):
    """Repository for episode operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Episode)

    async def get_by_article(self, article_id: UUID) -> Optional[Episode]:
        """Get the episode of an article."""
        stmt = select(Episode).where(Episode.article_id == article_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_completed(self) -> List[Episode]:
        """Completed episodes with articles, most recently completed first."""
        stmt = (
            select(Episode)
            .options(selectinload(Episode.article))
            .where(Episode.status == "completed")
            .order_by(Episode.completed_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update_status(
        self,
        episode_id: UUID,
        status: str,
        error: Optional[str] = None,
        **fields,
    ) -> Optional[Episode]:
        """Move an episode to a new status.

        ``completed`` clears the error and stamps completed_at; ``failed``
        records the error and leaves audio fields untouched.
        """
        episode = await self.get_by_id(episode_id)
        if not episode:
            return None

        episode.status = status
        if status == "completed":
            episode.error_message = None
            episode.completed_at = datetime.now()
        elif status == "failed":
            episode.error_message = error
        for key, value in fields.items():
            setattr(episode, key, value)

        await self.session.flush()
        await self.session.refresh(episode)
        return episode

    async def get_statistics(self) -> dict:
        """Episode counts and totals over completed episodes."""
        completed_stmt = select(
            func.count(),
            func.coalesce(func.sum(Episode.duration), 0),
            func.coalesce(func.sum(Episode.file_size), 0),
        ).where(Episode.status == "completed")

        total = await self.count()
        completed, duration, size = (await self.session.execute(completed_stmt)).one()

        return {
            "total_episodes": total,
            "completed_episodes": completed or 0,
            "total_duration": int(duration or 0),
            "total_size": int(size or 0),
        }
