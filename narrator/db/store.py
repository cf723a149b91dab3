"""Database-backed EpisodeStore for the generation pipeline.

Every call opens its own short session and commits, so status changes are
visible to other readers right away and concurrent batch runs never share a
session.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from narrator.db.connection import async_session_factory
from narrator.db.models import Article, Episode
from narrator.db.repositories.articles import ArticleRepository
from narrator.db.repositories.episodes import EpisodeRepository
from narrator.exceptions import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


class DatabaseEpisodeStore:
    """EpisodeStore on top of the article/episode repositories."""

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self.session_factory = session_factory or async_session_factory

    async def get_article(self, article_id: UUID) -> Optional[Article]:
        async with self.session_factory() as session:
            return await ArticleRepository(session).get_by_id(article_id)

    async def get_episode_for_article(self, article_id: UUID) -> Optional[Episode]:
        async with self.session_factory() as session:
            return await EpisodeRepository(session).get_by_article(article_id)

    async def _update(self, episode_id: UUID, status: str, **kwargs) -> None:
        try:
            async with self.session_factory() as session:
                episode = await EpisodeRepository(session).update_status(
                    episode_id, status, **kwargs
                )
                if episode is None:
                    raise NotFoundError("Episode not found")
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to set episode {episode_id} to {status}: {e}")
            raise PersistenceError("Failed to update episode", details=str(e)) from e

    async def mark_processing(self, episode_id: UUID) -> None:
        await self._update(episode_id, "processing")

    async def mark_completed(
        self,
        episode_id: UUID,
        audio_url: str,
        duration: int,
        file_size: int,
        tts_provider: str,
    ) -> None:
        await self._update(
            episode_id,
            "completed",
            audio_url=audio_url,
            duration=duration,
            file_size=file_size,
            tts_provider=tts_provider,
        )

    async def mark_failed(self, episode_id: UUID, error: str) -> None:
        await self._update(episode_id, "failed", error=error)
