"""Repository for the podcast settings singleton."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from narrator.config import settings as app_settings
from narrator.db.models import PodcastSettings
from narrator.db.repositories.base import BaseRepository


class SettingsRepository(BaseRepository[PodcastSettings]):
    """Repository for settings of the single implicit user."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, PodcastSettings)

    async def get_for_user(self, user_id: Optional[str] = None) -> Optional[PodcastSettings]:
        stmt = select(PodcastSettings).where(
            PodcastSettings.user_id == (user_id or app_settings.DEFAULT_USER_ID)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create_default(self) -> PodcastSettings:
        """Get the settings row, creating it with defaults on first use."""
        row = await self.get_for_user()
        if row is None:
            row = await self.create(user_id=app_settings.DEFAULT_USER_ID)
        return row
