"""FastAPI dependencies for repositories and pipeline collaborators."""

from typing import Annotated, AsyncGenerator, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from narrator.db.connection import get_session
from narrator.db.repositories.articles import ArticleRepository
from narrator.db.repositories.episodes import EpisodeRepository
from narrator.db.repositories.settings import SettingsRepository
from narrator.db.store import DatabaseEpisodeStore
from narrator.encryption import CredentialVault, get_vault
from narrator.pipeline import EpisodePipeline
from narrator.storage import ObjectStorage, get_storage


# Session dependency
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async for session in get_session():
        yield session


DbSession = Annotated[AsyncSession, Depends(get_db)]


# Repository dependencies
async def get_article_repo(session: DbSession) -> ArticleRepository:
    """Get article repository."""
    return ArticleRepository(session)


async def get_episode_repo(session: DbSession) -> EpisodeRepository:
    """Get episode repository."""
    return EpisodeRepository(session)


async def get_settings_repo(session: DbSession) -> SettingsRepository:
    """Get settings repository."""
    return SettingsRepository(session)


def get_object_storage() -> ObjectStorage:
    return get_storage()


def get_credential_vault() -> CredentialVault:
    return get_vault()


# One pipeline per process so the in-flight guard covers every request
_pipeline: Optional[EpisodePipeline] = None


def get_pipeline() -> EpisodePipeline:
    """Get the shared episode pipeline."""
    global _pipeline

    if _pipeline is None:
        _pipeline = EpisodePipeline(
            store=DatabaseEpisodeStore(),
            storage=get_storage(),
            vault=get_vault(),
        )
    return _pipeline


# Type aliases for dependencies
ArticleRepoDep = Annotated[ArticleRepository, Depends(get_article_repo)]
EpisodeRepoDep = Annotated[EpisodeRepository, Depends(get_episode_repo)]
SettingsRepoDep = Annotated[SettingsRepository, Depends(get_settings_repo)]
StorageDep = Annotated[ObjectStorage, Depends(get_object_storage)]
VaultDep = Annotated[CredentialVault, Depends(get_credential_vault)]
PipelineDep = Annotated[EpisodePipeline, Depends(get_pipeline)]
