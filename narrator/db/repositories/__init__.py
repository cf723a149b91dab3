"""Repository pattern implementations for database access."""

from narrator.db.repositories.articles import ArticleRepository
from narrator.db.repositories.base import BaseRepository
from narrator.db.repositories.episodes import EpisodeRepository
from narrator.db.repositories.settings import SettingsRepository

__all__ = [
    "BaseRepository",
    "ArticleRepository",
    "EpisodeRepository",
    "SettingsRepository",
]
