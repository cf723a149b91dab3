"""Database module for Article Narrator."""

from .connection import get_session, engine, async_session_factory
from .models import Article, Base, Episode, PodcastSettings

__all__ = [
    "get_session",
    "engine",
    "async_session_factory",
    "Base",
    "Article",
    "Episode",
    "PodcastSettings",
]
