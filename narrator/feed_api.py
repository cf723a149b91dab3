"""Podcast feed and statistics endpoints."""

import logging

from fastapi import APIRouter
from fastapi.responses import Response

from narrator.config import settings
from narrator.dependencies import ArticleRepoDep, EpisodeRepoDep, SettingsRepoDep
from narrator.exceptions import NotFoundError
from narrator.feed import render_feed

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Feed"])


@router.get("/feed.xml")
async def get_feed(settings_repo: SettingsRepoDep, episode_repo: EpisodeRepoDep):
    """RSS feed of completed episodes."""
    podcast = await settings_repo.get_for_user()
    if podcast is None:
        raise NotFoundError("Settings not found")

    episodes = await episode_repo.get_completed()
    xml = render_feed(podcast, episodes)
    return Response(
        content=xml,
        media_type="application/rss+xml; charset=utf-8",
        headers={
            "Cache-Control": f"s-maxage={settings.FEED_CACHE_SECONDS}, stale-while-revalidate"
        },
    )


@router.get("/api/statistics")
async def get_statistics(article_repo: ArticleRepoDep, episode_repo: EpisodeRepoDep):
    """Article/episode counts and total completed duration and size."""
    stats = await episode_repo.get_statistics()
    return {"total_articles": await article_repo.count(), **stats}
