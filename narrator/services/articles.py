"""Article lifecycle: add (URL or text), edit, delete."""

import logging
from typing import Awaitable, Callable, Optional, Tuple
from uuid import UUID

from narrator.config import settings
from narrator.db.models import Article
from narrator.db.repositories.articles import ArticleRepository
from narrator.db.repositories.episodes import EpisodeRepository
from narrator.db.repositories.settings import SettingsRepository
from narrator.exceptions import NotEditableError, NotFoundError, ValidationError
from narrator.storage import ObjectStorage, file_name_from_url
from narrator.url_validator import is_http_url
from narrator.web_scraper import ExtractedContent, extract

logger = logging.getLogger(__name__)

Extractor = Callable[[str], Awaitable[ExtractedContent]]

_UNSET = object()


def check_content_length(content: str) -> None:
    """Reject content above MAX_ARTICLE_CHARS characters."""
    if len(content) > settings.MAX_ARTICLE_CHARS:
        raise ValidationError(
            "Article too long",
            details=f"Maximum {settings.MAX_ARTICLE_CHARS:,} characters allowed",
        )


async def _create_with_episode(
    article_repo: ArticleRepository,
    episode_repo: EpisodeRepository,
    settings_repo: SettingsRepository,
    **fields,
) -> Article:
    """Insert an article and its pending episode."""
    podcast = await settings_repo.get_or_create_default()
    article = await article_repo.create(**fields)
    await episode_repo.create(
        article_id=article.id,
        audio_url="",
        status="pending",
        tts_provider=podcast.default_tts_provider,
    )
    logger.info(f"Added {article.source_type} article {article.id}: {article.title[:50]}")
    return article


async def add_url_article(
    article_repo: ArticleRepository,
    episode_repo: EpisodeRepository,
    settings_repo: SettingsRepository,
    url: str,
    extractor: Extractor = extract,
) -> Tuple[Article, bool]:
    """
    Add an article by URL.

    Returns:
        Tuple of (article, created); an already known URL returns the
        existing article with created=False
    """
    url = (url or "").strip()
    if not url:
        raise ValidationError("URL is required")
    if not is_http_url(url):
        raise ValidationError("Invalid URL format")

    existing = await article_repo.get_by_url(url)
    if existing:
        return existing, False

    extracted = await extractor(url)
    check_content_length(extracted.content)

    article = await _create_with_episode(
        article_repo,
        episode_repo,
        settings_repo,
        url=url,
        title=extracted.title,
        content=extracted.content,
        author=extracted.author,
        source_type="url",
        is_editable=False,
    )
    return article, True


async def add_text_article(
    article_repo: ArticleRepository,
    episode_repo: EpisodeRepository,
    settings_repo: SettingsRepository,
    title: str,
    content: str,
    author: Optional[str] = None,
) -> Article:
    """Add a manually entered, editable article."""
    title = (title or "").strip()
    content = (content or "").strip()
    if not title:
        raise ValidationError("Title is required")
    if not content:
        raise ValidationError("Content is required")
    check_content_length(content)

    return await _create_with_episode(
        article_repo,
        episode_repo,
        settings_repo,
        url=None,
        title=title,
        content=content,
        author=(author or "").strip() or None,
        source_type="text",
        is_editable=True,
    )


async def update_article(
    article_repo: ArticleRepository,
    article_id: UUID,
    title: Optional[str] = None,
    content: Optional[str] = None,
    author=_UNSET,
) -> Article:
    """
    Edit a text article.

    Blank title/content are ignored; passing ``author=None`` (or blank)
    clears the author.
    """
    article = await article_repo.get_by_id(article_id)
    if article is None:
        raise NotFoundError("Article not found")
    if not article.is_editable:
        raise NotEditableError(
            "Article is not editable",
            details="Only text-based articles can be edited",
        )

    updates = {}
    if title is not None and title.strip():
        updates["title"] = title.strip()
    if content is not None and content.strip():
        check_content_length(content.strip())
        updates["content"] = content.strip()
    if author is not _UNSET:
        updates["author"] = (author or "").strip() or None

    if not updates:
        raise ValidationError("No updates provided")

    return await article_repo.update(article_id, **updates)


async def delete_article(
    article_repo: ArticleRepository,
    episode_repo: EpisodeRepository,
    article_id: UUID,
    storage: ObjectStorage,
) -> None:
    """Delete an article, its episode and (best effort) its audio file."""
    article = await article_repo.get_by_id(article_id)
    if article is None:
        raise NotFoundError("Article not found")

    episode = await episode_repo.get_by_article(article_id)
    if episode and episode.audio_url:
        try:
            await storage.delete(file_name_from_url(episode.audio_url))
        except Exception as e:
            # Storage cleanup never blocks article deletion
            logger.error(f"Error deleting audio for article {article_id}: {e}")

    await article_repo.delete(article_id)
    logger.info(f"Deleted article {article_id}")
