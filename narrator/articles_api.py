"""REST API for articles."""

import logging
from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from narrator.dependencies import (
    ArticleRepoDep,
    DbSession,
    EpisodeRepoDep,
    SettingsRepoDep,
    StorageDep,
)
from narrator.exceptions import ValidationError
from narrator.services import articles as article_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/articles", tags=["Articles"])


# Pydantic models for API
class ArticleCreate(BaseModel):
    source_type: Literal["url", "text"] = "url"
    url: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None


class ArticleUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None


class ArticleCreated(BaseModel):
    article_id: str
    title: str


class EpisodeResponse(BaseModel):
    id: str
    article_id: str
    audio_url: str
    duration: int
    file_size: int
    status: str
    tts_provider: str
    error_message: Optional[str]
    created_at: Optional[str]
    completed_at: Optional[str]


class ArticleResponse(BaseModel):
    id: str
    url: Optional[str]
    title: str
    content: str
    author: Optional[str]
    source_type: str
    is_editable: bool
    created_at: Optional[str]
    episode: Optional[EpisodeResponse] = None


def _episode_to_response(episode) -> EpisodeResponse:
    return EpisodeResponse(
        id=str(episode.id),
        article_id=str(episode.article_id),
        audio_url=episode.audio_url or "",
        duration=episode.duration or 0,
        file_size=episode.file_size or 0,
        status=episode.status,
        tts_provider=episode.tts_provider,
        error_message=episode.error_message,
        created_at=episode.created_at.isoformat() if episode.created_at else None,
        completed_at=episode.completed_at.isoformat() if episode.completed_at else None,
    )


def _article_to_response(article) -> ArticleResponse:
    episode = getattr(article, "episode", None)
    return ArticleResponse(
        id=str(article.id),
        url=article.url,
        title=article.title,
        content=article.content,
        author=article.author,
        source_type=article.source_type,
        is_editable=article.is_editable,
        created_at=article.created_at.isoformat() if article.created_at else None,
        episode=_episode_to_response(episode) if episode else None,
    )


@router.get("", response_model=List[ArticleResponse])
async def list_articles(article_repo: ArticleRepoDep):
    """List articles with their episodes, newest first."""
    articles = await article_repo.list_with_episodes()
    return [_article_to_response(a) for a in articles]


@router.post("", response_model=ArticleCreated, status_code=201)
async def add_article(
    data: ArticleCreate,
    session: DbSession,
    article_repo: ArticleRepoDep,
    episode_repo: EpisodeRepoDep,
    settings_repo: SettingsRepoDep,
):
    """Add an article from a URL or from pasted text."""
    if data.source_type == "text":
        article = await article_service.add_text_article(
            article_repo,
            episode_repo,
            settings_repo,
            title=data.title or "",
            content=data.content or "",
            author=data.author,
        )
        created = True
    else:
        if not data.url:
            raise ValidationError("URL is required")
        article, created = await article_service.add_url_article(
            article_repo, episode_repo, settings_repo, data.url
        )

    await session.commit()
    body = ArticleCreated(article_id=str(article.id), title=article.title)
    if not created:
        return JSONResponse(status_code=200, content=body.model_dump())
    return body


@router.put("/{article_id}")
async def update_article(
    article_id: UUID,
    data: ArticleUpdate,
    session: DbSession,
    article_repo: ArticleRepoDep,
):
    """Edit a text article."""
    kwargs = {"title": data.title, "content": data.content}
    if "author" in data.model_fields_set:
        kwargs["author"] = data.author

    await article_service.update_article(article_repo, article_id, **kwargs)
    await session.commit()
    return {"success": True}


@router.delete("/{article_id}")
async def delete_article(
    article_id: UUID,
    session: DbSession,
    article_repo: ArticleRepoDep,
    episode_repo: EpisodeRepoDep,
    storage: StorageDep,
):
    """Delete an article, its episode and its audio."""
    await article_service.delete_article(article_repo, episode_repo, article_id, storage)
    await session.commit()
    return {"success": True}
