"""REST API for episode generation."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel, Field

from narrator.dependencies import PipelineDep, SettingsRepoDep
from narrator.exceptions import NarratorError
from narrator.pipeline import PodcastConfig

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/episodes", tags=["Episodes"])


class GenerateRequest(BaseModel):
    article_id: UUID
    tts_provider: Optional[str] = None


class GenerateResponse(BaseModel):
    episode_id: str
    status: str
    audio_url: str
    duration: int
    file_size: int


class BatchGenerateRequest(BaseModel):
    article_ids: List[UUID] = Field(..., min_length=1)
    tts_provider: Optional[str] = None


class BatchItem(BaseModel):
    article_id: str
    success: bool
    error: Optional[str] = None


class BatchGenerateResponse(BaseModel):
    total: int
    success: int
    failed: int
    results: List[BatchItem]


def _config_loader(settings_repo):
    """Settings are read by the pipeline after the article lookup."""

    async def load() -> PodcastConfig:
        row = await settings_repo.get_for_user()
        if row is None:
            raise NarratorError("Settings not found")
        return PodcastConfig.from_model(row)

    return load


@router.post("/generate", response_model=GenerateResponse)
async def generate_episode(
    data: GenerateRequest,
    settings_repo: SettingsRepoDep,
    pipeline: PipelineDep,
):
    """Generate (or regenerate) the episode of one article."""
    result = await pipeline.generate(
        data.article_id, _config_loader(settings_repo), data.tts_provider
    )
    return GenerateResponse(
        episode_id=str(result.episode_id),
        status=result.status.value,
        audio_url=result.audio_url,
        duration=result.duration,
        file_size=result.file_size,
    )


@router.post("/batch-generate", response_model=BatchGenerateResponse)
async def batch_generate(
    data: BatchGenerateRequest,
    settings_repo: SettingsRepoDep,
    pipeline: PipelineDep,
):
    """Generate several episodes with bounded concurrency."""
    batch = await pipeline.generate_batch(
        data.article_ids, _config_loader(settings_repo), data.tts_provider
    )
    return BatchGenerateResponse(
        total=batch.total,
        success=batch.success,
        failed=batch.failed,
        results=[
            BatchItem(article_id=str(r.article_id), success=r.success, error=r.error)
            for r in batch.results
        ],
    )
