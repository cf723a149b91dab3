"""REST API for podcast settings."""

import logging
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from narrator.dependencies import DbSession, SettingsRepoDep, StorageDep, VaultDep
from narrator.exceptions import ValidationError
from narrator.pipeline import PodcastConfig
from narrator.services import podcast_settings
from narrator.tts import get_provider

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/settings", tags=["Settings"])


class SettingsUpdate(BaseModel):
    podcast_title: Optional[str] = None
    podcast_description: Optional[str] = None
    podcast_author: Optional[str] = None
    podcast_cover_url: Optional[str] = None
    default_tts_provider: Optional[str] = None
    google_voice_name: Optional[str] = None
    elevenlabs_voice_id: Optional[str] = None
    google_tts_api_key: Optional[str] = None
    elevenlabs_api_key: Optional[str] = None


class CoverUpload(BaseModel):
    image: str
    filename: str


@router.get("")
async def get_settings(session: DbSession, settings_repo: SettingsRepoDep):
    """Get settings without exposing API keys."""
    row = await settings_repo.get_or_create_default()
    await session.commit()
    return {"settings": podcast_settings.public_view(row)}


@router.put("")
async def update_settings(
    data: SettingsUpdate,
    session: DbSession,
    settings_repo: SettingsRepoDep,
    vault: VaultDep,
):
    """Update settings; API keys are stored encrypted."""
    updates = data.model_dump(exclude_unset=True)
    await podcast_settings.update_settings(settings_repo, vault, updates)
    await session.commit()
    return {"success": True}


@router.post("/cover")
async def upload_cover(data: CoverUpload, storage: StorageDep):
    """Upload a podcast cover image."""
    url = await podcast_settings.upload_cover(storage, data.image, data.filename)
    return {"url": url}


@router.get("/voices/{provider}")
async def list_voices(provider: str, settings_repo: SettingsRepoDep, vault: VaultDep):
    """List voices of a provider using its stored API key."""
    row = await settings_repo.get_or_create_default()
    config = PodcastConfig.from_model(row)
    name = config.resolve_provider(provider)

    token = config.api_keys.get(name)
    if not token:
        raise ValidationError(f"No API key found for provider: {name.value}")

    voices = await get_provider(name).list_voices(vault.decrypt(token))
    return {"provider": name.value, "voices": voices}
