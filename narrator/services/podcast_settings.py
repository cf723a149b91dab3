"""Podcast settings: read without secrets, update with encrypted keys."""

import base64
import binascii
import logging
import re
import time
from pathlib import PurePosixPath
from typing import Optional

from narrator.config import settings
from narrator.db.models import PodcastSettings
from narrator.db.repositories.settings import SettingsRepository
from narrator.encryption import CredentialVault
from narrator.exceptions import ValidationError
from narrator.storage import ObjectStorage
from narrator.tts import TTSProviderName

logger = logging.getLogger(__name__)

PLAIN_FIELDS = (
    "podcast_title",
    "podcast_description",
    "podcast_author",
    "podcast_cover_url",
    "default_tts_provider",
    "google_voice_name",
    "elevenlabs_voice_id",
)
KEY_FIELDS = ("google_tts_api_key", "elevenlabs_api_key")

_DATA_URI_RE = re.compile(r"^data:image/\w+;base64,")


def public_view(row: PodcastSettings) -> dict:
    """Settings as exposed by the API: key flags instead of ciphertext."""
    return {
        "id": row.id,
        "user_id": row.user_id,
        "podcast_title": row.podcast_title,
        "podcast_description": row.podcast_description,
        "podcast_author": row.podcast_author,
        "podcast_cover_url": row.podcast_cover_url,
        "default_tts_provider": row.default_tts_provider,
        "google_voice_name": row.google_voice_name,
        "elevenlabs_voice_id": row.elevenlabs_voice_id,
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "updated_at": row.updated_at.isoformat() if row.updated_at else None,
        "has_google_key": bool(row.google_tts_api_key),
        "has_elevenlabs_key": bool(row.elevenlabs_api_key),
    }


async def update_settings(
    settings_repo: SettingsRepository,
    vault: CredentialVault,
    updates: dict,
) -> PodcastSettings:
    """
    Apply a partial update.

    API keys are encrypted before they reach the repository; an empty
    string clears the key.
    """
    row = await settings_repo.get_or_create_default()

    data = {k: v for k, v in updates.items() if k in PLAIN_FIELDS}
    if "default_tts_provider" in data:
        try:
            data["default_tts_provider"] = TTSProviderName(data["default_tts_provider"]).value
        except ValueError:
            raise ValidationError(
                f"Unknown TTS provider: {data['default_tts_provider']}"
            ) from None

    for field in KEY_FIELDS:
        if field not in updates or updates[field] is None:
            continue
        plaintext = updates[field].strip()
        data[field] = vault.encrypt(plaintext) if plaintext else None
        logger.info(f"{'Updated' if plaintext else 'Cleared'} {field}")

    if not data:
        raise ValidationError("Invalid update data")

    return await settings_repo.update(row.id, **data)


async def upload_cover(
    storage: ObjectStorage,
    image: str,
    filename: str,
    timestamp: Optional[int] = None,
) -> str:
    """
    Store a base64 cover image and return its public URL.

    Args:
        storage: Object storage
        image: Base64 data, optionally as a ``data:image/...;base64,`` URI
        filename: Original file name (extension selects the content type)
        timestamp: Millisecond timestamp for the object name (default: now)
    """
    if not image or not filename:
        raise ValidationError(
            "Missing required fields",
            details="Both image (base64) and filename are required",
        )

    extension = PurePosixPath(filename.lower()).suffix
    content_type = settings.COVER_EXTENSIONS.get(extension)
    if content_type is None:
        raise ValidationError(
            "Invalid file type", details="Only JPG, PNG, and WebP images are allowed"
        )

    try:
        data = base64.b64decode(_DATA_URI_RE.sub("", image), validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Invalid image data") from None

    if len(data) > settings.COVER_MAX_BYTES:
        raise ValidationError(
            "File too large",
            details=f"Maximum file size is {settings.COVER_MAX_BYTES // (1024 * 1024)}MB",
        )

    timestamp = timestamp or int(time.time() * 1000)
    return await storage.put(f"covers/cover-{timestamp}{extension}", data, content_type)
