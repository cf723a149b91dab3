"""ElevenLabs adapter (API key in the xi-api-key header)."""

import logging
from typing import List, Optional

import httpx

from narrator.config import settings
from narrator.exceptions import TTSProviderError
from narrator.tts.base import TTSProvider, TTSProviderName

logger = logging.getLogger(__name__)

VOICE_SETTINGS = {
    "stability": 0.5,
    "similarity_boost": 0.75,
    "style": 0.0,
    "use_speaker_boost": True,
}


class ElevenLabsProvider(TTSProvider):
    name = TTSProviderName.ELEVENLABS
    max_chunk_bytes = 5000

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        model_id: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        super().__init__(client)
        self.model_id = model_id or settings.ELEVENLABS_MODEL_ID
        self.base_url = (base_url or settings.ELEVENLABS_BASE_URL).rstrip("/")

    def build_request(self, text: str, api_key: str, voice: str) -> httpx.Request:
        if not voice:
            raise TTSProviderError(self.name.value, "No ElevenLabs voice configured")
        return httpx.Request(
            "POST",
            f"{self.base_url}/v1/text-to-speech/{voice}",
            headers={
                "Accept": "audio/mpeg",
                "xi-api-key": api_key,
            },
            json={
                "text": text,
                "model_id": self.model_id,
                "voice_settings": VOICE_SETTINGS,
            },
        )

    async def synthesize(self, text: str, api_key: str, voice: str) -> bytes:
        response = await self._send(self.build_request(text, api_key, voice))
        if not response.content:
            raise TTSProviderError(self.name.value, "Empty audio from ElevenLabs")
        return response.content

    async def list_voices(self, api_key: str) -> List[dict]:
        request = httpx.Request(
            "GET",
            f"{self.base_url}/v1/voices",
            headers={"xi-api-key": api_key},
        )
        response = await self._send(request)
        return response.json().get("voices", [])
