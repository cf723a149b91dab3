"""Google Cloud Text-to-Speech adapter (API key as query parameter)."""

import base64
import binascii
import logging
from typing import List, Optional

import httpx

from narrator.config import settings
from narrator.exceptions import TTSProviderError
from narrator.tts.base import TTSProvider, TTSProviderName

logger = logging.getLogger(__name__)


class GoogleProvider(TTSProvider):
    name = TTSProviderName.GOOGLE
    max_chunk_bytes = 4500

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        language_code: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        super().__init__(client)
        self.language_code = language_code or settings.TTS_LANGUAGE_CODE
        self.base_url = (base_url or settings.GOOGLE_TTS_BASE_URL).rstrip("/")

    def build_request(self, text: str, api_key: str, voice: str) -> httpx.Request:
        body = {
            "input": {"text": text},
            "voice": {
                "languageCode": self.language_code,
                "name": voice,
            },
            "audioConfig": {
                "audioEncoding": "MP3",
                "speakingRate": 1.0,
                "pitch": 0.0,
                "volumeGainDb": 0.0,
                "sampleRateHertz": 44100,
                "effectsProfileId": ["headphone-class-device"],
            },
        }
        return httpx.Request(
            "POST",
            f"{self.base_url}/v1/text:synthesize",
            params={"key": api_key},
            json=body,
        )

    def _json(self, response: httpx.Response) -> dict:
        try:
            return response.json()
        except ValueError as e:
            raise TTSProviderError(
                self.name.value,
                "Invalid response from Google TTS",
                status=response.status_code,
                payload=response.text[:500],
            ) from e

    async def synthesize(self, text: str, api_key: str, voice: str) -> bytes:
        response = await self._send(self.build_request(text, api_key, voice))

        audio_content = self._json(response).get("audioContent")
        if not audio_content:
            raise TTSProviderError(
                self.name.value, "No audio content received from Google TTS"
            )
        try:
            return base64.b64decode(audio_content)
        except (binascii.Error, ValueError) as e:
            raise TTSProviderError(
                self.name.value, f"Invalid audio content from Google TTS: {e}"
            ) from e

    async def list_voices(self, api_key: str) -> List[dict]:
        request = httpx.Request(
            "GET",
            f"{self.base_url}/v1/voices",
            params={"key": api_key, "languageCode": self.language_code},
        )
        response = await self._send(request)
        return self._json(response).get("voices", [])
