"""Common contract of text-to-speech providers."""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional

import httpx

from narrator.exceptions import TTSProviderError
from narrator.tts.http import get_client

logger = logging.getLogger(__name__)


class TTSProviderName(str, Enum):
    """Supported providers."""
    GOOGLE = "google"
    ELEVENLABS = "elevenlabs"


class TTSProvider(ABC):
    """Turns one chunk of text into MP3 bytes.

    One request per chunk; joining chunk audio is the caller's job.
    """

    name: TTSProviderName
    max_chunk_bytes: int

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client

    async def client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        return await get_client()

    @abstractmethod
    async def synthesize(self, text: str, api_key: str, voice: str) -> bytes:
        """Synthesize one chunk and return encoded audio."""

    @abstractmethod
    async def list_voices(self, api_key: str) -> List[dict]:
        """List voices available to the given key."""

    async def _send(self, request: httpx.Request) -> httpx.Response:
        """Send a request, mapping transport failures and non-2xx answers."""
        client = await self.client()
        try:
            response = await client.send(request)
        except httpx.TimeoutException:
            raise TTSProviderError(
                self.name.value, f"{self.label} TTS request timed out"
            ) from None
        except httpx.HTTPError as e:
            raise TTSProviderError(
                self.name.value, f"{self.label} TTS request failed: {e}"
            ) from e

        if not response.is_success:
            payload = response.text
            logger.error(f"{self.label} TTS error {response.status_code}: {payload[:500]}")
            raise TTSProviderError(
                self.name.value,
                f"{self.label} TTS API error: {payload}",
                status=response.status_code,
                payload=payload,
            )
        return response

    @property
    def label(self) -> str:
        return type(self).__name__.replace("Provider", "")
