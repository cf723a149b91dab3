"""Text-to-speech provider adapters."""

from typing import Optional

import httpx

from narrator.tts.base import TTSProvider, TTSProviderName
from narrator.tts.elevenlabs import ElevenLabsProvider
from narrator.tts.google import GoogleProvider

PROVIDERS: dict[TTSProviderName, type[TTSProvider]] = {
    TTSProviderName.GOOGLE: GoogleProvider,
    TTSProviderName.ELEVENLABS: ElevenLabsProvider,
}


def get_provider(
    name: TTSProviderName | str, client: Optional[httpx.AsyncClient] = None
) -> TTSProvider:
    """Instantiate the adapter registered for a provider name."""
    return PROVIDERS[TTSProviderName(name)](client=client)


__all__ = [
    "PROVIDERS",
    "ElevenLabsProvider",
    "GoogleProvider",
    "TTSProvider",
    "TTSProviderName",
    "get_provider",
]
