"""Episode generation pipeline.

Drives one episode through::

    pending -> processing -> completed | failed

Article text is sanitized, chunked to the provider's payload ceiling,
synthesized chunk by chunk in order, joined into one MP3 and uploaded.
Any failure after the episode enters ``processing`` is written to the
episode before it propagates.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Protocol, Sequence, Union
from uuid import UUID, uuid4

from narrator.chunker import chunk
from narrator.config import settings
from narrator.encryption import CredentialVault
from narrator.exceptions import (
    GenerationInProgressError,
    NarratorError,
    NotFoundError,
    TTSProviderError,
    UpstreamProviderError,
    ValidationError,
)
from narrator.sanitizer import sanitize
from narrator.storage import ObjectStorage
from narrator.tts import TTSProvider, TTSProviderName, get_provider

logger = logging.getLogger(__name__)


class EpisodeStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class PodcastConfig:
    """TTS part of the settings row, passed explicitly into the pipeline.

    ``api_keys`` hold vault tokens, never plaintext.
    """
    default_provider: str = TTSProviderName.GOOGLE.value
    voices: Dict[TTSProviderName, str] = field(default_factory=dict)
    api_keys: Dict[TTSProviderName, Optional[str]] = field(default_factory=dict)

    @classmethod
    def from_model(cls, row) -> "PodcastConfig":
        """Build from a PodcastSettings ORM row."""
        return cls(
            default_provider=row.default_tts_provider,
            voices={
                TTSProviderName.GOOGLE: row.google_voice_name or "",
                TTSProviderName.ELEVENLABS: row.elevenlabs_voice_id or "",
            },
            api_keys={
                TTSProviderName.GOOGLE: row.google_tts_api_key,
                TTSProviderName.ELEVENLABS: row.elevenlabs_api_key,
            },
        )

    def resolve_provider(self, requested: Optional[str] = None) -> TTSProviderName:
        name = requested or self.default_provider
        if not name:
            raise ValidationError("No TTS provider selected")
        try:
            return TTSProviderName(name)
        except ValueError:
            raise ValidationError(f"Unknown TTS provider: {name}") from None


# A ready config, or a coroutine function loading it from the settings row
ConfigSource = Union[PodcastConfig, Callable[[], Awaitable[PodcastConfig]]]


async def load_config(source: ConfigSource) -> PodcastConfig:
    if isinstance(source, PodcastConfig):
        return source
    return await source()


class EpisodeStore(Protocol):
    """Persistence needed by the pipeline. Each call is its own transaction."""

    async def get_article(self, article_id: UUID): ...

    async def get_episode_for_article(self, article_id: UUID): ...

    async def mark_processing(self, episode_id: UUID) -> None: ...

    async def mark_completed(
        self,
        episode_id: UUID,
        audio_url: str,
        duration: int,
        file_size: int,
        tts_provider: str,
    ) -> None: ...

    async def mark_failed(self, episode_id: UUID, error: str) -> None: ...


@dataclass
class GenerationResult:
    episode_id: UUID
    status: EpisodeStatus
    audio_url: str
    duration: int
    file_size: int
    tts_provider: str
    chunk_count: int


@dataclass
class BatchItemResult:
    article_id: UUID
    success: bool
    error: Optional[str] = None


@dataclass
class BatchResult:
    results: List[BatchItemResult]

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def success(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return self.total - self.success


def estimate_duration(file_size: int, bitrate_kbps: Optional[int] = None) -> int:
    """Approximate duration in seconds of a constant-bitrate MP3.

    Derived from the byte size only; the stream is not inspected.
    """
    bitrate = bitrate_kbps or settings.AUDIO_BITRATE_KBPS
    bytes_per_second = bitrate * 1000 / 8
    return round(file_size / bytes_per_second)


class EpisodePipeline:
    """Generates episode audio for articles."""

    def __init__(
        self,
        store: EpisodeStore,
        storage: ObjectStorage,
        vault: CredentialVault,
        provider_factory: Callable[[TTSProviderName], TTSProvider] = get_provider,
        chunk_timeout: Optional[float] = None,
        max_concurrent: Optional[int] = None,
    ):
        self.store = store
        self.storage = storage
        self.vault = vault
        self.provider_factory = provider_factory
        self.chunk_timeout = chunk_timeout or settings.TTS_CHUNK_TIMEOUT
        self.max_concurrent = max_concurrent or settings.BATCH_MAX_CONCURRENT
        self._in_flight: set[UUID] = set()

    async def generate(
        self,
        article_id: UUID,
        config: ConfigSource,
        provider: Optional[str] = None,
    ) -> GenerationResult:
        """Generate (or regenerate) the episode of one article.

        ``config`` is loaded only once the article is known to exist.

        Raises:
            NotFoundError: article or episode missing
            ValidationError: provider cannot be resolved
            GenerationInProgressError: episode already being generated
            NarratorError: any failure after the episode entered processing
            asyncio.CancelledError: run cancelled (recorded as a failure)
        """
        article = await self.store.get_article(article_id)
        if article is None:
            raise NotFoundError("Article not found")

        config = await load_config(config)
        provider_name = config.resolve_provider(provider)

        episode = await self.store.get_episode_for_article(article_id)
        if episode is None:
            raise NotFoundError("Episode not found")

        if episode.id in self._in_flight:
            raise GenerationInProgressError(
                "Episode generation already in progress",
                details=str(episode.id),
            )

        self._in_flight.add(episode.id)
        try:
            await self.store.mark_processing(episode.id)
            logger.info(f"Episode {episode.id}: processing with {provider_name.value}")
            try:
                return await self._run(episode.id, article, config, provider_name)
            except (Exception, asyncio.CancelledError) as e:
                if isinstance(e, asyncio.CancelledError):
                    message = "Generation cancelled"
                elif isinstance(e, NarratorError):
                    message = e.message
                else:
                    message = str(e) or type(e).__name__
                logger.error(f"Episode {episode.id} failed: {message}")
                try:
                    await self.store.mark_failed(episode.id, message)
                except Exception:
                    logger.exception(f"Could not record failure of episode {episode.id}")
                raise
        finally:
            self._in_flight.discard(episode.id)

    async def _run(
        self,
        episode_id: UUID,
        article,
        config: PodcastConfig,
        provider_name: TTSProviderName,
    ) -> GenerationResult:
        token = config.api_keys.get(provider_name)
        if not token:
            raise UpstreamProviderError(
                f"No API key found for provider: {provider_name.value}"
            )
        api_key = self.vault.decrypt(token)
        if not api_key:
            raise UpstreamProviderError(
                f"No API key found for provider: {provider_name.value}"
            )
        voice = config.voices.get(provider_name, "")

        provider = self.provider_factory(provider_name)
        text = sanitize(article.content)
        chunks = chunk(text, provider.max_chunk_bytes)
        if not chunks:
            raise ValidationError("Article has no speakable content")

        logger.info(f"Episode {episode_id}: {len(chunks)} chunk(s) to synthesize")
        audio_parts = await self._synthesize_chunks(provider, chunks, api_key, voice)

        audio = b"".join(audio_parts)
        file_size = len(audio)
        duration = estimate_duration(file_size)

        file_name = f"episode-{uuid4()}.mp3"
        audio_url = await self.storage.put(file_name, audio, "audio/mpeg")

        await self.store.mark_completed(
            episode_id,
            audio_url=audio_url,
            duration=duration,
            file_size=file_size,
            tts_provider=provider_name.value,
        )
        logger.info(
            f"Episode {episode_id}: completed ({file_size} bytes, ~{duration}s)"
        )

        return GenerationResult(
            episode_id=episode_id,
            status=EpisodeStatus.COMPLETED,
            audio_url=audio_url,
            duration=duration,
            file_size=file_size,
            tts_provider=provider_name.value,
            chunk_count=len(chunks),
        )

    async def _synthesize_chunks(
        self,
        provider: TTSProvider,
        chunks: Sequence[str],
        api_key: str,
        voice: str,
    ) -> List[bytes]:
        """Synthesize chunks one at a time, in text order."""
        parts = []
        for i, text in enumerate(chunks, start=1):
            try:
                audio = await asyncio.wait_for(
                    provider.synthesize(text, api_key, voice),
                    timeout=self.chunk_timeout,
                )
            except asyncio.TimeoutError:
                raise TTSProviderError(
                    provider.name.value,
                    f"Chunk {i}/{len(chunks)} timed out after {self.chunk_timeout:g}s",
                ) from None
            logger.debug(f"Chunk {i}/{len(chunks)}: {len(audio)} bytes")
            parts.append(audio)
        return parts

    async def generate_batch(
        self,
        article_ids: Sequence[UUID],
        config: ConfigSource,
        provider: Optional[str] = None,
    ) -> BatchResult:
        """Generate several episodes, at most ``max_concurrent`` at a time.

        A failing article never cancels the others.
        """
        config = await load_config(config)
        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def _one(article_id: UUID) -> BatchItemResult:
            async with semaphore:
                try:
                    await self.generate(article_id, config, provider)
                    return BatchItemResult(article_id=article_id, success=True)
                except NarratorError as e:
                    return BatchItemResult(article_id=article_id, success=False, error=e.message)
                except Exception as e:
                    logger.exception(f"Batch generation failed for article {article_id}")
                    return BatchItemResult(
                        article_id=article_id, success=False, error=str(e) or type(e).__name__
                    )

        results = await asyncio.gather(*(_one(article_id) for article_id in article_ids))
        batch = BatchResult(results=list(results))
        logger.info(f"Batch generation: {batch.success}/{batch.total} succeeded")
        return batch
