"""Audio and cover storage on Cloudflare R2 (S3-compatible)."""

import asyncio
import logging
from functools import partial
from typing import Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from narrator.config import settings
from narrator.exceptions import StorageError

logger = logging.getLogger(__name__)


class ObjectStorage(Protocol):
    """Public object store used for episode audio and cover images."""

    async def put(self, name: str, data: bytes, content_type: str) -> str: ...

    async def delete(self, name: str) -> None: ...


def file_name_from_url(url: str) -> str:
    """Object key of a public URL produced by ``R2Storage.put``."""
    if settings.R2_PUBLIC_URL and url.startswith(settings.R2_PUBLIC_URL.rstrip("/") + "/"):
        return url[len(settings.R2_PUBLIC_URL.rstrip("/")) + 1:]
    return url.rstrip("/").split("/")[-1]


class R2Storage:
    """boto3-backed object storage; blocking calls run in the default executor."""

    def __init__(
        self,
        bucket: Optional[str] = None,
        public_url: Optional[str] = None,
        client=None,
    ):
        self.bucket = bucket or settings.R2_BUCKET_NAME
        self.public_url = (public_url or settings.R2_PUBLIC_URL).rstrip("/")
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not settings.r2_configured:
                raise StorageError("Missing Cloudflare R2 configuration")

            self._client = boto3.client(
                "s3",
                endpoint_url=settings.R2_ENDPOINT_URL
                or f"https://{settings.R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
                aws_access_key_id=settings.R2_ACCESS_KEY_ID,
                aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY,
                region_name="auto",
            )
        return self._client

    async def _call(self, func, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, **kwargs))

    async def put(self, name: str, data: bytes, content_type: str = "audio/mpeg") -> str:
        """Upload bytes and return their public URL."""
        try:
            await self._call(
                self.client.put_object,
                Bucket=self.bucket,
                Key=name,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"R2 upload failed for {name}: {e}")
            raise StorageError("Failed to upload file to storage", details=str(e)) from e

        logger.info(f"Uploaded {name} ({len(data)} bytes, {content_type})")
        return f"{self.public_url}/{name}"

    async def delete(self, name: str) -> None:
        try:
            await self._call(self.client.delete_object, Bucket=self.bucket, Key=name)
        except (BotoCoreError, ClientError) as e:
            raise StorageError("Failed to delete file from storage", details=str(e)) from e
        logger.info(f"Deleted {name} from storage")


_storage: Optional[R2Storage] = None


def get_storage() -> R2Storage:
    """Get the shared storage instance."""
    global _storage

    if _storage is None:
        _storage = R2Storage()
    return _storage
