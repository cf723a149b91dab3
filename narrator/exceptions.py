"""Error taxonomy shared by the pipeline, services and API layer."""

from typing import Optional


class NarratorError(Exception):
    """Base error with an HTTP status and a short user-facing message."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"error": self.message, "details": self.details}


class ValidationError(NarratorError):
    """Bad input from the caller."""
    status_code = 400


class NotEditableError(NarratorError):
    """Article exists but was not entered as text."""
    status_code = 403


class NotFoundError(NarratorError):
    """Missing article, episode or settings row."""
    status_code = 404


class GenerationInProgressError(NarratorError):
    """Another generation run holds the same episode."""
    status_code = 409


class UpstreamProviderError(NarratorError):
    """TTS provider or object storage failure."""
    status_code = 500


class TTSProviderError(UpstreamProviderError):
    """Non-success answer (or timeout) from a text-to-speech provider."""

    def __init__(
        self,
        provider: str,
        message: str,
        status: Optional[int] = None,
        payload: Optional[str] = None,
    ):
        super().__init__(message, details=payload)
        self.provider = provider
        self.status = status
        self.payload = payload


class StorageError(UpstreamProviderError):
    """Object storage put/delete failure."""


class EncryptionError(NarratorError):
    """Credential could not be encrypted or decrypted."""
    status_code = 500


class PersistenceError(NarratorError):
    """Store write failure."""
    status_code = 500
