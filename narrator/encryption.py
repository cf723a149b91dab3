"""Authenticated encryption of provider API keys at rest.

Token layout (base64 of the concatenation)::

    salt (64 bytes) | iv (16 bytes) | tag (16 bytes) | ciphertext

The AES-256-GCM key is derived per token from ENCRYPTION_KEY and the random
salt with PBKDF2-HMAC-SHA512, so encrypting the same key twice never gives
the same token. Every decryption failure raises the same error.
"""

import base64
import binascii
import logging
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from narrator.config import settings
from narrator.exceptions import EncryptionError

logger = logging.getLogger(__name__)

SALT_LENGTH = 64
IV_LENGTH = 16
TAG_LENGTH = 16
KEY_LENGTH = 32
PBKDF2_ITERATIONS = 100_000
MIN_TOKEN_LENGTH = SALT_LENGTH + IV_LENGTH + TAG_LENGTH

DECRYPTION_FAILED = "Decryption failed"


class CredentialVault:
    """Encrypts and decrypts secrets under one configured secret."""

    def __init__(self, secret: str):
        # Without a secret the vault is built but refuses to encrypt or decrypt
        self._secret = secret.ljust(KEY_LENGTH, "0").encode("utf-8") if secret else None

    def _derive_key(self, salt: bytes) -> bytes:
        if self._secret is None:
            raise EncryptionError("ENCRYPTION_KEY environment variable is not set")
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA512(),
            length=KEY_LENGTH,
            salt=salt,
            iterations=PBKDF2_ITERATIONS,
        )
        return kdf.derive(self._secret)

    def encrypt(self, plaintext: str) -> str:
        """Encrypt text and return a base64 token."""
        salt = os.urandom(SALT_LENGTH)
        iv = os.urandom(IV_LENGTH)
        sealed = AESGCM(self._derive_key(salt)).encrypt(
            iv, plaintext.encode("utf-8"), None
        )
        # AESGCM appends the tag; the token stores it before the ciphertext
        ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return base64.b64encode(salt + iv + tag + ciphertext).decode("ascii")

    def decrypt(self, token: str) -> str:
        """Decrypt a token produced by ``encrypt``.

        Raises:
            EncryptionError: malformed, truncated, tampered or foreign token,
                or ENCRYPTION_KEY unset
        """
        try:
            data = base64.b64decode(token.encode("ascii"), validate=True)
            if len(data) < MIN_TOKEN_LENGTH:
                raise ValueError("token too short")

            salt = data[:SALT_LENGTH]
            iv = data[SALT_LENGTH:SALT_LENGTH + IV_LENGTH]
            tag = data[SALT_LENGTH + IV_LENGTH:MIN_TOKEN_LENGTH]
            ciphertext = data[MIN_TOKEN_LENGTH:]

            plaintext = AESGCM(self._derive_key(salt)).decrypt(iv, ciphertext + tag, None)
            return plaintext.decode("utf-8")
        except (AttributeError, ValueError, binascii.Error, InvalidTag, UnicodeError):
            logger.warning("Credential decryption failed")
            raise EncryptionError(DECRYPTION_FAILED) from None


_vault: Optional[CredentialVault] = None
_vault_secret: Optional[str] = None


def get_vault() -> CredentialVault:
    """Get the process-wide vault for the configured ENCRYPTION_KEY."""
    global _vault, _vault_secret

    if _vault is None or _vault_secret != settings.ENCRYPTION_KEY:
        _vault = CredentialVault(settings.ENCRYPTION_KEY)
        _vault_secret = settings.ENCRYPTION_KEY
    return _vault


def encrypt(plaintext: str) -> str:
    return get_vault().encrypt(plaintext)


def decrypt(token: str) -> str:
    return get_vault().decrypt(token)
