"""Credential vault: symmetric encryption of secrets at rest.

Ciphertexts are ``hex(nonce):hex(tag):hex(payload)`` produced by AES-256-GCM,
so any process configured with the same secret can decrypt them.
"""

import hashlib
import logging
import os
import re
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from envelopesync.domain.errors import (
    AuthenticationFailedError,
    ConfigurationError,
    InvalidCiphertextFormatError,
)

logger = logging.getLogger(__name__)

SECRET_ENV_VARS = ("ENVELOPESYNC_ENCRYPTION_KEY", "ENCRYPTION_KEY", "SESSION_SECRET")

KEY_LENGTH = 32
NONCE_LENGTH = 16
TAG_LENGTH = 16
DELIMITER = ":"

# encrypt writes lowercase hex only; any other spelling is a modified value
_HEX_PART = re.compile(r"[0-9a-f]+")

# Fixed salt and scrypt cost keep previously stored ciphertexts decryptable.
KDF_SALT = b"salt"
KDF_N = 16384
KDF_R = 8
KDF_P = 1


def derive_key(secret: str) -> bytes:
    """Derive the 256-bit cipher key from the configured secret with scrypt."""
    return hashlib.scrypt(
        secret.encode("utf-8"),
        salt=KDF_SALT,
        n=KDF_N,
        r=KDF_R,
        p=KDF_P,
        maxmem=64 * 1024 * 1024,
        dklen=KEY_LENGTH,
    )


class CredentialVault:
    """Encrypts and decrypts credentials such as SimpleFIN access URLs."""

    def __init__(self, secret: str):
        """Initialize the vault.

        Args:
            secret: Configured secret; the cipher key is derived from it once

        Raises:
            ConfigurationError: If the secret is empty
        """
        if not secret:
            raise ConfigurationError("Encryption secret must not be empty")
        self._aead = AESGCM(derive_key(secret))

    @classmethod
    def from_environment(cls) -> "CredentialVault":
        """Create a vault from the first secret found in the environment.

        Raises:
            ConfigurationError: If none of the secret variables is set
        """
        for name in SECRET_ENV_VARS:
            secret = os.environ.get(name)
            if secret:
                logger.debug(f"Credential vault keyed from {name}")
                return cls(secret)
        raise ConfigurationError(
            f"No encryption secret configured. Set one of: {', '.join(SECRET_ENV_VARS)}"
        )

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a string with a fresh random nonce."""
        nonce = secrets.token_bytes(NONCE_LENGTH)
        sealed = self._aead.encrypt(nonce, plaintext.encode("utf-8"), None)
        payload, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return DELIMITER.join((nonce.hex(), tag.hex(), payload.hex()))

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a string produced by :meth:`encrypt`.

        Raises:
            InvalidCiphertextFormatError: If the value is not three non-empty lowercase hex parts
            AuthenticationFailedError: If the authentication tag does not verify
        """
        parts = ciphertext.split(DELIMITER) if isinstance(ciphertext, str) else []
        if len(parts) != 3 or not all(_HEX_PART.fullmatch(part) for part in parts):
            raise InvalidCiphertextFormatError("Invalid encrypted data format")

        try:
            nonce, tag, payload = (bytes.fromhex(part) for part in parts)
        except ValueError as e:
            raise InvalidCiphertextFormatError(f"Invalid encrypted data format: {e}")

        if len(nonce) != NONCE_LENGTH or len(tag) != TAG_LENGTH:
            raise InvalidCiphertextFormatError("Invalid encrypted data format")

        try:
            plaintext = self._aead.decrypt(nonce, payload + tag, None)
        except InvalidTag:
            raise AuthenticationFailedError(
                "Encrypted data failed authentication (tampered data or wrong key)"
            )

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidCiphertextFormatError(f"Decrypted data is not valid UTF-8: {e}")
