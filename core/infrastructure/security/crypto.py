"""
Credential encryption at rest.

Application passwords are stored as Fernet tokens. Values written before
encryption was enabled are plain text; ``safe_decrypt`` passes those
through unchanged.
"""
import logging
from typing import Union

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class CredentialDecryptionError(Exception):
    """Token could not be decrypted with the configured key."""


class CredentialCipher:
    """Fernet wrapper bound to one key."""

    def __init__(self, key: Union[str, bytes]):
        if not key:
            raise ValueError("ENCRYPTION_KEY is not configured")
        self._fernet = Fernet(key.encode() if isinstance(key, str) else key)

    @staticmethod
    def generate_key() -> str:
        return Fernet.generate_key().decode()

    def encrypt(self, plain_text: str) -> str:
        return self._fernet.encrypt(plain_text.encode("utf-8")).decode("ascii")

    def decrypt(self, token: str) -> str:
        try:
            return self._fernet.decrypt(token.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as exc:
            raise CredentialDecryptionError("Stored credential could not be decrypted") from exc

    def is_encrypted(self, value: str) -> bool:
        try:
            self.decrypt(value)
        except CredentialDecryptionError:
            return False
        return True

    def safe_decrypt(self, value: str) -> str:
        """Decrypt a token, or return a legacy plain-text value as-is."""
        try:
            return self.decrypt(value)
        except CredentialDecryptionError:
            logger.warning("Credential is not a valid token; treating it as plain text")
            return value
