from .crypto import CredentialCipher, CredentialDecryptionError

__all__ = ["CredentialCipher", "CredentialDecryptionError"]
