"""
Symmetric encryption of stored credentials.

Stored authorization values are encrypted with Fernet (AES-128-CBC with an
HMAC-SHA256 tag) using a key derived from the operator's encryption
password with PBKDF2-HMAC-SHA256. The salt is random per configuration file
and stored next to the data; the password itself is never written anywhere.

Example:
    >>> cipher = SecretCipher.from_password("s3cret", SecretCipher.new_salt())
    >>> token = cipher.encrypt("Basic dXNlcjpwYXNz")
    >>> cipher.decrypt(token)
    'Basic dXNlcjpwYXNz'
"""

from __future__ import annotations

import base64
import os

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from gemnexus.exceptions import ConfigError

PBKDF2_ITERATIONS = 390_000
SALT_BYTES = 16


class SecretCipher:
    """Encrypts and decrypts credential strings with a password-derived key."""

    def __init__(self, key: bytes) -> None:
        self._fernet = Fernet(key)

    @classmethod
    def from_password(cls, password: str, salt: bytes) -> SecretCipher:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=PBKDF2_ITERATIONS,
        )
        key = base64.urlsafe_b64encode(kdf.derive(password.encode("utf-8")))
        return cls(key)

    @staticmethod
    def new_salt() -> bytes:
        return os.urandom(SALT_BYTES)

    def encrypt(self, value: str) -> str:
        return self._fernet.encrypt(value.encode("utf-8")).decode("ascii")

    def decrypt(self, token: str) -> str:
        """Decrypt a stored token.

        Raises:
            ConfigError: If the token was not produced with this password.
        """
        try:
            return self._fernet.decrypt(token.encode("ascii")).decode("utf-8")
        except InvalidToken as err:
            raise ConfigError(
                "cannot decrypt stored credentials - wrong encryption password?"
            ) from err
