"""Passphrase-based encryption of stored credentials.

The passphrase is stretched with PBKDF2-HMAC-SHA256 over a random per-record
salt, and the derived key drives a :class:`cryptography.fernet.Fernet`
cipher (AES-128-CBC with an HMAC-SHA256 authentication tag). The salt is
stored next to the ciphertext, so decrypting needs only the passphrase; the
passphrase itself is never written anywhere.
"""

from __future__ import annotations

import base64
import os
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from nexusgem.exceptions import DecryptionError

SALT_LENGTH_BYTES = 16
PBKDF2_ITERATIONS = 390_000


def new_salt() -> str:
    """Return a fresh random salt, base64-encoded for storage in JSON."""
    return base64.b64encode(os.urandom(SALT_LENGTH_BYTES)).decode("ascii")


class PassphraseCipher:
    """Encrypt and decrypt short strings with a passphrase-derived key.

    Args:
        passphrase: The user's encryption passphrase.
        salt: Base64 salt previously returned by :func:`new_salt`. A new
            one is generated when omitted; read it back from :attr:`salt`.
    """

    def __init__(self, passphrase: str, salt: Optional[str] = None) -> None:
        self.salt = salt or new_salt()
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=base64.b64decode(self.salt),
            iterations=PBKDF2_ITERATIONS,
        )
        key = base64.urlsafe_b64encode(kdf.derive(passphrase.encode("utf-8")))
        self._fernet = Fernet(key)

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt *ciphertext*.

        Raises:
            DecryptionError: If the passphrase is wrong or the ciphertext
                was tampered with.
        """
        try:
            return self._fernet.decrypt(ciphertext.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as exc:
            raise DecryptionError(
                "Cannot decrypt the stored Nexus credentials: wrong encryption "
                "password or corrupt config file"
            ) from exc
