"""Secret-keyed encryption used as token entropy."""

import hashlib

from jose import jwe
from jose.constants import ALGORITHMS

from userverify.config import settings


class TokenCipher:
    """Encrypts values with a key derived from the application secret.

    The ciphertext only feeds the token hash and is never decrypted.
    """

    def __init__(self, secret: str | None = None):
        secret = secret or settings.app_secret
        self._key = hashlib.sha256(secret.encode("utf-8")).digest()

    def encrypt(self, value: str) -> str:
        """Encrypt a value into a compact JWE string."""
        token = jwe.encrypt(
            value,
            self._key,
            algorithm=ALGORITHMS.DIR,
            encryption=ALGORITHMS.A256GCM,
        )
        return token.decode("ascii")
